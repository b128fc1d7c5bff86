"""
Pytest configuration and shared fixtures.
"""

import os
import sys

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))


@pytest.fixture
def temp_config_dir(tmp_path):
    """Create a temporary config directory with default.yaml."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()

    default_yaml = config_dir / "default.yaml"
    default_yaml.write_text("""
analyzer:
  board:
    path: "models/board_detector.onnx"
    input_width: 640
    input_height: 640
  pieces:
    path: "models/piece_detector.onnx"
    input_width: 640
    input_height: 640

capture:
  backend: "screen"
  display: 1

engine:
  sample_interval: 1.0

log_path: "logs/test.log"
log_level: "INFO"
""")

    return config_dir


@pytest.fixture
def valid_config():
    """Return a valid configuration dictionary."""
    return {
        "analyzer": {
            "board": {
                "path": "models/board_detector.onnx",
                "input_width": 640,
                "input_height": 640,
                "confidence_threshold": 0.5,
                "nms_threshold": 0.45,
            },
            "pieces": {
                "path": "models/piece_detector.onnx",
                "input_width": 640,
                "input_height": 640,
                "confidence_threshold": 0.5,
                "nms_threshold": 0.45,
            },
        },
        "capture": {
            "backend": "screen",
            "display": 1,
        },
        "engine": {
            "sample_interval": 0.5,
            "max_consecutive_failures": 5,
        },
        "log_path": "logs/test.log",
        "log_level": "INFO",
    }
