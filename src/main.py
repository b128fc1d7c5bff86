"""
Chess vision: board-state extraction from screen captures.

Samples frames from a display (or image files), locates the chessboard,
detects the pieces on it and prints one JSON reading per frame.

Usage:
    python src/main.py --config config/config.yaml
    python src/main.py --image screenshot.png
    python src/main.py --list-displays

Arguments:
    --config: Path to configuration file
    --image: Analyze the given image file(s) instead of capturing a display
    --display: Display index or name to capture
    --frames: Stop after this many frames
    --interval: Seconds between samples
    --list-displays: Print available displays and exit
"""

import os
import sys
import json
import argparse
import logging
import yaml
from typing import Dict, Any, Tuple, Optional

from analysis.board_analyzer import BoardAnalyzer
from models.board import BoardReading
from models.config import AnalyzerConfig
from models.errors import ChessVisionError
from models.frame import FrameData
from observation import list_displays
from ops.logging import setup_logging
from pipeline.engine import create_engine_from_config

VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base and return base."""
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _deep_merge(base[k], v)
        else:
            base[k] = v
    return base


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration with layering:
    - `config/default.yaml` (checked in)
    - `config/config.yaml` (local overrides)
    - plus any explicitly provided `--config` path (treated as overrides)
    """
    try:
        base_path = os.path.join(os.path.dirname(config_path), "default.yaml")
        base_cfg: Dict[str, Any] = {}
        if os.path.exists(base_path):
            with open(base_path, "r") as f:
                base_cfg = yaml.safe_load(f) or {}

        local_overrides_path = os.path.join(os.path.dirname(config_path), "config.yaml")
        local_cfg: Dict[str, Any] = {}
        if os.path.exists(local_overrides_path):
            with open(local_overrides_path, "r") as f:
                local_cfg = yaml.safe_load(f) or {}

        merged = _deep_merge(base_cfg, local_cfg)

        # Finally apply explicit config_path if it's not the local override file itself
        if os.path.exists(config_path) and os.path.abspath(config_path) != os.path.abspath(local_overrides_path):
            with open(config_path, "r") as f:
                explicit_cfg = yaml.safe_load(f) or {}
            merged = _deep_merge(merged, explicit_cfg)

        return merged
    except Exception as e:
        logging.error(f"Failed to load configuration: {e}")
        sys.exit(1)


def _validate_model(name: str, model: Any) -> Optional[str]:
    if not isinstance(model, dict):
        return f"analyzer.{name} must be a mapping"
    if 'path' not in model or not isinstance(model['path'], str) or not model['path']:
        return f"analyzer.{name}.path is required"
    for key in ('input_width', 'input_height'):
        if key in model and (not isinstance(model[key], int) or model[key] <= 0):
            return f"analyzer.{name}.{key} must be a positive integer"
    for key in ('confidence_threshold', 'nms_threshold'):
        if key in model:
            value = model[key]
            if not isinstance(value, (int, float)) or not (0 <= value <= 1):
                return f"analyzer.{name}.{key} must be between 0 and 1"
    return None


def validate_config(config: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate configuration structure and values.

    Args:
        config: Configuration dictionary

    Returns:
        Tuple of (is_valid, error_message)
    """
    required_sections = ['analyzer', 'capture', 'log_path', 'log_level']
    for section in required_sections:
        if section not in config:
            return False, f"Missing required configuration section: {section}"

    # Validate analyzer models
    analyzer = config.get('analyzer') or {}
    for name in ('board', 'pieces'):
        if name not in analyzer:
            return False, f"Missing analyzer.{name}"
        error = _validate_model(name, analyzer[name])
        if error:
            return False, error

    # Validate capture settings
    capture = config.get('capture') or {}
    backend = capture.get('backend', 'screen')
    if backend not in ('screen', 'images'):
        return False, "capture.backend must be one of: screen, images"
    if backend == 'screen':
        display = capture.get('display')
        if display is not None and not isinstance(display, (int, str)):
            return False, "capture.display must be an integer (index) or string (name)"
        if isinstance(display, int) and display < 1:
            return False, "capture.display index must be 1 or greater"
    if backend == 'images':
        images = capture.get('images')
        if not isinstance(images, list) or not images:
            return False, "capture.images must be a non-empty list when capture.backend is 'images'"

    # Optional engine settings
    engine = config.get('engine', {}) or {}
    if 'sample_interval' in engine:
        interval = engine['sample_interval']
        if not isinstance(interval, (int, float)) or interval < 0:
            return False, "engine.sample_interval must be a non-negative number"
    if 'max_consecutive_failures' in engine:
        mcf = engine['max_consecutive_failures']
        if not isinstance(mcf, int) or mcf <= 0:
            return False, "engine.max_consecutive_failures must be a positive integer"
    if engine.get('max_frames') is not None:
        mf = engine['max_frames']
        if not isinstance(mf, int) or mf <= 0:
            return False, "engine.max_frames must be a positive integer"

    # Validate log settings
    if config['log_level'] not in VALID_LOG_LEVELS:
        return False, f"log_level must be one of: {', '.join(VALID_LOG_LEVELS)}"

    return True, None


def apply_cli_overrides(config: Dict[str, Any], args: argparse.Namespace) -> Dict[str, Any]:
    """Fold command-line switches into the loaded config."""
    capture = config.setdefault('capture', {})
    engine = config.setdefault('engine', {})

    if args.image:
        capture['backend'] = 'images'
        capture['images'] = list(args.image)
        # replay files back to back
        engine['sample_interval'] = 0
    if args.display is not None:
        capture['backend'] = 'screen'
        capture['display'] = int(args.display) if args.display.isdigit() else args.display
    if args.frames is not None:
        engine['max_frames'] = args.frames
    if args.interval is not None:
        engine['sample_interval'] = args.interval
    return config


def print_reading(frame_data: FrameData, reading: BoardReading) -> None:
    record = {"frame": frame_data.frame_index, "source": frame_data.source}
    record.update(reading.to_dict())
    print(json.dumps(record), flush=True)


def main():
    """Main application function."""
    parser = argparse.ArgumentParser(description='Chess vision - board state extraction')
    parser.add_argument('--config', type=str, default='config/config.yaml',
                        help='Path to configuration file')
    parser.add_argument('--image', type=str, nargs='+',
                        help='Analyze image file(s) instead of capturing a display')
    parser.add_argument('--display', type=str,
                        help='Display index or name to capture')
    parser.add_argument('--frames', type=int,
                        help='Stop after this many frames')
    parser.add_argument('--interval', type=float,
                        help='Seconds between samples')
    parser.add_argument('--list-displays', action='store_true',
                        help='Print available displays and exit')
    args = parser.parse_args()

    if args.list_displays:
        for d in list_displays():
            primary = " (primary)" if d.is_primary else ""
            print(f"{d.index}: {d.name} {d.width}x{d.height}+{d.left}+{d.top}{primary}")
        return

    # Load configuration
    config = apply_cli_overrides(load_config(args.config), args)

    # Validate configuration
    is_valid, error_msg = validate_config(config)
    if not is_valid:
        logging.error(f"Configuration validation failed: {error_msg}")
        sys.exit(1)

    # Setup logging
    setup_logging(config['log_path'], config['log_level'])
    logging.info("Starting chess vision")

    try:
        analyzer = BoardAnalyzer(config=AnalyzerConfig.from_dict(config['analyzer']))
    except ChessVisionError as e:
        logging.error(f"Failed to load detection models: {e}")
        sys.exit(1)

    engine = create_engine_from_config(config, analyzer=analyzer)
    engine.add_callback(print_reading)

    try:
        stats = engine.run()
    except ChessVisionError as e:
        logging.error(f"Analysis aborted: {e}")
        sys.exit(2)

    logging.info(f"Done: {stats.to_dict()}")


if __name__ == "__main__":
    main()
