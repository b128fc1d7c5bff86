"""
Typed configuration models matching the YAML config structure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

DEFAULT_BOARD_MODEL = "models/board_detector.onnx"
DEFAULT_PIECE_MODEL = "models/piece_detector.onnx"


@dataclass(frozen=True)
class ModelConfig:
    """Detection network configuration. Fixed once a model is built."""
    path: str
    input_width: int = 640
    input_height: int = 640
    confidence_threshold: float = 0.5
    nms_threshold: float = 0.45

    @classmethod
    def from_dict(cls, d: Dict[str, Any], default_path: str = "") -> "ModelConfig":
        return cls(
            path=d.get("path", default_path),
            input_width=d.get("input_width", 640),
            input_height=d.get("input_height", 640),
            confidence_threshold=d.get("confidence_threshold", 0.5),
            nms_threshold=d.get("nms_threshold", 0.45),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "input_width": self.input_width,
            "input_height": self.input_height,
            "confidence_threshold": self.confidence_threshold,
            "nms_threshold": self.nms_threshold,
        }


@dataclass
class AnalyzerConfig:
    """Board analyzer configuration: one network for boards, one for pieces."""
    board: ModelConfig = field(default_factory=lambda: ModelConfig(path=DEFAULT_BOARD_MODEL))
    pieces: ModelConfig = field(default_factory=lambda: ModelConfig(path=DEFAULT_PIECE_MODEL))

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "AnalyzerConfig":
        return cls(
            board=ModelConfig.from_dict(d.get("board", {}), DEFAULT_BOARD_MODEL),
            pieces=ModelConfig.from_dict(d.get("pieces", {}), DEFAULT_PIECE_MODEL),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "board": self.board.to_dict(),
            "pieces": self.pieces.to_dict(),
        }


@dataclass
class CaptureConfig:
    """Frame source configuration."""
    backend: str = "screen"
    display: Union[int, str, None] = None
    images: List[str] = field(default_factory=list)
    loop: bool = False

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CaptureConfig":
        return cls(
            backend=d.get("backend", "screen"),
            display=d.get("display"),
            images=list(d.get("images") or []),
            loop=d.get("loop", False),
        )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"backend": self.backend}
        if self.display is not None:
            d["display"] = self.display
        if self.images:
            d["images"] = self.images
        if self.loop:
            d["loop"] = self.loop
        return d


@dataclass
class EngineConfig:
    """Sampling loop configuration."""
    sample_interval: float = 1.0
    max_consecutive_failures: int = 10
    max_frames: Optional[int] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "EngineConfig":
        return cls(
            sample_interval=d.get("sample_interval", 1.0),
            max_consecutive_failures=d.get("max_consecutive_failures", 10),
            max_frames=d.get("max_frames"),
        )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "sample_interval": self.sample_interval,
            "max_consecutive_failures": self.max_consecutive_failures,
        }
        if self.max_frames is not None:
            d["max_frames"] = self.max_frames
        return d


@dataclass
class Config:
    """
    Complete application configuration.

    This is a typed representation of the YAML config structure.
    """
    analyzer: AnalyzerConfig = field(default_factory=AnalyzerConfig)
    capture: CaptureConfig = field(default_factory=CaptureConfig)
    engine: EngineConfig = field(default_factory=EngineConfig)
    log_path: str = "logs/chess_vision.log"
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Config":
        """Adapter: Create Config from raw dictionary (e.g., from load_config)."""
        return cls(
            analyzer=AnalyzerConfig.from_dict(d.get("analyzer", {})),
            capture=CaptureConfig.from_dict(d.get("capture", {})),
            engine=EngineConfig.from_dict(d.get("engine", {})),
            log_path=d.get("log_path", "logs/chess_vision.log"),
            log_level=d.get("log_level", "INFO"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to dictionary (for saving or logging)."""
        return {
            "analyzer": self.analyzer.to_dict(),
            "capture": self.capture.to_dict(),
            "engine": self.engine.to_dict(),
            "log_path": self.log_path,
            "log_level": self.log_level,
        }
