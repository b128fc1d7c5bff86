"""
Typed models for the chess vision pipeline.
"""

from .frame import FrameData
from .detection import Detection, BoundingBox
from .board import PIECE_CLASSES, PieceReading, BoardReading, piece_name
from .errors import (
    ChessVisionError,
    ModelLoadError,
    ModelOutputError,
    UnknownPieceClassError,
)
from .config import (
    Config,
    AnalyzerConfig,
    ModelConfig,
    CaptureConfig,
    EngineConfig,
)

__all__ = [
    # Frame
    "FrameData",
    # Detection
    "Detection",
    "BoundingBox",
    # Board
    "PIECE_CLASSES",
    "PieceReading",
    "BoardReading",
    "piece_name",
    # Errors
    "ChessVisionError",
    "ModelLoadError",
    "ModelOutputError",
    "UnknownPieceClassError",
    # Config
    "Config",
    "AnalyzerConfig",
    "ModelConfig",
    "CaptureConfig",
    "EngineConfig",
]
