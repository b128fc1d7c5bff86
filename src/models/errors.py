"""
Error taxonomy for the board extraction pipeline.

"Nothing found" outcomes (no board, no pieces, empty crop) are represented as
results, never as exceptions. Exceptions here mean the pipeline cannot produce
a trustworthy answer for the current frame.
"""

from __future__ import annotations


class ChessVisionError(Exception):
    """Base class for pipeline errors."""


class ModelLoadError(ChessVisionError, RuntimeError):
    """A detection network could not be loaded or its backend initialised."""


class ModelOutputError(ChessVisionError, ValueError):
    """The network produced a tensor that does not match the expected layout."""


class UnknownPieceClassError(ChessVisionError, LookupError):
    """The piece network reported a class index outside the piece vocabulary."""

    def __init__(self, class_id: int, num_classes: int):
        super().__init__(
            f"Piece class id {class_id} is outside the vocabulary (0..{num_classes - 1})"
        )
        self.class_id = class_id
