"""
Board reading models: the piece vocabulary and per-frame analysis results.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from .detection import BoundingBox
from .errors import UnknownPieceClassError

# Piece network class order: white then black, pawn/knight/bishop/rook/queen/king.
PIECE_CLASSES: Tuple[str, ...] = (
    "wp", "wn", "wb", "wr", "wq", "wk",
    "bp", "bn", "bb", "br", "bq", "bk",
)

BOARD_SIZE = 8


def piece_name(class_id: int) -> str:
    """Look up the piece name for a piece-network class index."""
    if not 0 <= class_id < len(PIECE_CLASSES):
        raise UnknownPieceClassError(class_id, len(PIECE_CLASSES))
    return PIECE_CLASSES[class_id]


def fen_symbol(name: str) -> str:
    """'wp' -> 'P', 'bk' -> 'k'."""
    color, kind = name[0], name[1]
    return kind.upper() if color == "w" else kind.lower()


@dataclass(frozen=True)
class PieceReading:
    """
    A labeled, localized chess piece.

    Attributes:
        name: Piece name from PIECE_CLASSES (e.g. "wp", "bk").
        square: Algebraic notation square ("a1".."h8").
        grid: (col, row) with row 0 at the top of the board image.
        confidence: Detector score for this piece.
    """
    name: str
    square: str
    grid: Tuple[int, int]
    confidence: float = 1.0

    @property
    def col(self) -> int:
        return self.grid[0]

    @property
    def row(self) -> int:
        return self.grid[1]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "square": self.square,
            "grid": list(self.grid),
            "confidence": round(float(self.confidence), 4),
        }


@dataclass
class BoardReading:
    """
    Result of one analysis pass over a frame.

    Attributes:
        success: False when no board was located.
        board_image: Cropped board pixels (an owned copy), None on failure.
        pieces: Piece readings in detection order (not board order).
        board_bbox: Selected board box in frame coordinates, None on failure.
    """
    success: bool = False
    board_image: Optional[np.ndarray] = None
    pieces: Tuple[PieceReading, ...] = field(default_factory=tuple)
    board_bbox: Optional[BoundingBox] = None

    @classmethod
    def failed(cls) -> "BoardReading":
        """A reading for a frame with no usable board."""
        return cls(success=False, board_image=None, pieces=(), board_bbox=None)

    def piece_at(self, square: str) -> Optional[PieceReading]:
        """Highest-confidence piece reported on a square, if any."""
        candidates = [p for p in self.pieces if p.square == square]
        if not candidates:
            return None
        return max(candidates, key=lambda p: p.confidence)

    def placement(self) -> str:
        """
        Render the FEN piece-placement field (rank 8 first).

        When several pieces map to one square the most confident one wins.
        Returns an empty string for a failed reading.
        """
        if not self.success:
            return ""

        grid: List[List[Optional[PieceReading]]] = [
            [None] * BOARD_SIZE for _ in range(BOARD_SIZE)
        ]
        for piece in self.pieces:
            current = grid[piece.row][piece.col]
            if current is None or piece.confidence > current.confidence:
                grid[piece.row][piece.col] = piece

        ranks = []
        for row in grid:
            out = ""
            empty = 0
            for piece in row:
                if piece is None:
                    empty += 1
                    continue
                if empty:
                    out += str(empty)
                    empty = 0
                out += fen_symbol(piece.name)
            if empty:
                out += str(empty)
            ranks.append(out)
        return "/".join(ranks)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly summary (the board image is summarised by its size)."""
        d: Dict[str, Any] = {
            "success": self.success,
            "pieces": [p.to_dict() for p in self.pieces],
        }
        if self.success:
            d["placement"] = self.placement()
        if self.board_bbox is not None:
            d["board_bbox"] = list(self.board_bbox.as_tuple())
        if self.board_image is not None:
            h, w = self.board_image.shape[:2]
            d["board_size"] = [w, h]
        return d
