"""
Mapping from board-image pixels to the 8x8 grid and algebraic squares.

Orientation precondition: the board image is presented with White at the
bottom, i.e. row 0 is the top of the image and rank 8, column 0 is file a.
Nothing here checks the orientation against the image; a board rotated by 180
degrees produces mirrored square labels.
"""

from __future__ import annotations

from typing import Tuple

from models.board import BOARD_SIZE

FILES = "abcdefgh"


def _clamp(value: int) -> int:
    return min(max(value, 0), BOARD_SIZE - 1)


def _axis_index(value: int, size: int) -> int:
    square = size // BOARD_SIZE
    if square > 0:
        return _clamp(value // square)
    # Fewer pixels than squares: stretch the first pixel to 0 and the last to 7.
    if size <= 1:
        return BOARD_SIZE - 1
    return _clamp(value * (BOARD_SIZE - 1) // (size - 1))


def pixel_to_cell(
    x: int,
    y: int,
    board_width: int,
    board_height: int,
) -> Tuple[int, int]:
    """
    Map a pixel in the board image to (col, row), both clamped to [0, 7].

    Squares are board_width // 8 by board_height // 8 pixels. On an axis
    shorter than 8 pixels the pixels are spread evenly over the 8 indices, so
    the last pixel still lands on index 7.
    """
    return _axis_index(x, board_width), _axis_index(y, board_height)


def to_square_notation(col: int, row: int) -> str:
    """(0, 0) -> 'a8', (7, 7) -> 'h1'."""
    if not (0 <= col < BOARD_SIZE and 0 <= row < BOARD_SIZE):
        raise ValueError(f"Grid cell out of range: ({col}, {row})")
    return f"{FILES[col]}{BOARD_SIZE - row}"
