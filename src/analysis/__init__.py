"""
Board analysis: cropping, grid mapping and the two-stage analyzer.
"""

from .board_analyzer import BoardAnalyzer, largest_detection, map_pieces
from .crop import crop
from .grid import pixel_to_cell, to_square_notation

__all__ = [
    "BoardAnalyzer",
    "largest_detection",
    "map_pieces",
    "crop",
    "pixel_to_cell",
    "to_square_notation",
]
