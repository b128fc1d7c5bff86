"""
Single-frame board analysis: find the board, crop it, find and place pieces.

Steps per frame:
    board detector -> largest box -> crop -> piece detector -> grid mapping

The analyzer keeps no per-call state. Concurrent analyze() calls on one
instance are safe only if both detectors' backends accept concurrent
inference; otherwise serialise calls or build one analyzer per thread.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

import numpy as np

from detection.base import Detector
from detection.model import DetectionModel
from models.board import BoardReading, PieceReading, piece_name
from models.config import AnalyzerConfig
from models.detection import Detection
from .crop import crop
from .grid import pixel_to_cell, to_square_notation


def largest_detection(detections: Sequence[Detection]) -> Optional[Detection]:
    """
    Pick the detection with the largest box area.

    Only a strictly larger area replaces the current pick, so exact ties keep
    the first detection in input order.
    """
    best: Optional[Detection] = None
    for det in detections:
        if best is None or det.area > best.area:
            best = det
    return best


def map_pieces(
    detections: Sequence[Detection],
    board_width: int,
    board_height: int,
) -> List[PieceReading]:
    """
    Turn piece detections on a cropped board into readings, keeping their order.

    Raises:
        UnknownPieceClassError: A detection's class id is not a piece class.
    """
    pieces: List[PieceReading] = []
    for det in detections:
        cx, cy = det.center
        col, row = pixel_to_cell(cx, cy, board_width, board_height)
        pieces.append(
            PieceReading(
                name=piece_name(det.class_id),
                square=to_square_notation(col, row),
                grid=(col, row),
                confidence=det.confidence,
            )
        )
    return pieces


class BoardAnalyzer:
    """
    Owns a board detector and a piece detector.

    Example:
        analyzer = BoardAnalyzer()
        reading = analyzer.analyze(frame)
        if reading.success:
            print(reading.placement())
    """

    def __init__(
        self,
        board_detector: Optional[Detector] = None,
        piece_detector: Optional[Detector] = None,
        config: Optional[AnalyzerConfig] = None,
    ):
        self.config = config or AnalyzerConfig()
        if board_detector is None:
            board_detector = DetectionModel.from_config(self.config.board)
        if piece_detector is None:
            piece_detector = DetectionModel.from_config(self.config.pieces)
        self._board_detector = board_detector
        self._piece_detector = piece_detector

    def analyze(self, image: np.ndarray) -> BoardReading:
        """
        Analyze one frame.

        Returns:
            BoardReading with success=False (no image, no pieces) when no usable
            board is found; otherwise the cropped board and its pieces.
        """
        boards = self._board_detector.detect(image)
        if not boards:
            logging.debug("No board detected")
            return BoardReading.failed()

        board = largest_detection(boards)
        board_image = crop(image, board.bbox)
        if board_image.size == 0:
            logging.debug(f"Board box {board.bbox.as_tuple()} lies outside the frame")
            return BoardReading.failed()

        board_h, board_w = board_image.shape[:2]
        piece_detections = self._piece_detector.detect(board_image)
        pieces = map_pieces(piece_detections, board_w, board_h)

        logging.debug(
            f"Board at {board.bbox.as_tuple()} ({board.confidence:.2f}), "
            f"{len(pieces)} pieces"
        )
        return BoardReading(
            success=True,
            board_image=board_image,
            pieces=tuple(pieces),
            board_bbox=board.bbox,
        )
