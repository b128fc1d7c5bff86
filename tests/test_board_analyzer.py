"""
Tests for cropping, grid mapping and the two-stage board analyzer.
"""

import numpy as np
import pytest

from analysis.board_analyzer import BoardAnalyzer, largest_detection, map_pieces
from analysis.crop import crop
from analysis.grid import pixel_to_cell, to_square_notation
from detection.base import Detector
from detection.model import DetectionModel
from models.board import PIECE_CLASSES
from models.config import AnalyzerConfig, ModelConfig
from models.detection import BoundingBox, Detection
from models.errors import ModelLoadError, UnknownPieceClassError


class ScriptedDetector(Detector):
    """Detector returning a fixed list and recording the images it saw."""

    def __init__(self, detections=None):
        self.detections = list(detections or [])
        self.images = []

    def detect(self, image):
        self.images.append(image)
        return list(self.detections)


class FakeBackend:
    def __init__(self, output):
        self.output = np.asarray(output, dtype=np.float32)

    def run(self, tensor):
        return self.output


def det(x1, y1, x2, y2, confidence=0.9, class_id=0):
    return Detection.from_xyxy(x1, y1, x2, y2, confidence=confidence, class_id=class_id)


def frame(width=640, height=480):
    rng = np.random.RandomState(0)
    return rng.randint(0, 255, (height, width, 3), dtype=np.uint8)


class TestCrop:
    def test_inside(self):
        image = frame()
        out = crop(image, BoundingBox(10, 20, 110, 70))
        assert out.shape == (50, 100, 3)
        np.testing.assert_array_equal(out, image[20:70, 10:110])

    def test_partially_outside_is_clipped(self):
        out = crop(frame(), BoundingBox(-10, -10, 100, 100))
        assert out.shape == (100, 100, 3)

    def test_fully_outside_is_empty(self):
        out = crop(frame(), BoundingBox(700, 500, 800, 600))
        assert out.size == 0

    def test_result_is_a_copy(self):
        image = frame()
        out = crop(image, BoundingBox(0, 0, 10, 10))
        out[:] = 0
        assert image[:10, :10].any()


class TestGrid:
    @pytest.mark.parametrize(
        "col,row,square",
        [(0, 0, "a8"), (7, 0, "h8"), (0, 7, "a1"), (7, 7, "h1"), (4, 6, "e2"), (3, 4, "d4")],
    )
    def test_square_notation(self, col, row, square):
        assert to_square_notation(col, row) == square

    @pytest.mark.parametrize("col,row", [(-1, 0), (8, 0), (0, 8), (0, -1)])
    def test_square_notation_out_of_range(self, col, row):
        with pytest.raises(ValueError):
            to_square_notation(col, row)

    def test_pixel_to_cell(self):
        assert pixel_to_cell(0, 0, 400, 400) == (0, 0)
        assert pixel_to_cell(49, 50, 400, 400) == (0, 1)
        assert pixel_to_cell(225, 325, 400, 400) == (4, 6)

    def test_far_corner_clamped(self):
        # 404 // 8 == 50, so x = 403 would be column 8 without clamping
        assert pixel_to_cell(403, 403, 404, 404) == (7, 7)
        assert pixel_to_cell(399, 399, 400, 400) == (7, 7)

    def test_negative_clamped(self):
        assert pixel_to_cell(-5, -5, 400, 400) == (0, 0)

    @pytest.mark.parametrize("size", [1, 2, 4, 6, 7, 8, 9, 15, 16, 17, 400, 403])
    def test_far_corner_is_h1_for_any_size(self, size):
        assert pixel_to_cell(size - 1, size - 1, size, size) == (7, 7)

    def test_tiny_board_spreads_pixels(self):
        assert pixel_to_cell(0, 0, 6, 6) == (0, 0)
        assert pixel_to_cell(2, 0, 6, 6) == (2, 0)
        assert pixel_to_cell(5, 30, 6, 80) == (7, 3)


class TestLargestDetection:
    def test_empty(self):
        assert largest_detection([]) is None

    def test_picks_largest_area(self):
        small = det(0, 0, 10, 10)
        big = det(0, 0, 50, 50, confidence=0.6)
        assert largest_detection([small, big]) is big

    def test_tie_keeps_first(self):
        first = det(0, 0, 20, 10)
        second = det(100, 100, 110, 120)
        assert largest_detection([first, second]) is first


class TestMapPieces:
    def test_maps_centers_to_squares(self):
        pieces = map_pieces(
            [det(205, 305, 245, 345, class_id=0), det(0, 0, 40, 40, class_id=9)],
            400,
            400,
        )
        assert [(p.name, p.square, p.grid) for p in pieces] == [
            ("wp", "e2", (4, 6)),
            ("br", "a8", (0, 0)),
        ]

    def test_keeps_detection_order(self):
        dets = [det(i * 50, 0, i * 50 + 40, 40, class_id=i) for i in range(8)]
        pieces = map_pieces(list(reversed(dets)), 400, 400)
        assert [p.name for p in pieces] == [PIECE_CLASSES[i] for i in reversed(range(8))]

    def test_unknown_class(self):
        with pytest.raises(UnknownPieceClassError):
            map_pieces([det(0, 0, 10, 10, class_id=12)], 400, 400)


class TestBoardAnalyzer:
    def test_no_board_skips_piece_detection(self):
        boards = ScriptedDetector([])
        pieces = ScriptedDetector([det(0, 0, 10, 10)])
        analyzer = BoardAnalyzer(boards, pieces)

        reading = analyzer.analyze(frame())

        assert reading.success is False
        assert reading.board_image is None
        assert reading.pieces == ()
        assert pieces.images == []

    def test_board_outside_frame_fails(self):
        boards = ScriptedDetector([det(700, 500, 800, 600)])
        pieces = ScriptedDetector()
        reading = BoardAnalyzer(boards, pieces).analyze(frame())

        assert reading.success is False
        assert pieces.images == []

    def test_largest_board_is_cropped(self):
        boards = ScriptedDetector([det(0, 0, 80, 80, 0.99), det(100, 50, 420, 370, 0.6)])
        pieces = ScriptedDetector()
        image = frame()

        reading = BoardAnalyzer(boards, pieces).analyze(image)

        assert reading.success is True
        assert reading.board_bbox == BoundingBox(100, 50, 420, 370)
        assert reading.board_image.shape == (320, 320, 3)
        np.testing.assert_array_equal(reading.board_image, image[50:370, 100:420])
        assert pieces.images[0].shape == (320, 320, 3)

    def test_board_image_is_independent_of_frame(self):
        image = frame()
        boards = ScriptedDetector([det(0, 0, 100, 100)])
        reading = BoardAnalyzer(boards, ScriptedDetector()).analyze(image)

        image[:] = 0

        assert reading.board_image.any()

    def test_pieces_in_board_coordinates(self):
        boards = ScriptedDetector([det(100, 50, 500, 450)])
        pieces = ScriptedDetector([
            det(205, 305, 245, 345, 0.8, class_id=0),
            det(5, 5, 45, 45, 0.7, class_id=11),
        ])

        reading = BoardAnalyzer(boards, pieces).analyze(frame())

        assert [(p.name, p.square) for p in reading.pieces] == [("wp", "e2"), ("bk", "a8")]
        assert reading.pieces[0].confidence == 0.8
        assert reading.placement() == "k7/8/8/8/8/8/4P3/8"

    def test_unknown_piece_class_propagates(self):
        boards = ScriptedDetector([det(0, 0, 400, 400)])
        pieces = ScriptedDetector([det(0, 0, 10, 10, class_id=42)])

        with pytest.raises(UnknownPieceClassError):
            BoardAnalyzer(boards, pieces).analyze(frame())

    def test_input_frame_not_mutated(self):
        image = frame()
        before = image.copy()
        boards = ScriptedDetector([det(10, 10, 300, 300)])
        BoardAnalyzer(boards, ScriptedDetector([det(0, 0, 20, 20)])).analyze(image)
        np.testing.assert_array_equal(image, before)

    def test_missing_model_files(self, tmp_path):
        pytest.importorskip("onnxruntime")
        config = AnalyzerConfig(
            board=ModelConfig(path=str(tmp_path / "board.onnx")),
            pieces=ModelConfig(path=str(tmp_path / "pieces.onnx")),
        )
        with pytest.raises(ModelLoadError):
            BoardAnalyzer(config=config)


class TestEndToEnd:
    """Both stages running through DetectionModel with scripted network outputs."""

    def test_single_white_pawn_on_e2(self):
        # Board network: 1280x640 frame letterboxed into 640x640 (ratio 0.5,
        # 160 px top padding). Box (400, 100)-(800, 500) in frame pixels.
        board_out = np.zeros((1, 6, 3), dtype=np.float32)
        board_out[0, :, 0] = (300, 310, 200, 200, 1.0, 0.9)
        board_out[0, :, 1] = (50, 200, 20, 20, 0.3, 1.0)

        # Piece network: 400x400 crop scaled 2x into 800x800, no padding.
        # Box (205, 305)-(245, 345) in crop pixels, class 0 (wp).
        piece_out = np.zeros((1, 5 + len(PIECE_CLASSES), 2), dtype=np.float32)
        piece_out[0, :5, 0] = (450, 650, 80, 80, 1.0)
        piece_out[0, 5, 0] = 0.8

        board_model = DetectionModel("board.onnx", 640, 640, backend=FakeBackend(board_out))
        piece_model = DetectionModel("pieces.onnx", 800, 800, backend=FakeBackend(piece_out))
        analyzer = BoardAnalyzer(board_model, piece_model)

        reading = analyzer.analyze(np.zeros((640, 1280, 3), dtype=np.uint8))

        assert reading.success is True
        assert reading.board_bbox == BoundingBox(400, 100, 800, 500)
        assert reading.board_image.shape == (400, 400, 3)
        assert len(reading.pieces) == 1
        piece = reading.pieces[0]
        assert piece.name == "wp"
        assert piece.square == "e2"
        assert piece.grid == (4, 6)
        assert piece.confidence == pytest.approx(0.8, abs=1e-6)

    def test_no_board_output(self):
        board_model = DetectionModel(
            "board.onnx", 640, 640, backend=FakeBackend(np.zeros((1, 6, 4)))
        )
        pieces = ScriptedDetector()
        reading = BoardAnalyzer(board_model, pieces).analyze(np.zeros((480, 640, 3), np.uint8))

        assert reading.success is False
        assert pieces.images == []
