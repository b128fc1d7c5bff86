"""
Smoke tests for typed models.
"""

import time
import pytest
import numpy as np

from models.frame import FrameData
from models.detection import Detection, BoundingBox
from models.board import PIECE_CLASSES, PieceReading, BoardReading, piece_name, fen_symbol
from models.errors import UnknownPieceClassError, ChessVisionError
from models.config import Config, AnalyzerConfig, ModelConfig, CaptureConfig, EngineConfig


class TestBoundingBox:
    def test_properties(self):
        bbox = BoundingBox(x1=100, y1=100, x2=200, y2=150)
        assert bbox.width == 100
        assert bbox.height == 50
        assert bbox.center == (150, 125)
        assert bbox.area == 5000

    def test_center_truncates(self):
        bbox = BoundingBox(x1=0, y1=0, x2=5, y2=3)
        assert bbox.center == (2, 1)

    def test_degenerate_area_is_zero(self):
        assert BoundingBox(10, 10, 10, 50).area == 0
        assert BoundingBox(10, 10, 5, 50).area == 0
        assert BoundingBox(10, 10, 5, 50).is_empty

    def test_intersect(self):
        a = BoundingBox(0, 0, 10, 10)
        b = BoundingBox(5, 5, 15, 15)
        assert a.intersect(b) == BoundingBox(5, 5, 10, 10)
        assert a.intersect(BoundingBox(20, 20, 30, 30)).is_empty

    def test_clip(self):
        bbox = BoundingBox(-10, -5, 700, 500)
        assert bbox.clip(640, 480) == BoundingBox(0, 0, 640, 480)

    def test_clip_fully_outside(self):
        bbox = BoundingBox(700, 10, 800, 50).clip(640, 480)
        assert bbox.is_empty


class TestDetection:
    def test_from_xyxy(self):
        det = Detection.from_xyxy(10, 20, 30, 40, confidence=0.9, class_id=2)
        assert det.x1 == 10
        assert det.y2 == 40
        assert det.confidence == 0.9
        assert det.class_id == 2
        assert det.area == 400

    def test_is_immutable(self):
        det = Detection.from_xyxy(0, 0, 1, 1, confidence=0.5)
        with pytest.raises(Exception):
            det.confidence = 0.1


class TestPieceVocabulary:
    def test_twelve_classes_in_order(self):
        assert len(PIECE_CLASSES) == 12
        assert PIECE_CLASSES[:6] == ("wp", "wn", "wb", "wr", "wq", "wk")
        assert PIECE_CLASSES[6:] == ("bp", "bn", "bb", "br", "bq", "bk")

    def test_piece_name(self):
        assert piece_name(0) == "wp"
        assert piece_name(11) == "bk"

    @pytest.mark.parametrize("class_id", [-1, 12, 99])
    def test_piece_name_out_of_range(self, class_id):
        with pytest.raises(UnknownPieceClassError) as exc:
            piece_name(class_id)
        assert exc.value.class_id == class_id
        assert isinstance(exc.value, ChessVisionError)

    def test_fen_symbol(self):
        assert fen_symbol("wp") == "P"
        assert fen_symbol("bk") == "k"
        assert fen_symbol("wn") == "N"


class TestBoardReading:
    def test_failed(self):
        reading = BoardReading.failed()
        assert reading.success is False
        assert reading.board_image is None
        assert reading.pieces == ()
        assert reading.placement() == ""

    def test_placement_empty_board(self):
        reading = BoardReading(success=True, board_image=np.zeros((8, 8, 3), np.uint8))
        assert reading.placement() == "8/8/8/8/8/8/8/8"

    def test_placement(self):
        pieces = (
            PieceReading("bk", "e8", (4, 0)),
            PieceReading("wp", "e2", (4, 6)),
            PieceReading("wk", "e1", (4, 7)),
            PieceReading("wr", "h1", (7, 7)),
        )
        reading = BoardReading(success=True, pieces=pieces)
        assert reading.placement() == "4k3/8/8/8/8/8/4P3/4K2R"

    def test_placement_prefers_confident_duplicate(self):
        pieces = (
            PieceReading("wn", "a8", (0, 0), confidence=0.6),
            PieceReading("bn", "a8", (0, 0), confidence=0.9),
        )
        reading = BoardReading(success=True, pieces=pieces)
        assert reading.placement().startswith("n7/")
        assert reading.piece_at("a8").name == "bn"
        assert reading.piece_at("h1") is None

    def test_to_dict(self):
        reading = BoardReading(
            success=True,
            board_image=np.zeros((40, 80, 3), np.uint8),
            pieces=(PieceReading("wq", "d1", (3, 7), confidence=0.87654),),
            board_bbox=BoundingBox(10, 20, 90, 60),
        )
        d = reading.to_dict()
        assert d["success"] is True
        assert d["board_bbox"] == [10, 20, 90, 60]
        assert d["board_size"] == [80, 40]
        assert d["pieces"] == [
            {"name": "wq", "square": "d1", "grid": [3, 7], "confidence": 0.8765}
        ]
        assert d["placement"] == "8/8/8/8/8/8/8/3Q4"

    def test_to_dict_failed(self):
        assert BoardReading.failed().to_dict() == {"success": False, "pieces": []}


class TestFrameData:
    def test_from_numpy(self):
        frame = np.zeros((480, 640, 3), dtype=np.uint8)
        ts = time.time()
        fd = FrameData.from_numpy(frame, timestamp=ts, frame_index=42)

        assert fd.width == 640
        assert fd.height == 480
        assert fd.frame_index == 42
        assert fd.source is None


class TestConfigModels:
    def test_defaults(self):
        config = Config()
        assert config.analyzer.board.path == "models/board_detector.onnx"
        assert config.analyzer.pieces.path == "models/piece_detector.onnx"
        assert config.analyzer.board.confidence_threshold == 0.5
        assert config.analyzer.board.nms_threshold == 0.45
        assert config.capture.backend == "screen"
        assert config.engine.max_frames is None

    def test_from_dict(self, valid_config):
        config = Config.from_dict(valid_config)
        assert config.analyzer.pieces.input_width == 640
        assert config.capture.display == 1
        assert config.engine.sample_interval == 0.5
        assert config.log_level == "INFO"

    def test_partial_model_section_keeps_default_path(self):
        cfg = AnalyzerConfig.from_dict({"board": {"input_width": 320}})
        assert cfg.board.path == "models/board_detector.onnx"
        assert cfg.board.input_width == 320
        assert cfg.pieces == ModelConfig(path="models/piece_detector.onnx")

    def test_model_config_is_frozen(self):
        cfg = ModelConfig(path="x.onnx")
        with pytest.raises(Exception):
            cfg.input_width = 10

    def test_to_dict_roundtrip(self, valid_config):
        config = Config.from_dict(valid_config)
        again = Config.from_dict(config.to_dict())
        assert again == config

    def test_capture_images(self):
        cfg = CaptureConfig.from_dict({"backend": "images", "images": ["a.png"], "loop": True})
        assert cfg.to_dict() == {"backend": "images", "images": ["a.png"], "loop": True}

    def test_engine_max_frames(self):
        cfg = EngineConfig.from_dict({"max_frames": 3})
        assert cfg.to_dict()["max_frames"] == 3
