"""
Single-network object detector.

Pipeline per call:
    letterbox -> RGB/float/CHW tensor -> backend.run -> decode -> NMS

Decoding expects the raw YOLO-style head layout (1, num_attrs, num_preds)
where each prediction column holds cx, cy, w, h, objectness and then
num_attrs - 5 per-class scores. Objectness-only heads (num_attrs == 5) report
class 0.
"""

from __future__ import annotations

import logging
from typing import List, Optional

import numpy as np

from inference.backend import InferenceBackend
from models.config import ModelConfig
from models.detection import BoundingBox, Detection
from models.errors import ModelOutputError
from .base import Detector
from .letterbox import Letterbox, preprocess
from .nms import non_max_suppression

NUM_BOX_ATTRS = 5


class DetectionModel(Detector):
    """
    Owns one loaded detection network and turns images into detections.

    Thresholds and input size are fixed at construction. detect() does not
    modify its input and is deterministic for a given network and image.
    Sharing one instance across threads is safe only when the backend allows
    concurrent run() calls.
    """

    def __init__(
        self,
        path: str,
        input_width: int,
        input_height: int,
        confidence_threshold: float = 0.5,
        nms_threshold: float = 0.45,
        backend: Optional[InferenceBackend] = None,
    ):
        if input_width <= 0 or input_height <= 0:
            raise ValueError(
                f"Model input size must be positive, got {input_width}x{input_height}"
            )
        if not 0.0 <= confidence_threshold <= 1.0:
            raise ValueError(f"confidence_threshold must be in [0, 1], got {confidence_threshold}")
        if not 0.0 <= nms_threshold <= 1.0:
            raise ValueError(f"nms_threshold must be in [0, 1], got {nms_threshold}")

        self.path = path
        self.input_width = input_width
        self.input_height = input_height
        self.confidence_threshold = confidence_threshold
        self.nms_threshold = nms_threshold

        if backend is None:
            from inference.onnx_backend import OnnxConfig, OnnxRuntimeBackend

            backend = OnnxRuntimeBackend(OnnxConfig(model_path=path))
        self._backend = backend

    @classmethod
    def from_config(
        cls,
        cfg: ModelConfig,
        backend: Optional[InferenceBackend] = None,
    ) -> "DetectionModel":
        return cls(
            cfg.path,
            cfg.input_width,
            cfg.input_height,
            confidence_threshold=cfg.confidence_threshold,
            nms_threshold=cfg.nms_threshold,
            backend=backend,
        )

    def detect(self, image: np.ndarray) -> List[Detection]:
        """
        Detect objects in an image.

        Args:
            image: BGR (or grey/BGRA) image with positive dimensions.

        Returns:
            Deduplicated detections in the image's pixel space, highest
            confidence first. Empty when nothing clears the threshold.

        Raises:
            ModelOutputError: The network output does not match the expected layout.
        """
        height, width = image.shape[:2]
        tensor, transform = preprocess(image, self.input_width, self.input_height)
        output = self._backend.run(tensor)
        candidates = self._decode(np.asarray(output), transform, width, height)
        detections = non_max_suppression(candidates, self.nms_threshold)
        logging.debug(
            f"{self.path}: {len(candidates)} candidates, {len(detections)} after NMS"
        )
        return detections

    def _decode(
        self,
        output: np.ndarray,
        transform: Letterbox,
        width: int,
        height: int,
    ) -> List[Detection]:
        """Filter raw predictions and map them back onto the source image."""
        if output.ndim != 3 or output.shape[0] != 1 or output.shape[1] < NUM_BOX_ATTRS:
            raise ModelOutputError(
                f"{self.path}: expected output shape (1, >={NUM_BOX_ATTRS}, N), "
                f"got {tuple(output.shape)}"
            )

        preds = output[0].astype(np.float32, copy=False)
        num_attrs = preds.shape[0]

        # Cheap objectness rejection before any per-class work.
        objectness = preds[4]
        idx = np.flatnonzero(objectness >= self.confidence_threshold)
        if idx.size == 0:
            return []

        obj = objectness[idx]
        if num_attrs > NUM_BOX_ATTRS:
            class_conf = preds[NUM_BOX_ATTRS:, idx] * obj
            # argmax returns the first maximum, so ties go to the lowest class id.
            class_ids = np.argmax(class_conf, axis=0)
            scores = class_conf[class_ids, np.arange(idx.size)]
        else:
            class_ids = np.zeros(idx.size, dtype=np.int64)
            scores = obj

        passed = scores > self.confidence_threshold
        if not np.any(passed):
            return []

        idx = idx[passed]
        class_ids = class_ids[passed]
        scores = scores[passed]

        cx = preds[0, idx].astype(np.float64)
        cy = preds[1, idx].astype(np.float64)
        half_w = preds[2, idx].astype(np.float64) / 2
        half_h = preds[3, idx].astype(np.float64) / 2

        # Undo padding first, then scaling; truncate toward zero.
        r = transform.ratio
        x1 = np.trunc((cx - half_w - transform.pad_w) / r).astype(np.int64)
        y1 = np.trunc((cy - half_h - transform.pad_h) / r).astype(np.int64)
        x2 = np.trunc((cx + half_w - transform.pad_w) / r).astype(np.int64)
        y2 = np.trunc((cy + half_h - transform.pad_h) / r).astype(np.int64)
        # Negative w/h would invert the corners.
        x1, x2 = np.minimum(x1, x2), np.maximum(x1, x2)
        y1, y2 = np.minimum(y1, y2), np.maximum(y1, y2)

        detections: List[Detection] = []
        for i in range(idx.size):
            bbox = BoundingBox(
                x1=int(x1[i]), y1=int(y1[i]), x2=int(x2[i]), y2=int(y2[i])
            ).clip(width, height)
            detections.append(
                Detection(
                    bbox=bbox,
                    confidence=float(scores[i]),
                    class_id=int(class_ids[i]),
                )
            )
        return detections
