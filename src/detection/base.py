"""
Detection interfaces.

We keep this lightweight so the analyzer can run against any detector:
- ONNX detection graphs (DetectionModel)
- scripted fakes in tests
"""

from __future__ import annotations

from typing import List

import numpy as np

from models.detection import Detection


class Detector:
    """Detector interface returning detections in the input image's pixel space."""

    def detect(self, image: np.ndarray) -> List[Detection]:
        raise NotImplementedError
