"""
Bounds-safe cropping.
"""

from __future__ import annotations

import numpy as np

from models.detection import BoundingBox


def crop(image: np.ndarray, roi: BoundingBox) -> np.ndarray:
    """
    Crop an image to a region of interest, with bounds checking.

    The ROI is intersected with the image bounds and the result is a copy, so
    it outlives the source frame. An ROI that misses the image entirely yields
    an empty array (size 0) instead of raising.
    """
    height, width = image.shape[:2]
    safe = roi.intersect(BoundingBox(0, 0, width, height))
    if safe.is_empty:
        return np.empty((0, 0) + image.shape[2:], dtype=image.dtype)

    return image[safe.y1:safe.y2, safe.x1:safe.x2].copy()
