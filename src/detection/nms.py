"""
Overlap metrics and non-maximum suppression for detections.
"""

from __future__ import annotations

from typing import List, Sequence

from models.detection import BoundingBox, Detection


def calculate_iou(bbox1: BoundingBox, bbox2: BoundingBox) -> float:
    """
    Calculate Intersection over Union (IoU) between two bounding boxes.

    Boxes with zero or negative area contribute no overlap, and a zero union
    (both boxes degenerate) yields 0.0.

    Args:
        bbox1: First bounding box
        bbox2: Second bounding box

    Returns:
        IoU value between 0 and 1
    """
    area1 = bbox1.area
    area2 = bbox2.area
    if area1 == 0 or area2 == 0:
        return 0.0

    intersection = bbox1.intersect(bbox2).area
    if intersection == 0:
        return 0.0

    union = area1 + area2 - intersection
    if union <= 0:
        return 0.0

    return intersection / union


def non_max_suppression(
    detections: Sequence[Detection],
    iou_threshold: float,
) -> List[Detection]:
    """
    Class-agnostic greedy NMS.

    Candidates are ordered by confidence (descending, stable for equal
    scores). The best remaining box is kept and every other remaining box
    with IoU >= iou_threshold against it is dropped, until none remain.

    Returns:
        Surviving detections, highest confidence first.
    """
    remaining = sorted(detections, key=lambda d: d.confidence, reverse=True)
    keep: List[Detection] = []

    while remaining:
        best = remaining[0]
        keep.append(best)
        remaining = [
            det for det in remaining[1:]
            if calculate_iou(best.bbox, det.bbox) < iou_threshold
        ]

    return keep
