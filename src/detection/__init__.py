"""
Detection module: letterbox preprocessing, network decoding and NMS.
"""

from .base import Detector
from .model import DetectionModel
from .nms import calculate_iou, non_max_suppression

__all__ = ['Detector', 'DetectionModel', 'calculate_iou', 'non_max_suppression']
