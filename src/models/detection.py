"""
Detection models for object detection results.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class BoundingBox:
    """
    An axis-aligned bounding box in integer pixel coordinates.

    Attributes:
        x1: Left edge x coordinate.
        y1: Top edge y coordinate.
        x2: Right edge x coordinate (exclusive).
        y2: Bottom edge y coordinate (exclusive).
    """
    x1: int
    y1: int
    x2: int
    y2: int

    @property
    def width(self) -> int:
        return self.x2 - self.x1

    @property
    def height(self) -> int:
        return self.y2 - self.y1

    @property
    def center(self) -> Tuple[int, int]:
        """Integer midpoint (truncating)."""
        return ((self.x1 + self.x2) // 2, (self.y1 + self.y2) // 2)

    @property
    def area(self) -> int:
        if self.width <= 0 or self.height <= 0:
            return 0
        return self.width * self.height

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def intersect(self, other: "BoundingBox") -> "BoundingBox":
        """Return the overlap of two boxes (may be empty)."""
        return BoundingBox(
            x1=max(self.x1, other.x1),
            y1=max(self.y1, other.y1),
            x2=min(self.x2, other.x2),
            y2=min(self.y2, other.y2),
        )

    def clip(self, width: int, height: int) -> "BoundingBox":
        """Clamp the box to an image of the given size."""
        return BoundingBox(
            x1=min(max(self.x1, 0), width),
            y1=min(max(self.y1, 0), height),
            x2=min(max(self.x2, 0), width),
            y2=min(max(self.y2, 0), height),
        )

    def as_tuple(self) -> Tuple[int, int, int, int]:
        """Return as (x1, y1, x2, y2) tuple."""
        return (self.x1, self.y1, self.x2, self.y2)


@dataclass(frozen=True)
class Detection:
    """
    A single filtered output of a detection network.

    Attributes:
        bbox: Bounding box in the pixel space of the image passed to detect().
        confidence: Final score (objectness times best class score), 0-1.
        class_id: Index of the best-scoring class (0 for class-free models).
    """
    bbox: BoundingBox
    confidence: float
    class_id: int = 0

    @property
    def x1(self) -> int:
        return self.bbox.x1

    @property
    def y1(self) -> int:
        return self.bbox.y1

    @property
    def x2(self) -> int:
        return self.bbox.x2

    @property
    def y2(self) -> int:
        return self.bbox.y2

    @property
    def center(self) -> Tuple[int, int]:
        return self.bbox.center

    @property
    def area(self) -> int:
        return self.bbox.area

    @classmethod
    def from_xyxy(
        cls,
        x1: int,
        y1: int,
        x2: int,
        y2: int,
        confidence: float,
        class_id: int = 0,
    ) -> "Detection":
        """Create Detection from x1, y1, x2, y2 coordinates."""
        return cls(
            bbox=BoundingBox(x1=x1, y1=y1, x2=x2, y2=y2),
            confidence=confidence,
            class_id=class_id,
        )

