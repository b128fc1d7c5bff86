"""
Observation layer for pluggable frame sources.

This layer abstracts where frames come from (a display, image files) from the
analysis engine. Each source implements the ObservationSource interface and
returns FrameData objects.
"""

from typing import Any, Dict

from .base import ObservationSource, ObservationConfig
from .image_source import ImageFileSource, ImageFileSourceConfig
from .recorder import FrameRecorder
from .screen_source import (
    DisplayInfo,
    ScreenSource,
    ScreenSourceConfig,
    find_display,
    list_displays,
)


def create_source_from_config(capture_cfg: Dict[str, Any], source_id: str = "capture") -> ObservationSource:
    """
    Factory: build a source from the `capture` config section.

    Args:
        capture_cfg: Capture configuration dict (backend, display, images).
        source_id: Identifier for this source.
    """
    backend = capture_cfg.get("backend", "screen")
    if backend == "screen":
        return ScreenSource(ScreenSourceConfig(
            source_id=source_id,
            display=capture_cfg.get("display"),
        ))
    if backend == "images":
        return ImageFileSource(ImageFileSourceConfig(
            source_id=source_id,
            paths=list(capture_cfg.get("images") or []),
            loop=bool(capture_cfg.get("loop", False)),
        ))
    raise ValueError(f"Unknown capture backend: {backend}")


__all__ = [
    "ObservationSource",
    "ObservationConfig",
    "ImageFileSource",
    "ImageFileSourceConfig",
    "FrameRecorder",
    "DisplayInfo",
    "ScreenSource",
    "ScreenSourceConfig",
    "find_display",
    "list_displays",
    "create_source_from_config",
]
