"""
Image-file observation source.

Reads a fixed list of image files in order. Useful for replaying captured
screenshots through the analyzer.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass, field
from typing import List, Optional

import cv2

from models.frame import FrameData
from .base import ObservationSource, ObservationConfig


@dataclass
class ImageFileSourceConfig(ObservationConfig):
    """
    Attributes:
        paths: Image files to read, in order.
        loop: Restart from the first file after the last one.
    """
    paths: List[str] = field(default_factory=list)
    loop: bool = False


class ImageFileSource(ObservationSource):
    """Yields each readable image once (or forever when looping)."""

    def __init__(self, config: ImageFileSourceConfig):
        super().__init__(config)
        self._image_config = config
        self._pos = 0

    @property
    def is_exhausted(self) -> bool:
        return not self._image_config.loop and self._pos >= len(self._image_config.paths)

    def open(self) -> None:
        if self._is_open:
            return
        if not self._image_config.paths:
            raise RuntimeError("ImageFileSource needs at least one image path")
        self._pos = 0
        self._frame_index = 0
        self._is_open = True
        logging.info(
            f"ImageFileSource opened: source_id={self.source_id}, "
            f"{len(self._image_config.paths)} files"
        )

    def read(self) -> Optional[FrameData]:
        if not self._is_open:
            return None

        paths = self._image_config.paths
        attempts = 0
        while attempts < len(paths):
            if self._pos >= len(paths):
                if not self._image_config.loop:
                    return None
                self._pos = 0

            path = paths[self._pos]
            self._pos += 1
            attempts += 1

            frame = cv2.imread(path, cv2.IMREAD_COLOR) if os.path.isfile(path) else None
            if frame is None:
                logging.warning(f"Skipping unreadable image: {path}")
                continue

            self._frame_index += 1
            return FrameData.from_numpy(
                frame,
                timestamp=time.time(),
                frame_index=self._frame_index,
                source=path,
            )

        return None

    def close(self) -> None:
        self._is_open = False
