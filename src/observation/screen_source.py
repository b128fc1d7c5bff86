"""
Screen-capture observation source.

Uses mss to enumerate displays and grab frames. mss reports a virtual
"all displays" monitor at index 0; physical displays start at index 1 and
the first of them is treated as the primary display.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

import cv2
import numpy as np

from models.frame import FrameData
from .base import ObservationSource, ObservationConfig


@dataclass(frozen=True)
class DisplayInfo:
    """A physical display as reported by the capture library."""
    index: int
    name: str
    left: int
    top: int
    width: int
    height: int
    is_primary: bool = False

    def as_monitor(self) -> Dict[str, int]:
        return {"left": self.left, "top": self.top, "width": self.width, "height": self.height}


def _display_from_monitor(index: int, monitor: Dict[str, Any]) -> DisplayInfo:
    return DisplayInfo(
        index=index,
        name=str(monitor.get("name") or f"display-{index}"),
        left=int(monitor["left"]),
        top=int(monitor["top"]),
        width=int(monitor["width"]),
        height=int(monitor["height"]),
        is_primary=index == 1,
    )


def list_displays() -> List[DisplayInfo]:
    """Enumerate physical displays (index 1..N)."""
    import mss

    with mss.mss() as sct:
        return [
            _display_from_monitor(i, mon)
            for i, mon in enumerate(sct.monitors)
            if i > 0
        ]


def find_display(
    displays: List[DisplayInfo],
    selector: Union[int, str, None] = None,
) -> Optional[DisplayInfo]:
    """
    Pick a display by index or name; None selects the primary display.

    Returns None when nothing matches.
    """
    if selector is None:
        for display in displays:
            if display.is_primary:
                return display
        return displays[0] if displays else None

    if isinstance(selector, int):
        for display in displays:
            if display.index == selector:
                return display
        return None

    for display in displays:
        if display.name == selector:
            return display
    return None


@dataclass
class ScreenSourceConfig(ObservationConfig):
    """
    Configuration for screen capture.

    Attributes:
        display: Display index (1-based), display name, or None for primary.
    """
    display: Union[int, str, None] = None


class ScreenSource(ObservationSource):
    """
    Grabs frames from one display as BGR arrays.

    Example:
        with ScreenSource(ScreenSourceConfig(source_id="screen", display=1)) as source:
            frame_data = source.read()
    """

    def __init__(self, config: ScreenSourceConfig):
        super().__init__(config)
        self._screen_config = config
        self._sct = None
        self._display: Optional[DisplayInfo] = None

    @property
    def display(self) -> Optional[DisplayInfo]:
        return self._display

    def open(self) -> None:
        if self._is_open:
            return

        import mss

        sct = mss.mss()
        displays = [
            _display_from_monitor(i, mon)
            for i, mon in enumerate(sct.monitors)
            if i > 0
        ]
        display = find_display(displays, self._screen_config.display)
        if display is None:
            sct.close()
            raise ValueError(
                f"Display {self._screen_config.display!r} not found "
                f"(available: {[d.index for d in displays]})"
            )

        self._sct = sct
        self._display = display
        self._is_open = True
        self._frame_index = 0
        logging.info(
            f"ScreenSource opened: source_id={self.source_id}, display={display.index} "
            f"({display.width}x{display.height})"
        )

    def read(self) -> Optional[FrameData]:
        if not self._is_open or self._sct is None or self._display is None:
            return None

        try:
            shot = self._sct.grab(self._display.as_monitor())
        except Exception as e:
            logging.error(f"Screen capture failed on display {self._display.index}: {e}")
            return None

        frame = cv2.cvtColor(np.asarray(shot), cv2.COLOR_BGRA2BGR)
        self._frame_index += 1
        return FrameData.from_numpy(
            frame,
            timestamp=time.time(),
            frame_index=self._frame_index,
            source=self.source_id,
        )

    def close(self) -> None:
        if self._sct is not None:
            self._sct.close()
            self._sct = None
        if self._is_open:
            logging.info(f"ScreenSource closed: source_id={self.source_id}")
        self._is_open = False
