"""
Background frame recorder.

Runs an observation source on a worker thread and pushes every frame to a
callback, for callers that want frames delivered instead of polling read().
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from models.frame import FrameData
from .base import ObservationSource

FrameCallback = Callable[[FrameData], None]


class FrameRecorder:
    """
    Example:
        recorder = FrameRecorder(ScreenSource(ScreenSourceConfig(display=1)))
        recorder.start(lambda fd: queue.put(fd))
        ...
        recorder.stop()
    """

    def __init__(self, source: ObservationSource, interval: float = 0.0):
        self.source = source
        self.interval = interval
        self._callback: Optional[FrameCallback] = None
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

    @property
    def is_recording(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self, callback: FrameCallback) -> bool:
        """
        Open the source and start delivering frames.

        Returns:
            False if already recording, True once the worker is running.

        Raises:
            Whatever the source's open() raises.
        """
        if self.is_recording:
            logging.warning("FrameRecorder already recording")
            return False

        self.source.open()
        self._callback = callback
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._capture_loop, daemon=True)
        self._thread.start()
        logging.info(f"FrameRecorder started: source={self.source.source_id}")
        return True

    def stop(self, timeout: float = 5.0) -> None:
        """Stop delivering frames and close the source. Idempotent."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None
            logging.info(f"FrameRecorder stopped: source={self.source.source_id}")
        self.source.close()

    def _capture_loop(self) -> None:
        while not self._stop_event.is_set():
            frame_data = self.source.read()
            if frame_data is None:
                logging.info("FrameRecorder source exhausted")
                break
            try:
                self._callback(frame_data)
            except Exception as e:
                logging.warning(f"Frame callback error: {e}")
            if self.interval > 0:
                self._stop_event.wait(self.interval)
