"""
Analysis engine: the sampling loop around BoardAnalyzer.

Reads frames from an ObservationSource, analyzes each one and hands the
reading to registered callbacks. Retrying after an empty reading is simply
the next sample; the analyzer itself never retries.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from analysis.board_analyzer import BoardAnalyzer
from models.board import BoardReading
from models.config import AnalyzerConfig, EngineConfig
from models.frame import FrameData
from observation import ObservationSource, create_source_from_config

ReadingCallback = Callable[[FrameData, BoardReading], None]


@dataclass
class EngineStats:
    """Runtime statistics for the engine."""
    frame_count: int = 0
    boards_found: int = 0
    pieces_seen: int = 0
    consecutive_failures: int = 0
    start_time: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "frame_count": self.frame_count,
            "boards_found": self.boards_found,
            "pieces_seen": self.pieces_seen,
            "uptime_seconds": round(time.time() - self.start_time, 1),
        }


class AnalysisEngine:
    """
    Samples frames and analyzes them one at a time.

    Each analyze() call completes before the next frame is read, so the
    engine never overlaps inference calls on its analyzer.

    Example:
        source = ScreenSource(ScreenSourceConfig(display=1))
        engine = AnalysisEngine(source, BoardAnalyzer(), EngineConfig(sample_interval=0.5))
        engine.add_callback(lambda fd, reading: print(reading.placement()))
        engine.run()
    """

    def __init__(
        self,
        source: ObservationSource,
        analyzer: BoardAnalyzer,
        config: Optional[EngineConfig] = None,
    ):
        self.source = source
        self.analyzer = analyzer
        self.config = config or EngineConfig()
        self.stats = EngineStats()
        self._running = False
        self._callbacks: List[ReadingCallback] = []

    def add_callback(self, callback: ReadingCallback) -> None:
        """
        Add a callback to be called after each frame is analyzed.

        Args:
            callback: Function taking (frame_data, reading) as arguments.
        """
        self._callbacks.append(callback)

    def run(self) -> EngineStats:
        """
        Run the sampling loop until stopped, exhausted or out of retries.

        Errors raised by the analyzer (model contract violations) abort the
        loop and propagate after the source is closed.
        """
        self._running = True
        self.stats = EngineStats()

        try:
            self.source.open()
            logging.info(f"Analysis engine started: source={self.source.source_id}")

            while self._running:
                frame_data = self.source.read()

                if frame_data is None:
                    if self.source.is_exhausted:
                        logging.info("Source exhausted")
                        break
                    self.stats.consecutive_failures += 1
                    if self.stats.consecutive_failures >= self.config.max_consecutive_failures:
                        logging.error(
                            f"Too many consecutive failures ({self.stats.consecutive_failures}), stopping"
                        )
                        break
                    logging.warning(
                        f"Frame read failed ({self.stats.consecutive_failures}/"
                        f"{self.config.max_consecutive_failures})"
                    )
                    self._sleep()
                    continue

                self.stats.consecutive_failures = 0
                self.process_frame(frame_data)

                if self.config.max_frames is not None and self.stats.frame_count >= self.config.max_frames:
                    break

                self._sleep()

        except KeyboardInterrupt:
            logging.info("Analysis engine interrupted by user")
        finally:
            self.source.close()
            self._running = False
            logging.info(f"Analysis engine stopped: {self.stats.to_dict()}")

        return self.stats

    def stop(self) -> None:
        """Signal the engine to stop after the current frame."""
        self._running = False

    def process_frame(self, frame_data: FrameData) -> BoardReading:
        """Analyze one frame, update stats and notify callbacks."""
        self.stats.frame_count += 1
        try:
            reading = self.analyzer.analyze(frame_data.frame)
        except Exception as e:
            logging.error(f"Analysis failed on frame {frame_data.frame_index}: {e}")
            raise

        if reading.success:
            self.stats.boards_found += 1
            self.stats.pieces_seen += len(reading.pieces)
            logging.debug(
                f"[BOARD] frame={frame_data.frame_index} pieces={len(reading.pieces)} "
                f"placement={reading.placement()}"
            )
        else:
            logging.debug(f"[BOARD] frame={frame_data.frame_index} no board")

        for callback in self._callbacks:
            try:
                callback(frame_data, reading)
            except Exception as e:
                logging.warning(f"Callback error: {e}")

        return reading

    def _sleep(self) -> None:
        if self.config.sample_interval > 0 and self._running:
            time.sleep(self.config.sample_interval)


def create_engine_from_config(
    config: Dict[str, Any],
    analyzer: Optional[BoardAnalyzer] = None,
    source: Optional[ObservationSource] = None,
) -> AnalysisEngine:
    """
    Factory: build an engine from the full config dict.

    Args:
        config: Full application config dict.
        analyzer: Prebuilt analyzer (built from config['analyzer'] if None).
        source: Prebuilt source (built from config['capture'] if None).
    """
    if analyzer is None:
        analyzer = BoardAnalyzer(config=AnalyzerConfig.from_dict(config.get("analyzer", {})))
    if source is None:
        source = create_source_from_config(config.get("capture", {}))
    return AnalysisEngine(source, analyzer, EngineConfig.from_dict(config.get("engine", {})))
