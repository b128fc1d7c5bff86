"""
Pipeline module for the chess vision system.

The pipeline orchestrates the sampling flow:
- Frame acquisition from observation sources
- Board analysis (board detection, crop, piece detection, grid mapping)
- Delivery of readings to callbacks
"""

from .engine import AnalysisEngine, EngineStats, create_engine_from_config

__all__ = [
    "AnalysisEngine",
    "EngineStats",
    "create_engine_from_config",
]
