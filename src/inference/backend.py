"""
Inference backend interface.

A backend owns one loaded detection graph. It takes a single contiguous
float32 tensor shaped (1, 3, H, W) in channel-major RGB order and returns the
graph's first output tensor. The returned array's shape is the descriptor the
postprocessing step validates: (1, 5 + C, num_preds) for C classes, or
(1, 5, num_preds) for objectness-only graphs.

Concurrency: callers may only share a backend across threads if the concrete
implementation documents that run() is reentrant.
"""

from __future__ import annotations

from typing import Protocol

import numpy as np


class InferenceBackend(Protocol):
    def run(self, tensor: np.ndarray) -> np.ndarray:
        ...
