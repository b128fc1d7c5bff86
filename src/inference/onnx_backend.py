"""
ONNX Runtime inference backend.

ONNX Runtime sessions allow concurrent run() calls, so one backend may be
shared by several threads.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

from models.errors import ModelLoadError, ModelOutputError
from .backend import InferenceBackend


@dataclass(frozen=True)
class OnnxConfig:
    model_path: str
    providers: Sequence[str] = field(default_factory=lambda: ("CPUExecutionProvider",))
    log_severity_level: int = 2  # warnings and above


class OnnxRuntimeBackend(InferenceBackend):
    def __init__(self, cfg: OnnxConfig):
        self.cfg = cfg
        try:
            import onnxruntime as ort  # type: ignore
        except Exception as e:  # pragma: no cover
            raise ImportError(
                "onnxruntime is not installed. Install with `pip install onnxruntime`."
            ) from e

        if not os.path.isfile(cfg.model_path):
            raise ModelLoadError(f"Model file not found: {cfg.model_path}")

        options = ort.SessionOptions()
        options.log_severity_level = cfg.log_severity_level
        try:
            self._session = ort.InferenceSession(
                cfg.model_path,
                sess_options=options,
                providers=list(cfg.providers),
            )
        except Exception as e:
            raise ModelLoadError(f"Failed to load model {cfg.model_path}: {e}") from e

        self._input_names = [i.name for i in self._session.get_inputs()]
        self._output_names = [o.name for o in self._session.get_outputs()]
        if not self._input_names or not self._output_names:
            raise ModelLoadError(
                f"Model {cfg.model_path} must declare at least one input and one output"
            )

        logging.info(
            f"ONNX model loaded: {cfg.model_path} "
            f"(inputs={self._input_names}, outputs={self._output_names})"
        )

    def run(self, tensor: np.ndarray) -> np.ndarray:
        outputs = self._session.run(
            self._output_names[:1],
            {self._input_names[0]: tensor},
        )
        if not outputs:
            raise ModelOutputError(f"Model {self.cfg.model_path} returned no outputs")
        return np.asarray(outputs[0])
