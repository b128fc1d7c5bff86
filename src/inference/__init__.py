"""
Inference backends that execute detection graphs.
"""

from .backend import InferenceBackend
from .onnx_backend import OnnxConfig, OnnxRuntimeBackend

__all__ = ["InferenceBackend", "OnnxConfig", "OnnxRuntimeBackend"]
