"""
Letterbox preprocessing for fixed-size detection networks.

The frame is scaled by a single ratio so it fits the network input without
distortion, then padded symmetrically with a constant colour. The ratio and
padding are kept so network-space coordinates can be mapped back onto the
original frame.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

import cv2
import numpy as np

PAD_COLOR = (114, 114, 114)


@dataclass(frozen=True)
class Letterbox:
    """
    Forward transform applied to a frame.

    Attributes:
        ratio: Uniform scale factor (may exceed 1 when upscaling).
        pad_w: Pixels of padding on the left edge.
        pad_h: Pixels of padding on the top edge.
    """
    ratio: float
    pad_w: int
    pad_h: int

    def to_source(self, x: float, y: float) -> Tuple[float, float]:
        """Map a network-space point back onto the original frame."""
        return ((x - self.pad_w) / self.ratio, (y - self.pad_h) / self.ratio)

    def to_network(self, x: float, y: float) -> Tuple[float, float]:
        """Map an original-frame point into network space."""
        return (x * self.ratio + self.pad_w, y * self.ratio + self.pad_h)


def _round_half_away(value: float) -> int:
    return int(math.floor(value + 0.5))


def ensure_bgr(image: np.ndarray) -> np.ndarray:
    """Return a 3-channel BGR view/copy of a grey, BGR or BGRA image."""
    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
    channels = image.shape[2]
    if channels == 1:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
    if channels == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2BGR)
    if channels == 3:
        return image
    raise ValueError(f"Unsupported channel count: {channels}")


def letterbox(
    image: np.ndarray,
    input_width: int,
    input_height: int,
    color: Tuple[int, int, int] = PAD_COLOR,
) -> Tuple[np.ndarray, Letterbox]:
    """
    Resize and pad an image to exactly input_width x input_height.

    Args:
        image: BGR image with positive width and height.
        input_width: Network input width.
        input_height: Network input height.
        color: Padding colour.

    Returns:
        (padded image, Letterbox transform)
    """
    height, width = image.shape[:2]
    if width <= 0 or height <= 0:
        raise ValueError(f"Cannot letterbox an empty image ({width}x{height})")

    ratio = min(input_width / width, input_height / height)
    new_w = min(max(_round_half_away(width * ratio), 1), input_width)
    new_h = min(max(_round_half_away(height * ratio), 1), input_height)

    pad_w = (input_width - new_w) // 2
    pad_h = (input_height - new_h) // 2

    resized = cv2.resize(image, (new_w, new_h), interpolation=cv2.INTER_LINEAR)
    padded = cv2.copyMakeBorder(
        resized,
        pad_h,
        input_height - new_h - pad_h,
        pad_w,
        input_width - new_w - pad_w,
        cv2.BORDER_CONSTANT,
        value=color,
    )
    return padded, Letterbox(ratio=ratio, pad_w=pad_w, pad_h=pad_h)


def to_tensor(image: np.ndarray) -> np.ndarray:
    """
    Pack a letterboxed BGR image as a contiguous (1, 3, H, W) float32 tensor.

    Channels are reordered to RGB, values scaled to [0, 1] and laid out
    channel-major.
    """
    rgb = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
    chw = rgb.astype(np.float32).transpose(2, 0, 1) / 255.0
    return np.ascontiguousarray(chw[np.newaxis, ...], dtype=np.float32)


def preprocess(
    image: np.ndarray,
    input_width: int,
    input_height: int,
) -> Tuple[np.ndarray, Letterbox]:
    """Letterbox and pack an image for inference."""
    padded, transform = letterbox(ensure_bgr(image), input_width, input_height)
    return to_tensor(padded), transform
