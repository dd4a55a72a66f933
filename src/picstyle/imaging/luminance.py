"""Perceptual luminance of an RGBA buffer."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from picstyle.imaging.buffer import PixelBuffer

LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114], dtype=np.float64)


def to_luminance(buf: PixelBuffer) -> NDArray[np.uint8]:
    """Return an ``(height, width)`` uint8 intensity map; alpha is ignored.

    ``L = 0.299 R + 0.587 G + 0.114 B``, rounded half up and clamped to 0..255.
    """
    weighted = buf.rgb.astype(np.float64) @ LUMA_WEIGHTS
    return np.clip(np.floor(weighted + 0.5), 0, 255).astype(np.uint8)
