"""Cartoon styling: saturation boost followed by color-level quantization."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from picstyle.imaging.edges import GRADIENT_THRESHOLD

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from picstyle.imaging.buffer import PixelBuffer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StyleParameters:
    """Caller-supplied styling knobs, fixed for one invocation."""

    saturation_factor: float = 0.5
    quantization_step: int = 32
    edge_threshold: int = GRADIENT_THRESHOLD

    def __post_init__(self) -> None:
        if not self.saturation_factor > 0:
            raise ValueError(f"saturation_factor must be > 0, got {self.saturation_factor}")
        if not 1 <= self.quantization_step <= 255:
            raise ValueError(f"quantization_step must be in 1..255, got {self.quantization_step}")
        if self.edge_threshold < 0:
            raise ValueError(f"edge_threshold must be >= 0, got {self.edge_threshold}")


def _boost(rgb: NDArray[np.float64], factor: float) -> NDArray[np.float64]:
    avg = rgb.mean(axis=-1, keepdims=True)
    return rgb + (rgb - avg) * factor


def _quantize(rgb: NDArray[np.float64], step: int) -> NDArray[np.float64]:
    # Levels are clamped to the grid, so 255 snaps to the top multiple of step, not to 255.
    top_level = 255 // step
    levels = np.clip(np.floor(rgb / step + 0.5), 0, top_level)
    return levels * step


def _store(buf: PixelBuffer, rgb: NDArray[np.float64]) -> None:
    buf.pixels[..., :3] = np.clip(np.floor(rgb + 0.5), 0, 255).astype(np.uint8)


def boost_saturation(buf: PixelBuffer, factor: float) -> None:
    """Push each channel away from the pixel's gray level, in place."""
    _store(buf, _boost(buf.rgb.astype(np.float64), factor))


def quantize_colors(buf: PixelBuffer, step: int) -> None:
    """Snap each channel to the nearest multiple of ``step``, in place."""
    _store(buf, _quantize(buf.rgb.astype(np.float64), step))


def apply_cartoon_style(buf: PixelBuffer, params: StyleParameters | None = None) -> None:
    """Boost saturation then quantize, in place. Alpha is untouched.

    Per channel ``c`` of a pixel with mean ``avg = (R + G + B) / 3``::

        c'  = c + (c - avg) * saturation_factor
        c'' = round(c' / step) * step

    The intermediate value stays in floating point; only the final level is
    clamped and written back.
    """
    params = params or StyleParameters()
    boosted = _boost(buf.rgb.astype(np.float64), params.saturation_factor)
    _store(buf, _quantize(boosted, params.quantization_step))
    logger.debug(
        "Cartoon style on %dx%d (saturation=%s, step=%d)",
        buf.width,
        buf.height,
        params.saturation_factor,
        params.quantization_step,
    )
