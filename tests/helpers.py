"""Synthetic buffers and encoded images shared by the test modules."""

from __future__ import annotations

import io

import numpy as np
from PIL import Image

from picstyle.imaging.buffer import PixelBuffer


def solid_buffer(width: int, height: int, rgba: tuple[int, int, int, int]) -> PixelBuffer:
    return PixelBuffer.blank(width, height, rgba)


def split_buffer(width: int, height: int, left: tuple[int, int, int], right: tuple[int, int, int]) -> PixelBuffer:
    """Left half ``left``, right half ``right``, fully opaque."""
    buf = PixelBuffer.blank(width, height, (*left, 255))
    buf.pixels[:, width // 2 :, :3] = right
    return buf


def encode_image(array: np.ndarray, fmt: str = "PNG") -> bytes:
    out = io.BytesIO()
    Image.fromarray(array).save(out, format=fmt)
    return out.getvalue()
