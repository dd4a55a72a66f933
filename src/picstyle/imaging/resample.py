"""Nearest-neighbour resampling of a source region onto a new canvas."""

from __future__ import annotations

import logging

import numpy as np

from picstyle.errors import InvalidDimensions
from picstyle.imaging.buffer import PixelBuffer
from picstyle.imaging.geometry import Rect

logger = logging.getLogger(__name__)


def _source_indices(offset: int, extent: int, dst_extent: int) -> np.ndarray:
    # src = offset + floor(dst * extent / dst_extent), clamped to the region's last index.
    dst = np.arange(dst_extent, dtype=np.int64)
    src = offset + (dst * extent) // dst_extent
    return np.minimum(src, offset + extent - 1)


def resample(src: PixelBuffer, src_region: Rect | None, dst_w: int, dst_h: int) -> PixelBuffer:
    """Map ``src_region`` of ``src`` onto a fresh ``dst_w x dst_h`` buffer.

    Each destination pixel takes the value of the source pixel at
    ``region.x + floor(dst_x * region.width / dst_w)`` (and likewise for y).
    Coordinates that land past the region's edge clamp to its last row or
    column. ``None`` selects the whole source.

    Raises:
        InvalidDimensions: If the region leaves the source or the target is empty.
    """
    region = src_region or Rect.full(src.width, src.height)
    if not region.contained_in(src.width, src.height):
        raise InvalidDimensions(f"Region {region} is not inside a {src.width}x{src.height} buffer")
    if dst_w <= 0 or dst_h <= 0:
        raise InvalidDimensions(f"Target dimensions must be positive, got {dst_w}x{dst_h}")

    xs = _source_indices(region.x, region.width, dst_w)
    ys = _source_indices(region.y, region.height, dst_h)
    pixels = src.pixels[ys[:, np.newaxis], xs[np.newaxis, :]]

    logger.debug("Resampled %s of %dx%d to %dx%d", region, src.width, src.height, dst_w, dst_h)
    return PixelBuffer(dst_w, dst_h, np.ascontiguousarray(pixels))
