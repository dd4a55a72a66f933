"""Edge overlay and source-over layering of same-size buffers."""

from __future__ import annotations

import numpy as np

from picstyle.errors import DimensionMismatch
from picstyle.imaging.buffer import PixelBuffer
from picstyle.imaging.edges import EdgeMask


def _check_same_size(first: PixelBuffer | EdgeMask, second: PixelBuffer | EdgeMask) -> None:
    if first.width != second.width or first.height != second.height:
        raise DimensionMismatch(
            f"Cannot combine {first.width}x{first.height} with {second.width}x{second.height}"
        )


def overlay_edges(buf: PixelBuffer, mask: EdgeMask) -> PixelBuffer:
    """Return a copy of ``buf`` with every masked pixel's RGB forced to black.

    Raises:
        DimensionMismatch: If the mask does not cover the buffer exactly.
    """
    _check_same_size(buf, mask)
    out = buf.copy()
    out.pixels[mask.mask, :3] = 0
    return out


def source_over_composite(dst: PixelBuffer, src: PixelBuffer) -> PixelBuffer:
    """Draw ``src`` over ``dst`` at the origin using Porter-Duff source-over.

    ``out_a = src_a + dst_a * (1 - src_a)`` and each color channel is the
    alpha-weighted blend divided by ``out_a``. Where ``src`` is opaque the
    result is exactly ``src``.

    Raises:
        DimensionMismatch: If the buffers differ in size.
    """
    _check_same_size(dst, src)

    src_a = src.alpha.astype(np.float64)[..., np.newaxis] / 255.0
    dst_a = dst.alpha.astype(np.float64)[..., np.newaxis] / 255.0
    out_a = src_a + dst_a * (1.0 - src_a)

    blended = src.rgb * src_a + dst.rgb * dst_a * (1.0 - src_a)
    with np.errstate(divide="ignore", invalid="ignore"):
        rgb = np.where(out_a > 0, blended / out_a, 0.0)

    pixels = np.empty_like(dst.pixels)
    pixels[..., :3] = np.clip(np.floor(rgb + 0.5), 0, 255).astype(np.uint8)
    pixels[..., 3] = np.clip(np.floor(out_a[..., 0] * 255.0 + 0.5), 0, 255).astype(np.uint8)
    return PixelBuffer(dst.width, dst.height, pixels)
