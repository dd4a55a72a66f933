"""Edge detection in two modes.

Sparse stroke mode samples luminance on a coarse grid and marks a short
diagonal stroke wherever the sample is dark; it drives the outline artifact.
Dense gradient mode compares the left/right and up/down neighbours of every
interior pixel; it drives the colored illustration.

The constants below are part of the visible output and must not be tuned.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from picstyle.errors import DimensionMismatch

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from picstyle.imaging.buffer import PixelBuffer

logger = logging.getLogger(__name__)

STROKE_STRIDE = 5
STROKE_THRESHOLD = 100
STROKE_LENGTH = 2

GRADIENT_THRESHOLD = 100


@dataclass(eq=False)
class EdgeMask:
    """Boolean ``(height, width)`` map of pixels to be drawn as edges."""

    width: int
    height: int
    mask: NDArray[np.bool_]

    def __post_init__(self) -> None:
        if self.mask.shape != (self.height, self.width):
            raise DimensionMismatch(f"Mask shape {self.mask.shape} does not match {self.width}x{self.height}")

    @property
    def count(self) -> int:
        """Number of marked pixels."""
        return int(np.count_nonzero(self.mask))


def stroke_origins(
    luma: NDArray[np.uint8],
    stride: int = STROKE_STRIDE,
    threshold: int = STROKE_THRESHOLD,
) -> list[tuple[int, int]]:
    """Return ``(x, y)`` grid samples whose luminance is below ``threshold``.

    The grid starts at the origin and steps ``stride`` pixels along each axis.
    Points are ordered column by column.
    """
    samples = luma[::stride, ::stride]
    rows, cols = np.nonzero(samples < threshold)
    order = np.lexsort((rows, cols))
    return [(int(cols[i]) * stride, int(rows[i]) * stride) for i in order]


def sparse_stroke_mask(
    luma: NDArray[np.uint8],
    stride: int = STROKE_STRIDE,
    threshold: int = STROKE_THRESHOLD,
    length: int = STROKE_LENGTH,
) -> EdgeMask:
    """Mark a ``length``-pixel diagonal stroke from every dark grid sample.

    A stroke starting at ``(x, y)`` covers ``(x + k, y + k)`` for
    ``0 <= k < length``; parts falling off the canvas are clipped.
    """
    height, width = luma.shape
    mask = np.zeros((height, width), dtype=np.bool_)
    origins = stroke_origins(luma, stride=stride, threshold=threshold)
    for x, y in origins:
        for k in range(length):
            if x + k < width and y + k < height:
                mask[y + k, x + k] = True

    logger.debug("Sparse stroke pass on %dx%d: %d strokes", width, height, len(origins))
    return EdgeMask(width, height, mask)


def dense_edge_mask(buf: PixelBuffer, threshold: int = GRADIENT_THRESHOLD) -> EdgeMask:
    """Mark interior pixels whose neighbours differ by more than ``threshold``.

    For each pixel with ``1 <= x < width - 1`` and ``1 <= y < height - 1``::

        diff_x = sum over R,G,B of |left - right|
        diff_y = sum over R,G,B of |up - down|

    and the pixel is an edge if either exceeds ``threshold``. The outermost
    ring is never marked. Differences are taken from a snapshot of the
    buffer, so marking one pixel never influences another.
    """
    snapshot = buf.rgb.astype(np.int16)
    mask = np.zeros((buf.height, buf.width), dtype=np.bool_)

    if buf.width > 2 and buf.height > 2:
        diff_x = np.abs(snapshot[1:-1, :-2] - snapshot[1:-1, 2:]).sum(axis=-1)
        diff_y = np.abs(snapshot[:-2, 1:-1] - snapshot[2:, 1:-1]).sum(axis=-1)
        mask[1:-1, 1:-1] = (diff_x > threshold) | (diff_y > threshold)

    result = EdgeMask(buf.width, buf.height, mask)
    logger.debug("Dense edge pass on %dx%d: %d edge pixels", buf.width, buf.height, result.count)
    return result
