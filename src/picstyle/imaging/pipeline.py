"""Pipeline entry points: thumbnail, outline and colored illustration.

Each ``render_*`` function is a pure buffer-to-buffer transform; each
``make_*`` function wraps one with decode and encode. Stages run strictly in
sequence and every intermediate buffer is owned by a single stage.

    thumbnail:  decode -> centered square crop -> resample -> encode
    outline:    decode -> fit -> resample -> luminance -> strokes -> overlay -> encode
    colored:    decode -> fit -> resample -> stylize -> dense edges -> overlay
                -> source-over -> encode
"""

from __future__ import annotations

import logging

from picstyle.imaging import codec
from picstyle.imaging.buffer import PixelBuffer
from picstyle.imaging.compositor import overlay_edges, source_over_composite
from picstyle.imaging.edges import dense_edge_mask, sparse_stroke_mask
from picstyle.imaging.geometry import Rect, centered_square_crop, fit_within_box
from picstyle.imaging.luminance import to_luminance
from picstyle.imaging.resample import resample
from picstyle.imaging.stylize import StyleParameters, apply_cartoon_style

logger = logging.getLogger(__name__)

THUMBNAIL_SIZE = 200
THUMBNAIL_QUALITY = 0.8

CANVAS_MAX_WIDTH = 800
CANVAS_MAX_HEIGHT = 600
ARTIFACT_QUALITY = 0.9


# ---------------------------------------------------------------------------
# Buffer-level pipelines
# ---------------------------------------------------------------------------


def render_thumbnail(src: PixelBuffer, size: int = THUMBNAIL_SIZE) -> PixelBuffer:
    """Crop the centered square of ``src`` and scale it to ``size x size``."""
    crop = centered_square_crop(src.width, src.height)
    return resample(src, crop, size, size)


def fit_to_canvas(
    src: PixelBuffer,
    max_width: int = CANVAS_MAX_WIDTH,
    max_height: int = CANVAS_MAX_HEIGHT,
) -> PixelBuffer:
    """Scale the whole of ``src`` to the largest aspect-preserving size in the box."""
    fit = fit_within_box(src.width, src.height, max_width, max_height)
    return resample(src, Rect.full(src.width, src.height), fit.target_width, fit.target_height)


def render_outline(
    src: PixelBuffer,
    max_width: int = CANVAS_MAX_WIDTH,
    max_height: int = CANVAS_MAX_HEIGHT,
) -> PixelBuffer:
    """Black diagonal strokes on white wherever the fitted photo is dark."""
    canvas = fit_to_canvas(src, max_width, max_height)
    luma = to_luminance(canvas)
    strokes = sparse_stroke_mask(luma)
    return overlay_edges(PixelBuffer.blank(canvas.width, canvas.height), strokes)


def render_colored_illustration(
    src: PixelBuffer,
    params: StyleParameters | None = None,
    max_width: int = CANVAS_MAX_WIDTH,
    max_height: int = CANVAS_MAX_HEIGHT,
) -> PixelBuffer:
    """Cartoon-styled photo with black contours along strong color changes.

    Edges are detected on the styled colors, drawn onto a copy of the styled
    layer, and that layer is composited over the styled canvas.
    """
    params = params or StyleParameters()
    styled = fit_to_canvas(src, max_width, max_height)
    apply_cartoon_style(styled, params)

    edges = dense_edge_mask(styled, threshold=params.edge_threshold)
    outlined = overlay_edges(styled, edges)
    return source_over_composite(styled, outlined)


# ---------------------------------------------------------------------------
# Encoded-bytes entry points
# ---------------------------------------------------------------------------


def make_thumbnail(
    data: bytes,
    *,
    size: int = THUMBNAIL_SIZE,
    quality: float = THUMBNAIL_QUALITY,
    fmt: str = codec.DEFAULT_FORMAT,
    max_pixels: int | None = None,
) -> bytes:
    """Encoded photo in, encoded square thumbnail out."""
    src = codec.decode(data, max_pixels=max_pixels)
    thumb = render_thumbnail(src, size)
    logger.debug("Thumbnail %dx%d from %dx%d", thumb.width, thumb.height, src.width, src.height)
    return codec.encode(thumb, quality, fmt)


def make_outline(
    data: bytes,
    *,
    max_width: int = CANVAS_MAX_WIDTH,
    max_height: int = CANVAS_MAX_HEIGHT,
    quality: float = ARTIFACT_QUALITY,
    fmt: str = codec.DEFAULT_FORMAT,
    max_pixels: int | None = None,
) -> bytes:
    """Encoded photo in, encoded line-art rendering out."""
    src = codec.decode(data, max_pixels=max_pixels)
    outline = render_outline(src, max_width, max_height)
    logger.debug("Outline %dx%d from %dx%d", outline.width, outline.height, src.width, src.height)
    return codec.encode(outline, quality, fmt)


def make_colored_illustration(
    data: bytes,
    params: StyleParameters | None = None,
    *,
    max_width: int = CANVAS_MAX_WIDTH,
    max_height: int = CANVAS_MAX_HEIGHT,
    quality: float = ARTIFACT_QUALITY,
    fmt: str = codec.DEFAULT_FORMAT,
    max_pixels: int | None = None,
) -> bytes:
    """Encoded photo in, encoded cartoon illustration out."""
    src = codec.decode(data, max_pixels=max_pixels)
    colored = render_colored_illustration(src, params, max_width, max_height)
    logger.debug("Colored illustration %dx%d from %dx%d", colored.width, colored.height, src.width, src.height)
    return codec.encode(colored, quality, fmt)
