"""Pillow-backed decode/encode adapters.

Thin wrappers: Pillow does the actual codec work, these functions only move
between encoded bytes and :class:`PixelBuffer` and translate failures into
PicStyle errors.
"""

from __future__ import annotations

import io
import logging

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from picstyle.errors import CorruptData, EncodeFailure, InvalidDimensions, UnsupportedFormat
from picstyle.imaging.buffer import PixelBuffer

logger = logging.getLogger(__name__)

DEFAULT_FORMAT = "JPEG"
LOSSLESS_FORMAT = "PNG"

_OPAQUE_FORMATS = {"JPEG"}


def decode(data: bytes, max_pixels: int | None = None) -> PixelBuffer:
    """Decode raw file bytes into an RGBA buffer at native resolution.

    EXIF orientation is applied so the buffer is upright.

    Raises:
        UnsupportedFormat: If Pillow cannot identify the data.
        CorruptData: If the data is recognised but cannot be fully decoded.
        InvalidDimensions: If the image exceeds ``max_pixels``.
    """
    if not data:
        raise UnsupportedFormat("Empty image data")

    try:
        image = Image.open(io.BytesIO(data))
    except UnidentifiedImageError as exc:
        raise UnsupportedFormat("Unrecognised image format") from exc
    except Image.DecompressionBombError as exc:
        raise InvalidDimensions(str(exc)) from exc

    with image:
        width, height = image.size
        if max_pixels is not None and width * height > max_pixels:
            raise InvalidDimensions(f"Image of {width}x{height} exceeds the {max_pixels} pixel limit")
        try:
            image.load()
            upright = ImageOps.exif_transpose(image)
            rgba = upright.convert("RGBA")
        except (OSError, SyntaxError, ValueError) as exc:
            raise CorruptData(f"Could not decode {image.format} image: {exc}") from exc
        pixels = np.asarray(rgba, dtype=np.uint8).copy()
        image_format = image.format

    logger.debug("Decoded %s image %dx%d", image_format, rgba.width, rgba.height)
    return PixelBuffer(rgba.width, rgba.height, pixels)


def encode(buf: PixelBuffer, quality: float, fmt: str = DEFAULT_FORMAT) -> bytes:
    """Serialize ``buf`` to ``fmt``; ``quality`` in (0, 1] maps to Pillow's 1..100.

    Opaque formats drop the alpha channel. Lossless formats ignore quality.

    Raises:
        EncodeFailure: On an out-of-range quality or any codec error.
    """
    if not 0.0 < quality <= 1.0:
        raise EncodeFailure(f"Quality must be in (0, 1], got {quality}")

    fmt = fmt.upper()
    image = Image.fromarray(buf.pixels)
    if fmt in _OPAQUE_FORMATS:
        image = image.convert("RGB")

    out = io.BytesIO()
    try:
        image.save(out, format=fmt, quality=max(1, round(quality * 100)))
    except (OSError, KeyError, ValueError) as exc:
        raise EncodeFailure(f"Could not encode {buf.width}x{buf.height} buffer as {fmt}: {exc}") from exc

    logger.debug("Encoded %dx%d buffer as %s (%d bytes)", buf.width, buf.height, fmt, out.tell())
    return out.getvalue()
