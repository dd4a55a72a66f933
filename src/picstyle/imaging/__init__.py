"""Raw pixel-buffer image pipeline.

Everything in this package is CPU-bound and free of I/O apart from the codec
module, which only converts between bytes and buffers.
"""

from picstyle.imaging.buffer import PixelBuffer
from picstyle.imaging.geometry import FitResult, Rect, centered_square_crop, fit_within_box
from picstyle.imaging.pipeline import make_colored_illustration, make_outline, make_thumbnail
from picstyle.imaging.stylize import StyleParameters

__all__ = [
    "FitResult",
    "PixelBuffer",
    "Rect",
    "StyleParameters",
    "centered_square_crop",
    "fit_within_box",
    "make_colored_illustration",
    "make_outline",
    "make_thumbnail",
]
