"""The shared raw-image representation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from picstyle.errors import InvalidDimensions

if TYPE_CHECKING:
    from numpy.typing import NDArray

CHANNELS = 4

WHITE: tuple[int, int, int, int] = (255, 255, 255, 255)


@dataclass(eq=False)
class PixelBuffer:
    """Width, height and an interleaved RGBA uint8 pixel array.

    ``pixels`` has shape ``(height, width, 4)``. A buffer is owned by one
    pipeline stage at a time; stages that need an independent buffer call
    :meth:`copy` rather than sharing the array.
    """

    width: int
    height: int
    pixels: NDArray[np.uint8]

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise InvalidDimensions(f"Buffer dimensions must be positive, got {self.width}x{self.height}")
        if self.pixels.dtype != np.uint8:
            raise InvalidDimensions(f"Buffer pixels must be uint8, got {self.pixels.dtype}")
        if self.pixels.size != self.width * self.height * CHANNELS:
            raise InvalidDimensions(
                f"Buffer holds {self.pixels.size} bytes, expected {self.width * self.height * CHANNELS} "
                f"for {self.width}x{self.height} RGBA"
            )
        self.pixels = self.pixels.reshape(self.height, self.width, CHANNELS)

    @classmethod
    def blank(cls, width: int, height: int, color: tuple[int, int, int, int] = WHITE) -> PixelBuffer:
        """Create a buffer filled with a single RGBA color."""
        if width <= 0 or height <= 0:
            raise InvalidDimensions(f"Buffer dimensions must be positive, got {width}x{height}")
        pixels = np.empty((height, width, CHANNELS), dtype=np.uint8)
        pixels[...] = color
        return cls(width, height, pixels)

    @classmethod
    def from_bytes(cls, width: int, height: int, data: bytes) -> PixelBuffer:
        """Wrap an interleaved RGBA byte sequence."""
        return cls(width, height, np.frombuffer(data, dtype=np.uint8).copy())

    def to_bytes(self) -> bytes:
        return self.pixels.tobytes()

    def copy(self) -> PixelBuffer:
        return PixelBuffer(self.width, self.height, self.pixels.copy())

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    @property
    def rgb(self) -> NDArray[np.uint8]:
        """View of the color channels, shape ``(height, width, 3)``."""
        return self.pixels[..., :3]

    @property
    def alpha(self) -> NDArray[np.uint8]:
        return self.pixels[..., 3]

    def same_size(self, other: PixelBuffer) -> bool:
        return self.width == other.width and self.height == other.height

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return self.same_size(other) and bool(np.array_equal(self.pixels, other.pixels))
