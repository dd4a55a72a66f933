"""Shared fixtures."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import pytest
from helpers import encode_image

if TYPE_CHECKING:
    from collections.abc import Callable


@pytest.fixture()
def photo_bytes() -> Callable[..., bytes]:
    """Factory for a solid-color encoded photo."""

    def _make(
        width: int = 400,
        height: int = 300,
        color: tuple[int, int, int] = (255, 255, 255),
        fmt: str = "PNG",
    ) -> bytes:
        array = np.empty((height, width, 3), dtype=np.uint8)
        array[...] = color
        return encode_image(array, fmt)

    return _make
