"""Aspect-ratio fitting and square-crop coordinates.

Pure functions over integer dimensions; no pixel access.
"""

from __future__ import annotations

from dataclasses import dataclass

from picstyle.errors import InvalidDimensions


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in source-buffer pixel coordinates."""

    x: int
    y: int
    width: int
    height: int

    def contained_in(self, width: int, height: int) -> bool:
        """Return True if the rect is non-empty and lies within a ``width x height`` buffer."""
        return (
            self.width > 0
            and self.height > 0
            and self.x >= 0
            and self.y >= 0
            and self.x + self.width <= width
            and self.y + self.height <= height
        )

    @classmethod
    def full(cls, width: int, height: int) -> Rect:
        return cls(0, 0, width, height)


@dataclass(frozen=True)
class FitResult:
    target_width: int
    target_height: int


def _require_positive(**dims: int) -> None:
    bad = {name: value for name, value in dims.items() if value <= 0}
    if bad:
        detail = ", ".join(f"{name}={value}" for name, value in bad.items())
        raise InvalidDimensions(f"Dimensions must be positive: {detail}")


def fit_within_box(src_w: int, src_h: int, max_w: int, max_h: int) -> FitResult:
    """Largest size with the source aspect ratio that fits in ``max_w x max_h``.

    When the source is relatively wider than the box the width is pinned to
    ``max_w``, otherwise the height is pinned to ``max_h``. The free dimension
    is truncated to an integer the way a canvas truncates a fractional size,
    and never drops below one pixel.

    Raises:
        InvalidDimensions: If any input is zero or negative.
    """
    _require_positive(src_w=src_w, src_h=src_h, max_w=max_w, max_h=max_h)

    # Cross-multiplied: exact integer comparison and truncation.
    if src_w * max_h > max_w * src_h:
        width = max_w
        height = max_w * src_h // src_w
    else:
        height = max_h
        width = max_h * src_w // src_h

    return FitResult(
        target_width=min(max(width, 1), max_w),
        target_height=min(max(height, 1), max_h),
    )


def centered_square_crop(src_w: int, src_h: int) -> Rect:
    """Largest square centered in a ``src_w x src_h`` rectangle.

    Raises:
        InvalidDimensions: If either dimension is zero or negative.
    """
    _require_positive(src_w=src_w, src_h=src_h)

    side = min(src_w, src_h)
    if src_w > src_h:
        return Rect(x=(src_w - side) // 2, y=0, width=side, height=side)
    if src_h > src_w:
        return Rect(x=0, y=(src_h - side) // 2, width=side, height=side)
    return Rect(x=0, y=0, width=side, height=side)
