"""
Windowing Engine

Computes which contiguous slice of an ordered sequence is visible in a
fixed-height viewport with uniform row heights:

    start_index  = floor(scroll_offset / row_height)
    end_index    = min(start_index + visible_rows + 1, sequence_length)
    pixel_offset = start_index * row_height

The extra row covers the partially visible row at the bottom edge while the
viewport sits between two row boundaries. All functions here are pure and
O(1); nothing iterates over the sequence itself.
"""

import math
from dataclasses import dataclass
from typing import Union

Number = Union[int, float]


@dataclass(frozen=True)
class VisibleWindow:
    """Half-open index range [start_index, end_index) plus its translation"""
    start_index: int
    end_index: int
    pixel_offset: int

    @property
    def size(self) -> int:
        return self.end_index - self.start_index

    @property
    def is_empty(self) -> bool:
        return self.end_index == self.start_index

    def indices(self) -> range:
        return range(self.start_index, self.end_index)


EMPTY_WINDOW = VisibleWindow(0, 0, 0)


def _check_geometry(row_height: int, visible_rows: int) -> None:
    if row_height <= 0:
        raise ValueError(f"row_height must be positive, got {row_height}")
    if visible_rows <= 0:
        raise ValueError(f"visible_rows must be positive, got {visible_rows}")


def content_height(sequence_length: int, row_height: int) -> int:
    """Total scrollable extent of the content area in pixels"""
    if row_height <= 0:
        raise ValueError(f"row_height must be positive, got {row_height}")
    return max(0, sequence_length) * row_height


def viewport_height(visible_rows: int, row_height: int) -> int:
    """Fixed pixel height of the scrollable viewport"""
    _check_geometry(row_height, visible_rows)
    return visible_rows * row_height


def max_scroll_offset(sequence_length: int, row_height: int, visible_rows: int) -> int:
    """Largest offset a browser reports for this geometry"""
    _check_geometry(row_height, visible_rows)
    return max(0, (sequence_length - visible_rows) * row_height)


def compute_window(
    scroll_offset: Number,
    row_height: int,
    visible_rows: int,
    sequence_length: int,
) -> VisibleWindow:
    """
    Compute the visible window for a scroll position.

    Scroll offsets are clamped: negative values (overscroll bounce) and NaN
    count as 0, and offsets past the end of the content (infinity included)
    pin the window to an empty range at the end of the sequence. Fractional
    offsets are floored.

    Raises:
        ValueError: row_height or visible_rows is not positive
    """
    _check_geometry(row_height, visible_rows)

    sequence_length = max(0, int(sequence_length))
    if sequence_length == 0:
        return EMPTY_WINDOW

    offset = 0 if math.isnan(scroll_offset) else max(0, scroll_offset)
    if math.isinf(offset):
        start_index = sequence_length
    else:
        start_index = min(int(offset // row_height), sequence_length)
    end_index = min(start_index + visible_rows + 1, sequence_length)

    return VisibleWindow(
        start_index=start_index,
        end_index=end_index,
        pixel_offset=start_index * row_height,
    )


__all__ = [
    "VisibleWindow",
    "EMPTY_WINDOW",
    "compute_window",
    "content_height",
    "viewport_height",
    "max_scroll_offset",
]
