"""Windowed list rendering used by the dashboard tables"""
from safedrive.ui.windowing import (
    VisibleWindow,
    compute_window,
    content_height,
    viewport_height,
    max_scroll_offset,
)
from safedrive.ui.scroll import Viewport, ScrollSubscription
from safedrive.ui.virtualized_table import VirtualizedTable

__all__ = [
    "VisibleWindow",
    "compute_window",
    "content_height",
    "viewport_height",
    "max_scroll_offset",
    "Viewport",
    "ScrollSubscription",
    "VirtualizedTable",
]
