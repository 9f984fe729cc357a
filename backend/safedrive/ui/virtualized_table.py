"""
Virtualized table renderer.

Renders a long, ordered sequence inside a fixed-height viewport while only
materializing the rows currently in view. The rendered structure mirrors the
browser component it feeds:

    <div class="virtualized-table" style="height: {viewport}px; overflow: auto">
      <div class="virtualized-table__content" style="height: {content}px; position: relative">
        <div class="virtualized-table__slice" style="transform: translateY({offset}px)">
          ... one rendered row per visible item ...
        </div>
      </div>
    </div>
"""

from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional, Sequence, Tuple

from markupsafe import Markup, escape

from safedrive.ui.scroll import Viewport
from safedrive.ui.windowing import (
    VisibleWindow,
    compute_window,
    content_height,
    viewport_height,
)

RowRenderer = Callable[[Any, int], Any]


class VirtualizedTable:
    """Windowed view over ``items``; the caller owns the sequence"""

    def __init__(
        self,
        items: Sequence[Any],
        row_height: int,
        visible_rows: int,
        render_row: RowRenderer,
        scroll_offset: float = 0,
        total: Optional[int] = None,
        base_index: int = 0,
        table_id: str = "table",
    ):
        """
        Args:
            items: Rows to render. When ``total`` is given, ``items`` only
                holds the rows starting at ``base_index`` (a slice already
                loaded from storage) and ``total`` is the full length.
            row_height: Uniform row height in pixels
            visible_rows: Rows that fit in the viewport
            render_row: ``(item, index) -> markup`` called once per visible row
        """
        self.items = items
        self.row_height = row_height
        self.visible_rows = visible_rows
        self.render_row = render_row
        self.total = len(items) if total is None else total
        self.base_index = base_index
        self.table_id = table_id
        self.scroll_offset = scroll_offset
        self.window: VisibleWindow = self._compute()

    def _compute(self) -> VisibleWindow:
        return compute_window(self.scroll_offset, self.row_height, self.visible_rows, self.total)

    def on_scroll(self, offset: float) -> None:
        """Scroll listener: record the offset and recompute the window"""
        self.scroll_offset = offset
        self.window = self._compute()

    def replace_items(self, items: Sequence[Any], total: Optional[int] = None, base_index: int = 0) -> None:
        """Swap in a new sequence between render passes"""
        self.items = items
        self.total = len(items) if total is None else total
        self.base_index = base_index
        self.window = self._compute()

    @contextmanager
    def mounted(self, viewport: Viewport) -> Iterator["VirtualizedTable"]:
        """Follow ``viewport`` for the duration of the block"""
        with viewport.subscribe(self.on_scroll):
            self.on_scroll(viewport.scroll_top)
            yield self

    @property
    def content_height(self) -> int:
        return content_height(self.total, self.row_height)

    @property
    def viewport_height(self) -> int:
        return viewport_height(self.visible_rows, self.row_height)

    def visible_items(self) -> Iterator[Tuple[int, Any]]:
        """Yield ``(index, item)`` for the visible slice only"""
        for index in self.window.indices():
            position = index - self.base_index
            if 0 <= position < len(self.items):
                yield index, self.items[position]

    def render_slice(self) -> Markup:
        rows = Markup("").join(
            Markup(self.render_row(item, index)) for index, item in self.visible_items()
        )
        return Markup(
            '<div class="virtualized-table__slice" '
            'data-start-index="{start}" data-end-index="{end}" '
            'style="position: absolute; top: 0; left: 0; right: 0; '
            'transform: translateY({offset}px)">{rows}</div>'
        ).format(
            start=self.window.start_index,
            end=self.window.end_index,
            offset=self.window.pixel_offset,
            rows=rows,
        )

    def render(self) -> Markup:
        return Markup(
            '<div class="virtualized-table" id="{table_id}" '
            'data-row-height="{row_height}" data-visible-rows="{visible_rows}" '
            'data-total="{total}" data-start-index="{start}" '
            'style="height: {viewport}px; overflow: auto; position: relative; --row-height: {row_height}px">'
            '<div class="virtualized-table__content" '
            'style="height: {content}px; position: relative">{slice}</div>'
            '</div>'
        ).format(
            table_id=escape(self.table_id),
            row_height=self.row_height,
            visible_rows=self.visible_rows,
            total=self.total,
            start=self.window.start_index,
            viewport=self.viewport_height,
            content=self.content_height,
            slice=self.render_slice(),
        )

    def __html__(self) -> str:
        return str(self.render())


__all__ = ["VirtualizedTable", "RowRenderer"]
