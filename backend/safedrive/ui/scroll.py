"""
Scroll position source and listener subscriptions.

A ``Viewport`` stands in for the scrollable container: it owns the current
scroll offset and notifies registered listeners whenever it changes.
Listeners are passive. A listener that raises is logged and skipped; the
offset update and every other listener still go through.

Subscriptions are scoped::

    with viewport.subscribe(table.on_scroll):
        viewport.scroll_to(480)
    # listener released here, even if the block raised
"""

from typing import Callable, List, Optional

from safedrive.core.logging_config import logger

ScrollListener = Callable[[float], None]


class ScrollSubscription:
    """Registration of one listener on one viewport; releases on exit"""

    def __init__(self, viewport: "Viewport", listener: ScrollListener):
        self._viewport = viewport
        self._listener = listener
        self._active = True
        viewport._add_listener(listener)

    @property
    def active(self) -> bool:
        return self._active

    def close(self) -> None:
        """Unsubscribe; safe to call more than once"""
        if self._active:
            self._viewport._remove_listener(self._listener)
            self._active = False

    def __enter__(self) -> "ScrollSubscription":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class Viewport:
    """Scrollable surface reporting its scroll offset in pixels"""

    def __init__(self, scroll_top: float = 0, name: Optional[str] = None):
        self.name = name or "viewport"
        self._scroll_top = max(0, scroll_top)
        self._listeners: List[ScrollListener] = []

    @property
    def scroll_top(self) -> float:
        return self._scroll_top

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: ScrollListener) -> ScrollSubscription:
        return ScrollSubscription(self, listener)

    def scroll_to(self, offset: float) -> None:
        """Move to an absolute offset (negative clamps to 0) and notify listeners"""
        offset = max(0, offset)
        self._scroll_top = offset
        # Copy so listeners may unsubscribe while being notified
        for listener in list(self._listeners):
            try:
                listener(offset)
            except Exception as e:
                logger.exception(f"[Viewport:{self.name}] Scroll listener failed: {e}")

    def scroll_by(self, delta: float) -> None:
        self.scroll_to(self._scroll_top + delta)

    def _add_listener(self, listener: ScrollListener) -> None:
        self._listeners.append(listener)

    def _remove_listener(self, listener: ScrollListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)


__all__ = ["Viewport", "ScrollSubscription", "ScrollListener"]
