"""
Module: gui.scroll_proximity

Purpose:
    Proximity source over a QScrollArea: notifies subscribers when the
    vertical scroll position comes within a margin of the end of the
    content, including when the content is still shorter than the
    viewport after it grew.

Key Classes:
    - ScrollProximity: subscribe(callback) -> unsubscribe

Dependencies:
    - PySide6: QScrollArea scroll bar signals

Used By:
    - gui.main_window: handed to the PaginationController
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, Optional

from PySide6.QtCore import QObject
from PySide6.QtWidgets import QScrollArea

logger = logging.getLogger(__name__)

Callback = Callable[[], None]
Dispatch = Callable[[Callback], None]


def _call_directly(callback: Callback) -> None:
    callback()


class ScrollProximity(QObject):
    """
    Near-end notifications for a scroll area.

    Callbacks are run through ``dispatch``; the main window passes the
    engine's ``call_soon`` so subscribers always run on the engine loop.
    subscribe() and the returned unsubscribe may be called from any thread.

    Example:
        >>> proximity = ScrollProximity(scroll_area, margin_px=600, dispatch=engine.call_soon)
        >>> unsubscribe = proximity.subscribe(controller_callback)
    """

    def __init__(
        self,
        scroll_area: QScrollArea,
        margin_px: int = 600,
        dispatch: Optional[Dispatch] = None,
        parent=None,
    ):
        super().__init__(parent)
        self.scroll_area = scroll_area
        self.margin_px = margin_px
        self._dispatch = dispatch or _call_directly
        self._callbacks: Dict[int, Callback] = {}
        self._next_token = 0
        self._lock = threading.Lock()

        bar = scroll_area.verticalScrollBar()
        bar.valueChanged.connect(self._on_scroll)
        bar.rangeChanged.connect(self._on_range_changed)

    def subscribe(self, callback: Callback) -> Callable[[], None]:
        with self._lock:
            token = self._next_token
            self._next_token += 1
            self._callbacks[token] = callback

        def unsubscribe() -> None:
            with self._lock:
                self._callbacks.pop(token, None)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._callbacks)

    def is_near_end(self) -> bool:
        bar = self.scroll_area.verticalScrollBar()
        return bar.maximum() - bar.value() <= self.margin_px

    def check(self) -> bool:
        """Notify subscribers if the end is near; call after content grows."""
        if not self.is_near_end():
            return False
        with self._lock:
            callbacks = list(self._callbacks.values())
        for callback in callbacks:
            self._dispatch(callback)
        return bool(callbacks)

    def _on_scroll(self, _value: int) -> None:
        self.check()

    def _on_range_changed(self, _minimum: int, _maximum: int) -> None:
        self.check()
