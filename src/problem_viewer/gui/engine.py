"""
Module: gui.engine

Purpose:
    Host the asyncio event loop that runs loading, searching and
    pagination on a background QThread, so the Qt event loop never blocks
    on I/O. Everything in search/ and view/ runs on this one loop.

Key Classes:
    - SearchEngine: QThread owning the loop; submit() / call_soon() / shutdown()

Dependencies:
    - PySide6: QThread, Signal
    - asyncio (std)

Used By:
    - gui.main_window: ViewerWindow
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import threading
from typing import Any, Awaitable, Callable, Coroutine, Optional

from PySide6.QtCore import QThread, Signal

logger = logging.getLogger(__name__)


class SearchEngine(QThread):
    """
    Background thread running an asyncio event loop.

    Example:
        >>> engine = SearchEngine()
        >>> engine.start()
        >>> engine.wait_ready()
        >>> future = engine.submit(session.search("integral"))
    """

    error_occurred = Signal(str)  # Unhandled failure of a submitted coroutine

    def __init__(self, parent=None):
        super().__init__(parent)
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._ready = threading.Event()

    @property
    def loop(self) -> Optional[asyncio.AbstractEventLoop]:
        return self._loop

    def run(self):
        """Run the event loop until shutdown() stops it."""
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        self._loop = loop
        self._ready.set()
        logger.debug("Engine loop started")
        try:
            loop.run_forever()
        finally:
            pending = asyncio.all_tasks(loop)
            for task in pending:
                task.cancel()
            if pending:
                loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
            loop.run_until_complete(loop.shutdown_asyncgens())
            loop.close()
            self._loop = None
            logger.debug("Engine loop closed")

    def wait_ready(self, timeout: float = 5.0) -> bool:
        """Block until the loop exists (call after start())."""
        return self._ready.wait(timeout)

    def submit(self, coro: Coroutine[Any, Any, Any]) -> concurrent.futures.Future:
        """
        Schedule a coroutine on the engine loop from any thread.

        Failures are logged and reported through error_occurred.

        Raises:
            RuntimeError: If the engine is not running
        """
        loop = self._require_loop()
        future = asyncio.run_coroutine_threadsafe(coro, loop)
        future.add_done_callback(self._report)
        return future

    def call_soon(self, fn: Callable[..., Any], *args: Any) -> None:
        """Run a plain callable on the engine loop from any thread."""
        self._require_loop().call_soon_threadsafe(fn, *args)

    def shutdown(
        self,
        cleanup: Optional[Callable[[], Awaitable[Any]]] = None,
        timeout_s: float = 5.0,
    ) -> None:
        """
        Run an optional async cleanup, then stop the loop and join the thread.
        """
        loop = self._loop
        if loop is None or not self.isRunning():
            return
        if cleanup is not None:
            try:
                asyncio.run_coroutine_threadsafe(cleanup(), loop).result(timeout_s)
            except (concurrent.futures.TimeoutError, OSError, RuntimeError) as e:
                logger.warning(f"Engine cleanup did not finish: {e!r}")
        loop.call_soon_threadsafe(loop.stop)
        self.wait(int(timeout_s * 1000))

    def _require_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None or self._loop.is_closed():
            raise RuntimeError("Search engine is not running")
        return self._loop

    def _report(self, future: concurrent.futures.Future) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.error(f"Background task failed: {error!r}")
            self.error_occurred.emit(str(error))
