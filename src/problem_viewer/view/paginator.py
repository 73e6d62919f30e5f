"""
Module: view.paginator

Purpose:
    Incremental ("infinite scroll") rendering of the current record list.
    A page of records is rendered when the list is reset and again each
    time the viewport nears the end of what is already shown.

Key Classes:
    - PaginationController: reset() / render_next_page()
    - RenderSink: Where rendered records go (the card list)
    - ProximitySource: Tells the controller the end of the list is near

Algorithm:
    1. reset(list): bump generation, clear the sink, re-subscribe to
       proximity, schedule the first page
    2. render_next_page(): take the next page_size records; for each one
       await ContentStore.ensure_loaded, then hand it to the sink
    3. After every await, stop if the list was reset meanwhile
    4. Once every record is rendered, retire the proximity subscription

States:
    IDLE -> RENDERING_PAGE on a trigger; back to IDLE when the page is
    done. A proximity trigger while RENDERING_PAGE is ignored.

Dependencies:
    - asyncio (std)
    - search.content_store: body loading before render

Used By:
    - view.session: ViewSession
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Callable, List, Optional, Protocol, Sequence, Set

from problem_viewer.core.models import Record
from problem_viewer.search.content_store import ContentStore

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 5

Unsubscribe = Callable[[], None]


class PageState(Enum):
    IDLE = "idle"
    RENDERING_PAGE = "rendering_page"


class RenderSink(Protocol):
    """Receives rendered records in list order."""

    def clear(self) -> None:
        """Drop everything rendered so far."""
        ...

    async def render(self, record: Record) -> None:
        """Append one record; its content is already resolved."""
        ...


class ProximitySource(Protocol):
    """Signals that the end of the rendered list is near the viewport."""

    def subscribe(self, callback: Callable[[], None]) -> Unsubscribe:
        ...


class PaginationController:
    """
    Page-at-a-time renderer for one list at a time.

    Must be used from the event loop that runs the ContentStore.

    Example:
        >>> controller = PaginationController(store, sink, proximity, page_size=5)
        >>> controller.reset(records)      # schedules page 1
        >>> await controller.render_next_page()
    """

    def __init__(
        self,
        store: ContentStore,
        sink: RenderSink,
        proximity: ProximitySource,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
    ):
        if page_size <= 0:
            raise ValueError(f"page_size must be positive: {page_size}")
        self.store = store
        self.sink = sink
        self.proximity = proximity
        self.page_size = page_size

        self._records: List[Record] = []
        self._rendered = 0
        self._generation = 0
        self._state = PageState.IDLE
        self._unsubscribe: Optional[Unsubscribe] = None
        self._tasks: Set[asyncio.Task] = set()

    @property
    def state(self) -> PageState:
        return self._state

    @property
    def rendered(self) -> int:
        return self._rendered

    @property
    def records(self) -> List[Record]:
        return list(self._records)

    @property
    def exhausted(self) -> bool:
        return self._rendered >= len(self._records)

    @property
    def subscribed(self) -> bool:
        return self._unsubscribe is not None

    def reset(self, records: Sequence[Record]) -> Optional[asyncio.Task]:
        """
        Replace the list and schedule its first page.

        Any page still rendering for the previous list stops at its next
        await without touching the sink.

        Returns:
            The task rendering the first page, or None for an empty list
        """
        self._generation += 1
        self._retire()
        self._records = list(records)
        self._rendered = 0
        self._state = PageState.IDLE
        self.sink.clear()

        if not self._records:
            return None
        self._unsubscribe = self.proximity.subscribe(self._on_near_end)
        return self._schedule()

    def close(self) -> None:
        """Stop rendering and drop the proximity subscription."""
        self._generation += 1
        self._retire()
        self._state = PageState.IDLE

    async def render_next_page(self) -> int:
        """
        Render up to page_size further records.

        Returns:
            Number of records handed to the sink
        """
        if self._state is PageState.RENDERING_PAGE or self.exhausted:
            return 0

        generation = self._generation
        self._state = PageState.RENDERING_PAGE
        batch = self._records[self._rendered:self._rendered + self.page_size]
        count = 0
        try:
            for record in batch:
                await self.store.ensure_loaded(record)
                if generation != self._generation:
                    return count
                await self.sink.render(record)
                if generation != self._generation:
                    return count
                self._rendered += 1
                count += 1
        finally:
            if generation == self._generation:
                self._state = PageState.IDLE

        logger.debug(f"Rendered {self._rendered}/{len(self._records)} records")
        if self.exhausted:
            self._retire()
        return count

    def _on_near_end(self) -> None:
        if self._state is PageState.IDLE and not self.exhausted:
            self._schedule()

    def _schedule(self) -> asyncio.Task:
        task = asyncio.ensure_future(self.render_next_page())
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Page render failed: {task.exception()!r}")

    def _retire(self) -> None:
        if self._unsubscribe is not None:
            unsubscribe, self._unsubscribe = self._unsubscribe, None
            unsubscribe()
