"""
Module: view.session

Purpose:
    The mutable state of one open view: the full record list, the sort
    mode, the list currently shown and the components that act on it.
    The GUI owns exactly one ViewSession and replaces it when the whole
    view is reloaded.

Key Classes:
    - ViewSession: start() / search() / toggle_sort() / rate()

Dependencies:
    - search.orchestrator: queries
    - view.paginator: rendering
    - ratings: rating map and submission

Used By:
    - gui.main_window: ViewerWindow
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence, Set

from problem_viewer.core.errors import RatingSubmitError
from problem_viewer.core.models import Rating, Record
from problem_viewer.ratings import (
    RatedLedger,
    RatingStore,
    apply_rating_map,
    load_rating_map,
    submit_rating,
)
from problem_viewer.search.orchestrator import SearchOrchestrator, SearchResult

from .paginator import PaginationController
from .sorting import SortMode, sort_records

logger = logging.getLogger(__name__)

ResultListener = Callable[[SearchResult], None]


class ViewSession:
    """
    State holder wiring search, sorting, pagination and ratings together.

    Every delivered search result is sorted with the current sort mode and
    becomes the shown list. Toggling the sort re-sorts the shown list
    without loading any content.

    Example:
        >>> session = ViewSession(records, orchestrator, paginator, rating_store=store)
        >>> await session.start()
        >>> await session.search("2025,東大")
    """

    def __init__(
        self,
        records: Sequence[Record],
        orchestrator: SearchOrchestrator,
        paginator: PaginationController,
        *,
        rating_store: Optional[RatingStore] = None,
        ledger: Optional[RatedLedger] = None,
        sort_mode: SortMode = SortMode.YEAR,
    ):
        self.records: List[Record] = list(records)
        self.orchestrator = orchestrator
        self.paginator = paginator
        self.rating_store = rating_store
        self.ledger = ledger
        self.sort_mode = sort_mode
        self.query = ""
        self.shown: List[Record] = []
        self.last_result: Optional[SearchResult] = None
        self._listeners: List[ResultListener] = []
        self._rating_in_flight: Set[str] = set()

    def add_result_listener(self, listener: ResultListener) -> None:
        self._listeners.append(listener)

    async def start(self) -> None:
        """Apply ratings and show the full list."""
        if self.rating_store is not None:
            rating_map = await load_rating_map(self.rating_store)
            apply_rating_map(self.records, rating_map)
        self._show(self.records)

    async def search(self, query: str) -> None:
        """Run a query; results replace the shown list as they arrive."""
        self.query = query
        await self.orchestrator.run(
            query,
            sort_records(self.records, self.sort_mode),
            self._on_result,
        )

    def clear_search(self) -> None:
        """Invalidate any running search and show the full list."""
        self.orchestrator.cancel()
        self.query = ""
        self.last_result = None
        self._show(self.records)

    def toggle_sort(self) -> SortMode:
        """Flip the sort mode and re-render the shown list in the new order."""
        self.sort_mode = self.sort_mode.toggled()
        self._show(self.shown)
        return self.sort_mode

    def is_rated(self, record: Record) -> bool:
        return self.ledger is not None and self.ledger.is_rated(record.id)

    def is_rating_pending(self, record: Record) -> bool:
        return record.id in self._rating_in_flight

    async def rate(self, record: Record, score: int) -> Rating:
        """
        Submit a score for a record this user has not rated yet.

        At most one submission per record is in flight; a second call
        while the first is awaiting the store is rejected.

        Raises:
            RatingSubmitError: If already rated or being rated, no store is
                configured, the score is invalid or the store rejected it
        """
        if self.rating_store is None:
            raise RatingSubmitError("Ratings are not configured")
        if self.is_rated(record):
            raise RatingSubmitError(f"Already rated: {record.id}")
        if record.id in self._rating_in_flight:
            raise RatingSubmitError(f"Rating already in flight: {record.id}")

        self._rating_in_flight.add(record.id)
        try:
            rating = await submit_rating(self.rating_store, record, score)
            if self.ledger is not None:
                self.ledger.mark(record.id, score)
        finally:
            self._rating_in_flight.discard(record.id)
        return rating

    def close(self) -> None:
        self.orchestrator.cancel()
        self.paginator.close()

    def _on_result(self, result: SearchResult) -> None:
        self.last_result = result
        self._show(result.records)
        for listener in self._listeners:
            listener(result)

    def _show(self, records: Sequence[Record]) -> None:
        self.shown = sort_records(records, self.sort_mode)
        self.paginator.reset(self.shown)
