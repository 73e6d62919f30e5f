"""
Module: search.orchestrator

Purpose:
    Turn a query plus the full record list into an ordered match list,
    filling missing bodies with a bounded pool of cooperative workers and
    making sure only the newest query's result is ever delivered.

Key Classes:
    - SearchOrchestrator: run() / cancel() / current_epoch
    - SearchResult: One delivered (provisional or final) result

Algorithm:
    1. Bump the epoch; this run owns the new value
    2. Parse terms. No terms -> deliver all records (final), stop
    3. Metadata pass -> deliver as provisional result
    4. Every term metadata-only -> deliver quick set as final, stop
    5. N workers share one cursor over the records. Per record: check
       epoch, ensure_loaded (the only await), check epoch again, match
    6. Merge quick + full matches (dedup by id, quick first) and deliver
       as final if the epoch is still current

    There is no hard cancellation. A superseded run keeps fetching in the
    background until its workers notice the epoch change; whatever it
    loaded stays in the ContentStore for later queries.

Dependencies:
    - asyncio (std)
    - search.query: parsing and matching
    - search.content_store: body fills

Used By:
    - view.session: ViewSession.search()
    - gui.main_window: debounced query box
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from problem_viewer.core.models import Record

from .content_store import ContentStore
from .query import (
    Match,
    MetadataIndex,
    Terms,
    is_metadata_term,
    match_record,
    matches_metadata,
    parse_query,
    source_vocabulary,
)

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 6


@dataclass(frozen=True)
class SearchResult:
    """
    Result delivered to the caller's callback.

    Attributes:
        epoch: Epoch of the run that produced it
        query: Raw query text
        terms: Parsed AND-terms (empty = no filter)
        records: Matches in delivery order
        final: False for the provisional metadata-only result
    """
    epoch: int
    query: str
    terms: Terms
    records: Tuple[Record, ...]
    final: bool

    @property
    def is_unfiltered(self) -> bool:
        return not self.terms

    def __len__(self) -> int:
        return len(self.records)


ResultCallback = Callable[[SearchResult], None]


class SearchOrchestrator:
    """
    Epoch-guarded search runner.

    Example:
        >>> orchestrator = SearchOrchestrator(store, concurrency=6)
        >>> await orchestrator.run("integral", records, on_result)
    """

    def __init__(
        self,
        store: ContentStore,
        *,
        concurrency: int = DEFAULT_CONCURRENCY,
        metadata_index: Optional[MetadataIndex] = None,
    ):
        if concurrency <= 0:
            raise ValueError(f"concurrency must be positive: {concurrency}")
        self.store = store
        self.concurrency = concurrency
        self.metadata_index = metadata_index or MetadataIndex()
        self._epoch = 0

    @property
    def current_epoch(self) -> int:
        return self._epoch

    def is_current(self, epoch: int) -> bool:
        return epoch == self._epoch

    def cancel(self) -> None:
        """Invalidate any running search without starting a new one."""
        self._epoch += 1

    async def run(
        self,
        query: str,
        records: Sequence[Record],
        on_result: ResultCallback,
    ) -> None:
        """
        Search records and deliver results through on_result.

        Tolerates being called again before a previous call finished; the
        older call then delivers nothing further.

        Args:
            query: Raw query text (already debounced by the caller)
            records: Full record list in external sort order
            on_result: Called with the provisional and the final result
        """
        self._epoch += 1
        epoch = self._epoch
        started = time.perf_counter()
        records = list(records)
        terms = parse_query(query)

        if not terms:
            on_result(SearchResult(epoch, query, terms, tuple(records), final=True))
            return

        quick = [r for r in records if matches_metadata(r, terms, self.metadata_index)]
        on_result(SearchResult(epoch, query, terms, tuple(quick), final=False))

        sources = source_vocabulary(records)
        if all(is_metadata_term(term, sources) for term in terms):
            logger.debug(f"Query {query!r} answered from metadata: {len(quick)} matches")
            on_result(SearchResult(epoch, query, terms, tuple(quick), final=True))
            return

        full = await self._full_pass(epoch, terms, records)
        if not self.is_current(epoch):
            logger.debug(f"Discarding stale result for {query!r} (epoch {epoch})")
            return

        merged = _merge(quick, full)
        elapsed = time.perf_counter() - started
        logger.info(
            f"Search {query!r}: {len(merged)} matches "
            f"({len(quick)} metadata) in {elapsed:.2f}s"
        )
        on_result(SearchResult(epoch, query, terms, tuple(merged), final=True))

    async def _full_pass(
        self,
        epoch: int,
        terms: Terms,
        records: List[Record],
    ) -> List[Record]:
        """Run the worker pool; returns full matches in record-list order."""
        cursor: Iterator[Tuple[int, Record]] = iter(enumerate(records))
        found: Dict[int, Record] = {}

        async def worker() -> None:
            for position, record in cursor:
                if not self.is_current(epoch):
                    return
                outcome = match_record(record, terms, self.metadata_index)
                if outcome is Match.UNDECIDED:
                    await self.store.ensure_loaded(record)
                    if not self.is_current(epoch):
                        return
                    outcome = match_record(record, terms, self.metadata_index)
                if outcome is Match.YES:
                    found[position] = record

        workers = min(self.concurrency, max(1, len(records)))
        await asyncio.gather(*(worker() for _ in range(workers)))
        return [found[i] for i in sorted(found)]


def _merge(quick: Sequence[Record], full: Sequence[Record]) -> List[Record]:
    """Concatenate, keeping the first occurrence of each id."""
    merged: List[Record] = []
    seen = set()
    for record in list(quick) + list(full):
        if record.id in seen:
            continue
        seen.add(record.id)
        merged.append(record)
    return merged
