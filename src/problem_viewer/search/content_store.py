"""
Module: search.content_store

Purpose:
    Lazily materialize record bodies. Owns the single-flight contract:
    however many callers ask for the same record at once, the byte-loader
    is invoked at most once and every caller awaits the same operation.

Key Classes:
    - ContentStore: ensure_loaded() / is_pending() / fetch_count

Behaviour:
    - LOADED / FAILED records return immediately
    - LOADING records await the in-flight task
    - NOT_LOADED records start a load: fetch, canonicalize, store, LOADED
    - Any fetch/decode failure -> FAILED with empty display/canonical text.
      Failed records are not retried.

Dependencies:
    - asyncio (std)
    - search.canonical: to_display_and_canonical()
    - loading.byte_loader: ByteLoader protocol (injected)

Used By:
    - search.orchestrator: body fills during search
    - view.paginator: resolving content before rendering
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Protocol

from problem_viewer.core.errors import RecordLoadError
from problem_viewer.core.models import LoadState, Record

from .canonical import to_display_and_canonical

logger = logging.getLogger(__name__)

# Errors a loader may surface for a single record. Anything else is a bug
# and propagates.
LOAD_FAILURES = (RecordLoadError, OSError, UnicodeError, asyncio.TimeoutError)


class TextLoader(Protocol):
    """Anything that can fetch a record's raw markup as text."""

    async def load(self, uri: str, encoding_hint: str) -> str: ...


class ContentStore:
    """
    Per-record content cache with single-flight loading.

    Must be used from one event loop. There is no locking: the check of
    ``load_state`` and the registration of the in-flight task happen
    without an intervening await.

    Example:
        >>> store = ContentStore(ByteLoader(base_dir))
        >>> await store.ensure_loaded(record)
        >>> record.load_state
        <LoadState.LOADED: 'loaded'>
    """

    def __init__(self, loader: TextLoader):
        self._loader = loader
        self._inflight: Dict[str, asyncio.Task] = {}
        self.fetch_count = 0

    async def ensure_loaded(self, record: Record) -> None:
        """
        Make sure the record's body text is available.

        Never raises for load failures; the record ends up FAILED instead.
        Cancelling a caller does not cancel the shared load.
        """
        if record.load_state in (LoadState.LOADED, LoadState.FAILED):
            return

        task = self._inflight.get(record.id)
        if task is None:
            record.load_state = LoadState.LOADING
            task = asyncio.ensure_future(self._load(record))
            self._inflight[record.id] = task
            task.add_done_callback(lambda _t, rid=record.id: self._inflight.pop(rid, None))

        await asyncio.shield(task)

    def is_pending(self, record: Record) -> bool:
        """True while a load for this record is in flight."""
        return record.id in self._inflight

    @property
    def pending_count(self) -> int:
        return len(self._inflight)

    async def _load(self, record: Record) -> None:
        locator = record.locator
        self.fetch_count += 1
        logger.debug(f"Fetching {record.id} from {locator.uri} ({locator.encoding_hint})")
        try:
            raw = await self._loader.load(locator.uri, locator.encoding_hint)
        except LOAD_FAILURES as e:
            logger.warning(f"Failed to load body for {record.id}: {e}")
            self._mark_failed(record)
            return

        derived = to_display_and_canonical(raw)
        record.raw_text = raw
        record.display_text = derived.display
        record.canonical_text = derived.canonical
        record.load_state = LoadState.LOADED

    @staticmethod
    def _mark_failed(record: Record) -> None:
        record.display_text = ""
        record.canonical_text = ""
        record.load_state = LoadState.FAILED
