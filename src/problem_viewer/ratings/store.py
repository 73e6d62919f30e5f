"""
Module: ratings.store

Purpose:
    Read and submit difficulty scores. Scores live in an append-only JSONL
    file, one submission per line:

        {"postId": "2025_tokyo_6", "score": 7, "createdAt": "2025-06-01T09:00:00+00:00"}

    File I/O runs off the event loop so a slow (network) drive never
    blocks searching.

Key Classes:
    - RatingStore: Protocol for any score backend
    - JsonlRatingStore: portalocker-guarded JSONL backend

Key Functions:
    - load_rating_map(): Read all scores, absorbing read failures
    - apply_rating_map(): Set Rating on each record from its scores
    - submit_rating(): Validate, submit, then update the record locally

Dependencies:
    - asyncio (std): to_thread
    - ratings.file_locking: portalocker helpers

Used By:
    - view.session: startup and rating submission
    - gui.widgets.problem_card: score buttons
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Protocol

from problem_viewer.core.errors import RatingReadError, RatingSubmitError
from problem_viewer.core.models import Rating, Record

from .file_locking import locked_append_jsonl, locked_read_jsonl

logger = logging.getLogger(__name__)

MIN_SCORE = 1
MAX_SCORE = 10

RatingMap = Dict[str, List[float]]


class RatingStore(Protocol):
    """Backend for difficulty scores."""

    async def list_scores(self) -> RatingMap:
        """Return every score grouped by record id."""
        ...

    async def submit_score(self, record_id: str, score: int) -> None:
        """Persist one score."""
        ...


class JsonlRatingStore:
    """
    Score store backed by a JSONL file.

    Example:
        >>> store = JsonlRatingStore(Path("site/ratings.jsonl"))
        >>> await store.submit_score("2025_tokyo_6", 7)
        >>> (await store.list_scores())["2025_tokyo_6"]
        [7.0]
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    async def list_scores(self) -> RatingMap:
        """
        Raises:
            RatingReadError: If the file exists but cannot be read
        """
        try:
            rows = await asyncio.to_thread(locked_read_jsonl, self.path)
        except (OSError, UnicodeDecodeError) as e:
            raise RatingReadError(f"Cannot read ratings {self.path}: {e}") from e
        return _group_scores(rows)

    async def submit_score(self, record_id: str, score: int) -> None:
        """
        Raises:
            RatingSubmitError: If the line could not be appended
        """
        row = {
            "postId": record_id,
            "score": score,
            "createdAt": datetime.now(timezone.utc).isoformat(timespec="seconds"),
        }
        try:
            await asyncio.to_thread(locked_append_jsonl, self.path, row)
        except OSError as e:
            raise RatingSubmitError(f"Cannot write rating to {self.path}: {e}") from e


def _group_scores(rows: Iterable[Mapping]) -> RatingMap:
    grouped: RatingMap = {}
    for row in rows:
        record_id = row.get("postId")
        score = row.get("score")
        if not isinstance(record_id, str) or isinstance(score, bool):
            continue
        try:
            value = float(score)
        except (TypeError, ValueError):
            continue
        grouped.setdefault(record_id, []).append(value)
    return grouped


async def load_rating_map(store: RatingStore) -> RatingMap:
    """
    Read every score; a failure is logged and yields an empty map.

    The view keeps working with all records unrated.
    """
    try:
        rating_map = await store.list_scores()
    except RatingReadError as e:
        logger.warning(f"Ratings unavailable, continuing unrated: {e}")
        return {}
    logger.info(f"Loaded ratings for {len(rating_map)} records")
    return rating_map


def apply_rating_map(records: Iterable[Record], rating_map: Mapping[str, Iterable[float]]) -> None:
    """Set each record's Rating from its score list (unrated when absent)."""
    for record in records:
        record.rating = Rating.from_scores(rating_map.get(record.id, ()))


async def submit_rating(store: RatingStore, record: Record, score: int) -> Rating:
    """
    Submit one score and fold it into the record's rating.

    The record is updated only after the store accepted the score.

    Returns:
        The record's new Rating

    Raises:
        RatingSubmitError: On an out-of-range score or a store failure
    """
    if isinstance(score, bool) or not isinstance(score, int) or not MIN_SCORE <= score <= MAX_SCORE:
        raise RatingSubmitError(f"Score must be an integer {MIN_SCORE}-{MAX_SCORE}: {score!r}")

    await store.submit_score(record.id, score)

    record.rating = record.rating.with_score(score)
    logger.info(f"Rated {record.id}: {score} (now {record.rating.count} ratings)")
    return record.rating
