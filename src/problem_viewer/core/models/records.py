"""
Module: records

Purpose:
    Provides the Record dataclass - one problem document with identity,
    index metadata, lazily loaded content and an aggregated difficulty
    rating. Records are created in bulk by the index loader and then
    mutated only by their field owners (see core package docstring).

Key Classes:
    - Record: Mutable problem document
    - Locator: Where to fetch raw content and how to decode it
    - SortKey: (date, sequence) pair used for default ordering
    - Rating: Running total/count of difficulty scores
    - LoadState: Content lifecycle state

Dependencies:
    - dataclasses (std)
    - enum (std)

Used By:
    - loading.index: Record construction
    - search.content_store: content fields
    - search.query: metadata text
    - ratings.store: rating fields
    - view.*: sorting, pagination, presentation
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class LoadState(Enum):
    """Content lifecycle of a record."""
    NOT_LOADED = "not_loaded"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class Locator:
    """
    Content locator (immutable).

    Attributes:
        uri: Path relative to the index, or an http(s) URL
        encoding_hint: "auto" or an explicit charset such as "shift_jis"
    """
    uri: str
    encoding_hint: str = "auto"


@dataclass(frozen=True, slots=True, order=True)
class SortKey:
    """
    Composite default-ordering key.

    Attributes:
        date: Date string as given by the index (e.g. "2025-06-01")
        sequence: Problem number within that date/source
    """
    date: str = ""
    sequence: int = 0


@dataclass(frozen=True, slots=True)
class Rating:
    """
    Aggregated difficulty rating (immutable; replaced on every update).

    Invariants:
        - count >= 0
        - average is None exactly when count == 0

    Example:
        >>> Rating.from_scores([3, 5]).average
        4.0
        >>> Rating().with_score(7).count
        1
    """
    total: float = 0.0
    count: int = 0

    def __post_init__(self) -> None:
        if self.count < 0:
            raise ValueError(f"count must be non-negative: {self.count}")

    @classmethod
    def from_scores(cls, scores) -> "Rating":
        values = [float(s) for s in scores]
        return cls(total=sum(values), count=len(values))

    @property
    def average(self) -> Optional[float]:
        if self.count == 0:
            return None
        return self.total / self.count

    def with_score(self, score: float) -> "Rating":
        return Rating(total=self.total + float(score), count=self.count + 1)


@dataclass(eq=False)
class Record:
    """
    One problem document (mutable, identity by ``id``).

    Content fields (``raw_text``, ``display_text``, ``canonical_text``,
    ``load_state``) are written only by the ContentStore; ``rating`` only
    by the ratings module. Display and canonical text are always set
    together: either both are None or both are strings.

    Attributes:
        id: Globally unique record identifier
        sort_key: Date/sequence default-ordering key
        source_tag: Short origin label (e.g. "tokyo")
        source_display: Human-readable form of the source tag
        locator: Where to fetch the raw markup
        explanation: Optional commentary shown under the problem
        answer_url: Optional link to a model answer
        rating: Aggregated difficulty rating

    Example:
        >>> r = Record(
        ...     id="2025_tokyo_6",
        ...     sort_key=SortKey("2025-06-01", 6),
        ...     source_tag="tokyo",
        ...     locator=Locator("posts/2025/tokyo_6.tex"),
        ... )
        >>> r.has_body
        False
    """

    id: str
    sort_key: SortKey
    source_tag: str
    locator: Locator
    source_display: str = ""
    explanation: str = ""
    answer_url: str = ""
    rating: Rating = field(default_factory=Rating)

    raw_text: Optional[str] = None
    display_text: Optional[str] = None
    canonical_text: Optional[str] = None
    load_state: LoadState = LoadState.NOT_LOADED

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Record id must be non-empty")
        if not self.source_display:
            self.source_display = self.source_tag

    def __hash__(self) -> int:
        return hash(self.id)

    @property
    def date(self) -> str:
        return self.sort_key.date

    @property
    def sequence(self) -> int:
        return self.sort_key.sequence

    @property
    def has_body(self) -> bool:
        """True once display/canonical text exist (loaded or failed-empty)."""
        return self.canonical_text is not None

    def __repr__(self) -> str:
        return (
            f"Record(id={self.id!r}, date={self.date!r}, "
            f"sequence={self.sequence}, state={self.load_state.value})"
        )
