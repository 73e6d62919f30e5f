"""
Module: search.query

Purpose:
    Parse a free-text query into canonical AND-terms and decide whether a
    record matches. Matching is two-stage: metadata text is always
    available and checked first; body text is only consulted once the
    ContentStore has materialized it.

Key Functions:
    - parse_query(): raw input -> ordered tuple of canonical terms
    - metadata_text(): canonical metadata string for a record (cached)
    - match_record(): tri-state decision (YES / NO / UNDECIDED)
    - matches(): boolean convenience wrapper
    - is_metadata_term(): term can only ever be satisfied by metadata

Limitations:
    Metadata and body are joined without a separator, so a term may match
    across the boundary (e.g. the tail of the id plus the first body
    characters). This mirrors plain character adjacency and is accepted.

Dependencies:
    - re (std)
    - search.canonical: canonicalize()

Used By:
    - search.orchestrator: quick and full passes
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Dict, Iterable, Optional, Sequence, Tuple

from problem_viewer.core.models import Record

from .canonical import canonicalize

logger = logging.getLogger(__name__)

Terms = Tuple[str, ...]

# ASCII comma, ideographic comma, full-width comma, small commas.
TERM_DELIMITERS = re.compile(r"[,、，﹐﹑､]")
YEAR_PATTERN = re.compile(r"(?:19|20)\d{2}")
# Digits with optional date punctuation: "2025", "6", "2025-06", "2025/6".
METADATA_ONLY_TERM = re.compile(r"[0-9]+(?:[-_/.][0-9]+)*")


class Match(Enum):
    """Outcome of matching one record against a term list."""
    YES = "yes"
    NO = "no"
    UNDECIDED = "undecided"


def parse_query(text: Optional[str]) -> Terms:
    """
    Split a query into canonical AND-terms.

    Empty segments are dropped and duplicates keep their first position.
    An empty tuple means "no filter".

    Example:
        >>> parse_query("2025, 複素数、 Re")
        ('2025', '複素数', 're')
        >>> parse_query(" , ")
        ()
    """
    if not text:
        return ()
    terms = []
    seen = set()
    for segment in TERM_DELIMITERS.split(str(text)):
        term = canonicalize(segment)
        if term and term not in seen:
            seen.add(term)
            terms.append(term)
    return tuple(terms)


def extract_year(date: str) -> str:
    """First 4-digit year in a date string, or "" if there is none."""
    found = YEAR_PATTERN.search(date or "")
    return found.group(0) if found else ""


class MetadataIndex:
    """
    Per-record cache of canonical metadata text.

    Metadata fields never change after index load, so each record's text
    is computed once.
    """

    def __init__(self) -> None:
        self._texts: Dict[str, str] = {}

    def text_for(self, record: Record) -> str:
        text = self._texts.get(record.id)
        if text is None:
            text = build_metadata_text(record)
            self._texts[record.id] = text
        return text

    def clear(self) -> None:
        self._texts.clear()

    def __len__(self) -> int:
        return len(self._texts)


def build_metadata_text(record: Record) -> str:
    """
    Canonical metadata string: date, year, sequence, source tag,
    source display name and id, canonicalized once as a whole.
    """
    parts = [
        record.date,
        extract_year(record.date),
        str(record.sequence),
        record.source_tag,
        record.source_display,
        record.id,
    ]
    return canonicalize(" ".join(parts))


_default_index = MetadataIndex()


def metadata_text(record: Record, index: Optional[MetadataIndex] = None) -> str:
    """Canonical metadata text for a record, via the given or module cache."""
    return (index or _default_index).text_for(record)


def _all_found(terms: Sequence[str], haystack: str) -> bool:
    return all(term in haystack for term in terms)


def match_record(
    record: Record,
    terms: Sequence[str],
    index: Optional[MetadataIndex] = None,
) -> Match:
    """
    Decide whether a record satisfies every term.

    Process:
    1. No terms -> YES
    2. All terms found in metadata -> YES (body never needed)
    3. Body canonical text absent -> UNDECIDED (caller must load it)
    4. All terms found in metadata + body -> YES, else NO

    Args:
        record: Record to test
        terms: Canonical AND-terms from parse_query()
        index: Metadata cache (module-level cache if None)

    Returns:
        Match outcome
    """
    if not terms:
        return Match.YES
    meta = metadata_text(record, index)
    if _all_found(terms, meta):
        return Match.YES
    if record.canonical_text is None:
        return Match.UNDECIDED
    if _all_found(terms, meta + record.canonical_text):
        return Match.YES
    return Match.NO


def matches(
    record: Record,
    terms: Sequence[str],
    index: Optional[MetadataIndex] = None,
) -> bool:
    """True only when match_record() is YES (UNDECIDED counts as False)."""
    return match_record(record, terms, index) is Match.YES


def matches_metadata(
    record: Record,
    terms: Sequence[str],
    index: Optional[MetadataIndex] = None,
) -> bool:
    """Metadata-only check used for the provisional quick pass."""
    return _all_found(terms, metadata_text(record, index))


def source_vocabulary(records: Iterable[Record]) -> frozenset:
    """Canonical source tags and display names present in the collection."""
    vocab = set()
    for record in records:
        for value in (record.source_tag, record.source_display):
            canon = canonicalize(value)
            if canon:
                vocab.add(canon)
    return frozenset(vocab)


def is_metadata_term(term: str, sources: frozenset = frozenset()) -> bool:
    """
    True if the term is date/number-like or names a known source.

    Such terms are treated as metadata filters: a query made only of them
    is answered by the metadata pass alone, without fetching bodies.
    """
    return bool(METADATA_ONLY_TERM.fullmatch(term)) or term in sources
