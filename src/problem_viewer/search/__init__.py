"""
Search Module.

Canonicalization, query matching, lazy content loading and the
epoch-guarded search runner.
"""

from .canonical import (
    DISPLAY_RULES,
    CanonicalRule,
    CanonicalText,
    canonicalize,
    to_display,
    to_display_and_canonical,
    to_safe_html,
)
from .content_store import ContentStore
from .orchestrator import SearchOrchestrator, SearchResult
from .query import Match, MetadataIndex, match_record, matches, parse_query

__all__ = [
    "DISPLAY_RULES",
    "CanonicalRule",
    "CanonicalText",
    "canonicalize",
    "to_display",
    "to_display_and_canonical",
    "to_safe_html",
    "ContentStore",
    "SearchOrchestrator",
    "SearchResult",
    "Match",
    "MetadataIndex",
    "match_record",
    "matches",
    "parse_query",
]
