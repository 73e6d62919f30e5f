"""
View Module.

Toolkit-independent view logic: sorting, pagination, card text helpers
and the per-view session state.
"""

from .paginator import PageState, PaginationController, ProximitySource, RenderSink
from .presentation import build_tags, difficulty_band, display_source_name, format_average
from .sorting import SortMode, sort_records

__all__ = [
    "PageState",
    "PaginationController",
    "ProximitySource",
    "RenderSink",
    "build_tags",
    "difficulty_band",
    "display_source_name",
    "format_average",
    "SortMode",
    "sort_records",
]
