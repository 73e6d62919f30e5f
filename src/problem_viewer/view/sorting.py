"""
Module: view.sorting

Purpose:
    Orderings for the displayed list. Sorting only reads index metadata
    and cached ratings; it never triggers a content fetch.

Key Classes:
    - SortMode: YEAR (newest first) / DIFFICULTY (hardest first)

Key Functions:
    - sort_records(): New list in the requested order
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, List

from problem_viewer.core.models import Record


class SortMode(Enum):
    YEAR = "year"
    DIFFICULTY = "difficulty"

    def toggled(self) -> "SortMode":
        return SortMode.DIFFICULTY if self is SortMode.YEAR else SortMode.YEAR

    @property
    def label(self) -> str:
        return "並び順：年度順" if self is SortMode.YEAR else "並び順：難易度順"


def sort_records(records: Iterable[Record], mode: SortMode = SortMode.YEAR) -> List[Record]:
    """
    Return a new list in display order.

    YEAR: descending date string, then ascending sequence number.
    DIFFICULTY: descending average rating (unrated counts as 0); ties keep
    their incoming order.
    """
    items = list(records)
    if mode is SortMode.DIFFICULTY:
        items.sort(key=lambda r: r.rating.average or 0.0, reverse=True)
    else:
        # Two stable passes: sequence ascending, then date descending.
        items.sort(key=lambda r: r.sequence)
        items.sort(key=lambda r: r.date, reverse=True)
    return items
