"""
Module: view.presentation

Purpose:
    Small, toolkit-independent helpers that turn a record into the strings
    a problem card shows: source name, tag chips, average badge and its
    difficulty band.

Key Functions:
    - display_source_name(): tag -> human-readable name
    - build_tags(): chip labels for a record
    - difficulty_band(): "low" / "mid" / "high" / None
    - format_average(): badge text
"""

from __future__ import annotations

import re
from typing import List, Mapping, Optional

from problem_viewer.core.models import Rating, Record

MAX_TAGS = 6
MAX_SOURCE_TAGS = 4
UNRATED_LABEL = "未評価"

_SOURCE_SPLIT = re.compile(r"[｜|・\s]+")


def display_source_name(source: str, names: Mapping[str, str]) -> str:
    """
    Human-readable source name (case-insensitive lookup, falls back to the tag).

    Example:
        >>> display_source_name("Tokyo", {"tokyo": "東京大学"})
        '東京大学'
    """
    if not source:
        return ""
    return names.get(str(source).lower(), source)


def build_tags(record: Record) -> List[str]:
    """Date, up to four source words and the problem number; unique, max six."""
    tags: List[str] = []
    if record.date:
        tags.append(record.date)
    if record.source_tag:
        words = [w for w in _SOURCE_SPLIT.split(record.source_tag) if w]
        tags.extend(words[:MAX_SOURCE_TAGS])
    if record.sequence:
        tags.append(f"第{record.sequence}問")
    return list(dict.fromkeys(tags))[:MAX_TAGS]


def difficulty_band(average: Optional[float]) -> Optional[str]:
    """Colour band for an average difficulty on the 1-10 scale."""
    if average is None or average <= 0:
        return None
    if average < 4:
        return "low"
    if average < 7:
        return "mid"
    return "high"


def format_average(rating: Rating) -> str:
    """
    Example:
        >>> format_average(Rating(total=13.0, count=2))
        '6.50（2人）'
    """
    average = rating.average
    if average is None:
        return UNRATED_LABEL
    return f"{average:.2f}（{rating.count}人）"
