"""
Unit tests for card text helpers.
"""

import pytest

from problem_viewer.core.models import Rating
from problem_viewer.view.presentation import (
    build_tags,
    difficulty_band,
    display_source_name,
    format_average,
)


class TestDisplaySourceName:
    """Tests for source name lookup."""

    def test_case_insensitive(self):
        """Tags map to display names regardless of case."""
        assert display_source_name("KYOTO", {"kyoto": "京都大学"}) == "京都大学"

    def test_unknown_falls_back(self):
        """Unknown tags are shown as-is."""
        assert display_source_name("防衛医大", {}) == "防衛医大"
        assert display_source_name("", {}) == ""


class TestBuildTags:
    """Tests for chip labels."""

    def test_basic(self, record_factory):
        """Date, source words and problem number."""
        record = record_factory("a", date="2025-02-25", sequence=6, source="東大｜理系")
        assert build_tags(record) == ["2025-02-25", "東大", "理系", "第6問"]

    def test_no_sequence(self, record_factory):
        """A zero problem number adds no chip."""
        record = record_factory("a", date="2025-02-25", sequence=0, source="tokyo")
        assert build_tags(record) == ["2025-02-25", "tokyo"]

    def test_limits_and_dedup(self, record_factory):
        """At most four source words, no duplicates, six chips in total."""
        record = record_factory("a", date="x", sequence=1, source="x・a・b・c・d・e")
        tags = build_tags(record)
        assert tags == ["x", "a", "b", "c", "第1問"]
        assert len(tags) <= 6


class TestAverage:
    """Tests for the average badge."""

    @pytest.mark.parametrize(
        "average,band",
        [(None, None), (0.0, None), (1.0, "low"), (3.99, "low"), (4.0, "mid"), (6.99, "mid"), (7.0, "high")],
    )
    def test_difficulty_band(self, average, band):
        """Averages fall into low / mid / high."""
        assert difficulty_band(average) == band

    def test_format_unrated(self):
        """No scores reads as unrated."""
        assert format_average(Rating()) == "未評価"

    def test_format_rated(self):
        """Two decimals and the rater count."""
        assert format_average(Rating(total=13.0, count=2)) == "6.50（2人）"
