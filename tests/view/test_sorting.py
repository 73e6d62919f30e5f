"""
Unit tests for record ordering.
"""

from problem_viewer.core.models import Rating
from problem_viewer.view.sorting import SortMode, sort_records


class TestSortMode:
    """Tests for SortMode."""

    def test_toggle(self):
        """Toggling flips between the two modes."""
        assert SortMode.YEAR.toggled() is SortMode.DIFFICULTY
        assert SortMode.DIFFICULTY.toggled() is SortMode.YEAR

    def test_labels(self):
        """Each mode has its button label."""
        assert SortMode.YEAR.label == "並び順：年度順"
        assert SortMode.DIFFICULTY.label == "並び順：難易度順"


class TestSortRecords:
    """Tests for sort_records()."""

    def test_year_order(self, record_factory):
        """Newest date first, then ascending problem number."""
        records = [
            record_factory("old", date="2023-02-25", sequence=1),
            record_factory("new3", date="2025-02-25", sequence=3),
            record_factory("new1", date="2025-02-25", sequence=1),
        ]
        assert [r.id for r in sort_records(records)] == ["new1", "new3", "old"]

    def test_difficulty_order(self, record_factory):
        """Hardest first; unrated counts as zero."""
        easy, hard, unrated = record_factory("easy"), record_factory("hard"), record_factory("unrated")
        easy.rating = Rating.from_scores([2, 3])
        hard.rating = Rating.from_scores([9])

        ordered = sort_records([unrated, easy, hard], SortMode.DIFFICULTY)

        assert [r.id for r in ordered] == ["hard", "easy", "unrated"]

    def test_difficulty_ties_are_stable(self, record_factory):
        """Records with equal averages keep their incoming order."""
        records = [record_factory(f"r{i}") for i in range(4)]
        ordered = sort_records(records, SortMode.DIFFICULTY)
        assert ordered == records

    def test_returns_new_list(self, record_factory):
        """The input list is not modified."""
        records = [record_factory("b", date="2020-01-01"), record_factory("a", date="2025-01-01")]
        original = list(records)
        sort_records(records)
        assert records == original
