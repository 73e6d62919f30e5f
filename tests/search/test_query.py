"""
Unit tests for query parsing and record matching.
"""

import pytest

from problem_viewer.core.models import LoadState
from problem_viewer.search.query import (
    Match,
    MetadataIndex,
    build_metadata_text,
    extract_year,
    is_metadata_term,
    match_record,
    matches,
    matches_metadata,
    parse_query,
    source_vocabulary,
)


def _with_body(record, canonical):
    record.display_text = canonical
    record.canonical_text = canonical
    record.load_state = LoadState.LOADED
    return record


class TestParseQuery:
    """Tests for term splitting."""

    def test_empty(self):
        """Empty or delimiter-only input means no filter."""
        assert parse_query("") == ()
        assert parse_query(None) == ()
        assert parse_query(" ,、 ，") == ()

    def test_all_delimiters(self):
        """ASCII, ideographic and full-width commas all split terms."""
        assert parse_query("a,b、c，d") == ("a", "b", "c", "d")

    def test_terms_are_canonical(self):
        """Each term is canonicalized."""
        assert parse_query(" Binary Search , ｎ^{2} ") == ("binarysearch", "n^2")

    def test_duplicates_keep_first(self):
        """Repeated terms collapse while keeping order."""
        assert parse_query("x, y, X") == ("x", "y")


class TestMetadata:
    """Tests for metadata text."""

    def test_extract_year(self):
        """The first 4-digit year is found."""
        assert extract_year("2025-02-25") == "2025"
        assert extract_year("令和7年") == ""
        assert extract_year("") == ""

    def test_metadata_text_contents(self, record_factory):
        """Date, year, sequence, source and id all appear canonically."""
        record = record_factory("2025_tokyo_6", date="2025-06-01", sequence=6,
                                source="Tokyo", source_display="東京大学")
        text = build_metadata_text(record)
        assert "2025-06-01" in text
        assert "tokyo" in text
        assert "東京大学" in text
        assert "2025_tokyo_6" in text
        assert " " not in text

    def test_index_caches(self, record_factory):
        """Metadata text is computed once per record."""
        index = MetadataIndex()
        record = record_factory("a")
        first = index.text_for(record)
        assert index.text_for(record) is first
        assert len(index) == 1
        index.clear()
        assert len(index) == 0


class TestMatchRecord:
    """Tests for the tri-state matcher."""

    def test_no_terms_is_yes(self, record_factory):
        """An empty term list matches everything."""
        assert match_record(record_factory("a"), ()) is Match.YES

    def test_metadata_match_needs_no_body(self, record_factory):
        """Date and sequence terms match without a body."""
        record = record_factory("q", date="2025-06-01", sequence=6)
        assert match_record(record, parse_query("2025,6"), MetadataIndex()) is Match.YES
        assert record.load_state is LoadState.NOT_LOADED

    def test_missing_body_is_undecided(self, record_factory):
        """A body term on an unloaded record cannot be decided."""
        record = record_factory("q")
        assert match_record(record, ("integral",), MetadataIndex()) is Match.UNDECIDED
        assert matches(record, ("integral",), MetadataIndex()) is False

    def test_body_match(self, record_factory):
        """Terms found in the body match once it is loaded."""
        record = _with_body(record_factory("q"), "evaluatetheintegral")
        assert match_record(record, ("integral",), MetadataIndex()) is Match.YES

    def test_and_across_metadata_and_body(self, record_factory):
        """One term in metadata and one in the body together match."""
        record = _with_body(record_factory("q", source="kyoto"), "provethat")
        assert matches(record, ("kyoto", "prove"), MetadataIndex())
        assert not matches(record, ("kyoto", "integral"), MetadataIndex())

    def test_failed_body_never_matches_body_terms(self, record_factory):
        """A failed record has an empty body: only metadata can match."""
        record = record_factory("q", source="osaka")
        record.display_text = ""
        record.canonical_text = ""
        record.load_state = LoadState.FAILED
        index = MetadataIndex()
        assert match_record(record, ("integral",), index) is Match.NO
        assert match_record(record, ("osaka",), index) is Match.YES

    def test_superset_property(self, record_factory):
        """Adding a term never grows the match set."""
        index = MetadataIndex()
        records = [
            _with_body(record_factory("a"), "integralofsin"),
            _with_body(record_factory("b"), "integralofcos"),
            _with_body(record_factory("c"), "limitofsin"),
        ]
        single = {r.id for r in records if matches(r, ("integral",), index)}
        double = {r.id for r in records if matches(r, ("integral", "sin"), index)}
        assert double <= single
        assert single == {"a", "b"}
        assert double == {"a"}

    def test_exponent_spellings_match_each_other(self, record_factory):
        """n^{2} in the query finds n^2 in the body and vice versa."""
        index = MetadataIndex()
        braced = _with_body(record_factory("a"), "n^2+n")
        assert matches(braced, parse_query("n^{2}"), index)
        assert matches(braced, parse_query("n^2"), index)

    def test_matches_metadata_ignores_body(self, record_factory):
        """The quick pass never looks at the body."""
        record = _with_body(record_factory("q"), "integral")
        assert not matches_metadata(record, ("integral",), MetadataIndex())


class TestMetadataTerms:
    """Tests for metadata-only term detection."""

    @pytest.mark.parametrize("term", ["2025", "6", "2025-06", "2025/6", "2025_1"])
    def test_numeric_terms(self, term):
        """Numbers and date fragments are metadata terms."""
        assert is_metadata_term(term)

    @pytest.mark.parametrize("term", ["integral", "x^2", "2x", "-1"])
    def test_content_terms(self, term):
        """Anything else may need a body."""
        assert not is_metadata_term(term)

    def test_source_names(self, record_factory):
        """Known source tags and display names are metadata terms."""
        sources = source_vocabulary([
            record_factory("a", source="Tokyo", source_display="東京大学"),
        ])
        assert is_metadata_term("tokyo", sources)
        assert is_metadata_term("東京大学", sources)
        assert not is_metadata_term("東京", sources)
