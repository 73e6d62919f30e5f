"""
Unit tests for ViewerConfig.
"""

from pathlib import Path

import pytest

from problem_viewer.config import ViewerConfig


class TestViewerConfig:
    """Tests for validation and derived paths."""

    def test_defaults(self):
        """Defaults match the viewer's standard behaviour."""
        config = ViewerConfig(index_path=Path("site/posts_index.json"))
        assert config.page_size == 5
        assert config.concurrency == 6
        assert config.debounce_ms == 150
        assert config.source_names["tokyo"] == "東京大学"

    def test_derived_paths(self):
        """Ratings and ledger default to files beside the index."""
        config = ViewerConfig(index_path=Path("site/posts_index.json"))
        assert config.base_dir == Path("site")
        assert config.resolved_ratings_path == Path("site/ratings.jsonl")
        assert config.resolved_ledger_path == Path("site/rated.json")

    def test_explicit_ratings_path(self):
        """An explicit ratings path wins."""
        config = ViewerConfig(index_path=Path("i.json"), ratings_path=Path("/data/r.jsonl"))
        assert config.resolved_ratings_path == Path("/data/r.jsonl")

    @pytest.mark.parametrize(
        "field,value",
        [
            ("page_size", 0),
            ("concurrency", 0),
            ("debounce_ms", -1),
            ("proximity_margin_px", -5),
            ("http_timeout_s", 0),
            ("log_level", "LOUD"),
        ],
    )
    def test_invalid_values(self, field, value):
        """Out-of-range values are rejected."""
        with pytest.raises(ValueError):
            ViewerConfig(index_path=Path("i.json"), **{field: value})

    def test_frozen(self):
        """Configuration cannot be changed after construction."""
        config = ViewerConfig(index_path=Path("i.json"))
        with pytest.raises(AttributeError):
            config.page_size = 10


class TestFromArgs:
    """Tests for the command-line front end."""

    def test_parses_arguments(self):
        """Flags map onto fields."""
        config = ViewerConfig.from_args([
            "site/posts_index.json",
            "--ratings", "r.jsonl",
            "--page-size", "10",
            "--concurrency", "3",
            "--debounce-ms", "0",
            "--log-level", "DEBUG",
        ])
        assert config.index_path == Path("site/posts_index.json")
        assert config.ratings_path == Path("r.jsonl")
        assert config.page_size == 10
        assert config.concurrency == 3
        assert config.debounce_ms == 0
        assert config.log_level == "DEBUG"

    def test_invalid_value_exits(self):
        """Validation errors become argparse errors."""
        with pytest.raises(SystemExit):
            ViewerConfig.from_args(["i.json", "--page-size", "0"])

    def test_missing_index_exits(self):
        """The index path is required."""
        with pytest.raises(SystemExit):
            ViewerConfig.from_args([])
