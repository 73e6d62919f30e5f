"""
Module: config

Purpose:
    Configuration dataclass for the viewer. Immutable configuration with
    validation on construction, plus a command-line front end.

Key Classes:
    - ViewerConfig: Main configuration for a viewing session

Dependencies:
    - argparse (std)
    - dataclasses (std)
    - pathlib (std)

Used By:
    - gui.app: entry point
    - gui.main_window: session wiring
    - loading.index: legacy encoding prefixes, source names
"""

from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Sequence, Tuple


# Older archive folders were authored in Shift_JIS.
LEGACY_ENCODING_PREFIXES: Tuple[str, ...] = (
    "posts/01_tokyo/",
    "posts/02_kyoto/",
    "posts/03_hokudai/",
    "posts/04_tohoku/",
    "posts/05_nagoya/",
    "posts/06_osaka/",
    "posts/07_kyushu/",
    "posts/08_titech/",
)

SOURCE_NAMES: Mapping[str, str] = {
    "titech": "東京科学大学",
    "tokyo": "東京大学",
    "kyoto": "京都大学",
    "osaka": "大阪大学",
    "tohoku": "東北大学",
    "hokkaido": "北海道大学",
    "nagoya": "名古屋大学",
    "kyushu": "九州大学",
}

DEFAULT_SOURCE = "入試問題"


@dataclass(frozen=True)
class ViewerConfig:
    """
    Configuration for a viewing session (immutable).

    Attributes:
        index_path: JSON index of records
        ratings_path: JSONL ratings store (defaults to ratings.jsonl beside the index)
        rated_ledger_path: Local "already rated" ledger (defaults beside the index)
        page_size: Records rendered per page
        concurrency: Concurrent body fetches during a search
        debounce_ms: Quiet period after typing before a search starts
        proximity_margin_px: Distance from the end of the list that loads the next page
        http_timeout_s: Total timeout for one HTTP body fetch
        legacy_encoding_prefixes: Locator prefixes whose "auto" hint means Shift_JIS
        source_names: Source tag -> display name
        log_level: Root logging level name

    Example:
        >>> config = ViewerConfig(index_path=Path("site/posts_index.json"))
        >>> config.resolved_ratings_path
        PosixPath('site/ratings.jsonl')
    """

    # Required
    index_path: Path

    # Persistence
    ratings_path: Optional[Path] = None
    rated_ledger_path: Optional[Path] = None

    # Pipeline
    page_size: int = 5
    concurrency: int = 6
    debounce_ms: int = 150
    proximity_margin_px: int = 600
    http_timeout_s: float = 30.0

    # Content conventions
    legacy_encoding_prefixes: Tuple[str, ...] = LEGACY_ENCODING_PREFIXES
    source_names: Mapping[str, str] = field(default_factory=lambda: dict(SOURCE_NAMES))

    log_level: str = "INFO"

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.page_size <= 0:
            raise ValueError(f"page_size must be positive: {self.page_size}")
        if self.concurrency <= 0:
            raise ValueError(f"concurrency must be positive: {self.concurrency}")
        if self.debounce_ms < 0:
            raise ValueError(f"debounce_ms must be non-negative: {self.debounce_ms}")
        if self.proximity_margin_px < 0:
            raise ValueError(f"proximity_margin_px must be non-negative: {self.proximity_margin_px}")
        if self.http_timeout_s <= 0:
            raise ValueError(f"http_timeout_s must be positive: {self.http_timeout_s}")
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level: {self.log_level!r}")

    @property
    def base_dir(self) -> Path:
        """Directory that relative content locators resolve against."""
        return self.index_path.parent

    @property
    def resolved_ratings_path(self) -> Path:
        return self.ratings_path or self.base_dir / "ratings.jsonl"

    @property
    def resolved_ledger_path(self) -> Path:
        return self.rated_ledger_path or self.base_dir / "rated.json"

    @classmethod
    def from_args(cls, argv: Optional[Sequence[str]] = None) -> "ViewerConfig":
        """
        Build a config from command-line arguments.

        Raises:
            SystemExit: On invalid arguments (argparse behaviour)
        """
        parser = build_arg_parser()
        args = parser.parse_args(argv)
        try:
            return cls(
                index_path=Path(args.index),
                ratings_path=Path(args.ratings) if args.ratings else None,
                page_size=args.page_size,
                concurrency=args.concurrency,
                debounce_ms=args.debounce_ms,
                log_level=args.log_level,
            )
        except ValueError as e:
            parser.error(str(e))


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="problem-viewer",
        description="Browse, search and rate typeset problem documents.",
    )
    parser.add_argument("index", help="Path to posts_index.json")
    parser.add_argument("--ratings", help="Ratings JSONL file (default: beside the index)")
    parser.add_argument("--page-size", type=int, default=5)
    parser.add_argument("--concurrency", type=int, default=6)
    parser.add_argument("--debounce-ms", type=int, default=150)
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser

