"""
Module: loading.index

Purpose:
    Load the record index (posts_index.json) and build Record objects.
    The index is a JSON array of descriptors:

        {"id": "...", "tex": "posts/...", "date": "2025-02-25", "no": 6,
         "source": "tokyo", "encoding": "auto", "explain": "...", "answer": "..."}

    Entries without "id" or "tex" are skipped. Failure to read or parse the
    file, or an index with no usable entries, is fatal for the view.

Key Functions:
    - load_index(): Read, validate and sort the index
    - parse_index(): Build records from already-decoded JSON
    - guess_encoding(): Refine an "auto" hint from the locator path

Dependencies:
    - json (std)
    - core.models: Record and value types
    - view.sorting / view.presentation: default order, source names

Used By:
    - gui.main_window: startup
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from problem_viewer.config import DEFAULT_SOURCE, LEGACY_ENCODING_PREFIXES, SOURCE_NAMES
from problem_viewer.core.errors import IndexLoadError
from problem_viewer.core.models import Locator, Record, SortKey
from problem_viewer.view.presentation import display_source_name
from problem_viewer.view.sorting import SortMode, sort_records

logger = logging.getLogger(__name__)


def guess_encoding(uri: str, prefixes: Sequence[str] = LEGACY_ENCODING_PREFIXES) -> str:
    """
    Encoding for an "auto" locator: legacy folders are Shift_JIS.

    Example:
        >>> guess_encoding("posts/01_tokyo/1999_1.tex")
        'shift_jis'
        >>> guess_encoding("posts/2025/tokyo_1.tex")
        'utf-8'
    """
    path = str(uri or "")
    if any(path.startswith(prefix) for prefix in prefixes):
        return "shift_jis"
    return "utf-8"


def _as_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        try:
            return int(float(value))
        except (TypeError, ValueError, OverflowError):
            return 0


def _as_str(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return str(value)


def parse_entry(
    entry: Mapping[str, Any],
    *,
    source_names: Mapping[str, str] = SOURCE_NAMES,
    legacy_prefixes: Sequence[str] = LEGACY_ENCODING_PREFIXES,
) -> Optional[Record]:
    """
    Build one Record from an index descriptor.

    Returns:
        Record, or None if the descriptor lacks an id or locator
    """
    if not isinstance(entry, Mapping):
        return None
    record_id = _as_str(entry.get("id")).strip()
    uri = _as_str(entry.get("tex")).strip()
    if not record_id or not uri:
        return None

    hint = _as_str(entry.get("encoding"), "auto").strip() or "auto"
    if hint.lower() == "auto":
        hint = guess_encoding(uri, legacy_prefixes)

    source = _as_str(entry.get("source"), DEFAULT_SOURCE) or DEFAULT_SOURCE
    return Record(
        id=record_id,
        sort_key=SortKey(date=_as_str(entry.get("date")), sequence=_as_int(entry.get("no", 0))),
        source_tag=source,
        source_display=display_source_name(source, source_names),
        locator=Locator(uri=uri, encoding_hint=hint),
        explanation=_as_str(entry.get("explain")),
        answer_url=_as_str(entry.get("answer")),
    )


def parse_index(
    entries: Iterable[Any],
    *,
    source_names: Mapping[str, str] = SOURCE_NAMES,
    legacy_prefixes: Sequence[str] = LEGACY_ENCODING_PREFIXES,
) -> List[Record]:
    """
    Build records from decoded index entries, in default (year) order.

    Later duplicates of an id are skipped.
    """
    records: List[Record] = []
    seen = set()
    skipped = 0
    for entry in entries or ():
        record = parse_entry(entry, source_names=source_names, legacy_prefixes=legacy_prefixes)
        if record is None or record.id in seen:
            skipped += 1
            continue
        seen.add(record.id)
        records.append(record)

    if skipped:
        logger.warning(f"Skipped {skipped} index entries without id/tex or with duplicate ids")
    return sort_records(records, SortMode.YEAR)


def load_index(
    path: Path,
    *,
    source_names: Mapping[str, str] = SOURCE_NAMES,
    legacy_prefixes: Sequence[str] = LEGACY_ENCODING_PREFIXES,
) -> List[Record]:
    """
    Load and validate the record index.

    Args:
        path: Path to posts_index.json
        source_names: Source tag -> display name
        legacy_prefixes: Locator prefixes that mean Shift_JIS for "auto"

    Returns:
        Records sorted newest first

    Raises:
        IndexLoadError: If the file is unreadable, not a JSON array, or
            contains no usable entries

    Example:
        >>> records = load_index(Path("site/posts_index.json"))
        >>> records[0].date
        '2025-02-25'
    """
    try:
        payload = json.loads(Path(path).read_text(encoding="utf-8-sig"))
    except OSError as e:
        raise IndexLoadError(f"Cannot read index {path}: {e}") from e
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise IndexLoadError(f"Index {path} is not valid JSON: {e}") from e

    if not isinstance(payload, list):
        raise IndexLoadError(f"Index {path} must be a JSON array, got {type(payload).__name__}")

    records = parse_index(payload, source_names=source_names, legacy_prefixes=legacy_prefixes)
    if not records:
        raise IndexLoadError(f"Index {path} contains no usable records")

    logger.info(f"Loaded {len(records)} records from {path}")
    return records
