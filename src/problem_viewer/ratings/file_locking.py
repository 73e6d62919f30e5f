"""
Module: ratings.file_locking

Purpose:
    Cross-platform file locking for the ratings files, which may be shared
    by several viewer instances (e.g. on a network drive).
    Uses portalocker for Mac, Windows, and Linux compatibility.

Key Functions:
    - locked_file: Context manager for locked file access
    - locked_append_jsonl: Append one JSON object per line with exclusive lock
    - locked_read_jsonl: Read all well-formed lines with shared lock
    - locked_read_modify_write_json: Read-modify-write JSON with lock

Dependencies:
    - portalocker: Cross-platform file locking

Used By:
    - ratings.store: JsonlRatingStore
    - ratings.ledger: RatedLedger
"""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Dict, Generator, List

import portalocker

logger = logging.getLogger(__name__)


@contextmanager
def locked_file(
    path: Path,
    mode: str = 'r',
    lock_type: int = portalocker.LOCK_EX,
) -> Generator:
    """
    Context manager for cross-platform locked file access.

    Args:
        path: Path to file.
        mode: File open mode ('r', 'w', 'a', etc.).
        lock_type: Lock type (LOCK_EX for exclusive, LOCK_SH for shared).

    Yields:
        Open file handle with lock held.

    Example:
        >>> with locked_file(path, 'a') as f:
        ...     f.write('data')
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    # Ensure file exists for read modes
    if 'r' in mode and not path.exists():
        path.touch()

    with open(path, mode, encoding='utf-8') as f:
        portalocker.lock(f, lock_type)
        try:
            yield f
        finally:
            portalocker.unlock(f)


def locked_append_jsonl(path: Path, record: Dict[str, Any]) -> None:
    """
    Append a record to a JSONL file with exclusive lock.

    Example:
        >>> locked_append_jsonl(ratings_path, {"postId": "q1", "score": 5})
    """
    with locked_file(path, 'a', portalocker.LOCK_EX) as f:
        f.write(json.dumps(record, ensure_ascii=False) + '\n')

    logger.debug(f"Appended record to {path.name}")


def locked_read_jsonl(path: Path) -> List[Dict[str, Any]]:
    """
    Read every well-formed JSON object line under a shared lock.

    Malformed lines (e.g. a write torn by a crash) are skipped.

    Raises:
        OSError: If the file exists but cannot be read
    """
    if not path.exists():
        return []

    records: List[Dict[str, Any]] = []
    skipped = 0
    with locked_file(path, 'r', portalocker.LOCK_SH) as f:
        for line in f:
            if not line.strip():
                continue
            try:
                item = json.loads(line)
            except json.JSONDecodeError:
                skipped += 1
                continue
            if isinstance(item, dict):
                records.append(item)
            else:
                skipped += 1

    if skipped:
        logger.warning(f"Skipped {skipped} malformed lines in {path.name}")
    return records


def locked_read_modify_write_json(
    path: Path,
    modifier: Callable[[Dict[str, Any]], Dict[str, Any]],
    default: Callable[[], Dict[str, Any]] = dict,
) -> Dict[str, Any]:
    """
    Read JSON, apply modifier, write back - all with exclusive lock.

    A file that does not hold a JSON object is replaced by default().

    Args:
        path: Path to JSON file.
        modifier: Function that takes existing data, returns modified data.
        default: Factory for default data if file doesn't exist.

    Returns:
        The modified data that was written.

    Example:
        >>> def mark(existing):
        ...     existing["2025_tokyo_6"] = 7
        ...     return existing
        >>> locked_read_modify_write_json(ledger_path, mark)
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    # Use r+ mode for read-modify-write, create if needed
    if not path.exists():
        path.write_text(json.dumps(default(), indent=2), encoding='utf-8')

    with open(path, 'r+', encoding='utf-8') as f:
        portalocker.lock(f, portalocker.LOCK_EX)
        try:
            f.seek(0)
            content = f.read()
            existing = default()
            if content.strip():
                try:
                    loaded = json.loads(content)
                except json.JSONDecodeError as e:
                    logger.warning(f"Replacing corrupted {path.name}: {e}")
                else:
                    if isinstance(loaded, dict):
                        existing = loaded

            modified = modifier(existing)

            f.seek(0)
            f.truncate()
            json.dump(modified, f, indent=2, ensure_ascii=False)

            return modified
        finally:
            portalocker.unlock(f)
