"""
Module: ratings.ledger

Purpose:
    Remember which records this user has already rated, so the score
    buttons can be locked after one submission per record.

Key Classes:
    - RatedLedger: JSON-backed {record_id: score} map
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Optional

from .file_locking import locked_read_modify_write_json

logger = logging.getLogger(__name__)


class RatedLedger:
    """
    Local "already rated" flags.

    Example:
        >>> ledger = RatedLedger(Path("site/rated.json"))
        >>> ledger.mark("2025_tokyo_6", 7)
        >>> ledger.is_rated("2025_tokyo_6")
        True
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._scores: Dict[str, int] = self._load()

    def _load(self) -> Dict[str, int]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding='utf-8'))
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(f"Ignoring unreadable rated ledger {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring rated ledger {self.path}: expected an object")
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, int)}

    def is_rated(self, record_id: str) -> bool:
        return record_id in self._scores

    def score_for(self, record_id: str) -> Optional[int]:
        return self._scores.get(record_id)

    def mark(self, record_id: str, score: int) -> None:
        """
        Record a submitted score. A write failure is logged; the in-memory
        flag still holds for this session.
        """
        self._scores[record_id] = score

        def _update(existing: Dict) -> Dict:
            existing[record_id] = score
            return existing

        try:
            locked_read_modify_write_json(self.path, _update)
        except OSError as e:
            logger.warning(f"Could not save rated ledger {self.path}: {e}")

    def __len__(self) -> int:
        return len(self._scores)
