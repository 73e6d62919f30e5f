"""
Problem Viewer Core Package

Shared record model and error taxonomy used by every other subpackage.

**MUTATION RIGHTS:**

Records are the only mutable model. Each field group has exactly one owner:

| Fields | Owner |
|--------|-------|
| `raw_text`, `display_text`, `canonical_text`, `load_state` | `search.content_store.ContentStore` |
| `rating` | `ratings.store.submit_rating` / `apply_rating_map` |
| everything else | set once by `loading.index` |
"""

from .errors import (
    IndexLoadError,
    RatingReadError,
    RatingSubmitError,
    RecordLoadError,
    ViewerError,
)
from .models import LoadState, Locator, Rating, Record, SortKey

__all__ = [
    "Record",
    "Locator",
    "Rating",
    "SortKey",
    "LoadState",
    "ViewerError",
    "IndexLoadError",
    "RecordLoadError",
    "RatingReadError",
    "RatingSubmitError",
]
