"""
Ratings Module.

Difficulty score storage, the local rated ledger and the locking helpers
they share.
"""

from .ledger import RatedLedger
from .store import (
    JsonlRatingStore,
    RatingStore,
    apply_rating_map,
    load_rating_map,
    submit_rating,
)

__all__ = [
    "RatedLedger",
    "RatingStore",
    "JsonlRatingStore",
    "apply_rating_map",
    "load_rating_map",
    "submit_rating",
]
