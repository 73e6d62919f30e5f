"""
Core Models Package

The single mutable Record type and its small immutable value objects.
"""

from .records import LoadState, Locator, Rating, Record, SortKey

__all__ = [
    "Record",
    "Locator",
    "Rating",
    "SortKey",
    "LoadState",
]
