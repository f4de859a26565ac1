"""Core cache-domain exports."""

from .bounds import WILDCARD, BoundsIndex
from .cache import DEFAULT_RETENTION, CacheStatus, SyncCache
from .progress import NullSyncProgress, SyncProgress
from .search import matches, search_items

__all__ = [
    "DEFAULT_RETENTION",
    "WILDCARD",
    "BoundsIndex",
    "CacheStatus",
    "NullSyncProgress",
    "SyncCache",
    "SyncProgress",
    "matches",
    "search_items",
]
