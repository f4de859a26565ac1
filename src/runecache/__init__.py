"""Public API surface for runecache."""

__version__ = "1.0.0"

from runecache.core.auth import create_key_resolver
from runecache.core.cache import CacheStatus, NullSyncProgress, SyncCache, SyncProgress
from runecache.core.config import load_config
from runecache.core.contracts.auth import AuthState, User
from runecache.core.contracts.catalog import KNOWN_TOTAL, SEARCH_FIELDS, WORLD, BoundingBox, CatalogItem
from runecache.core.contracts.config import RemoteConfig, RuneCacheConfig, StoreConfig
from runecache.core.contracts.events import AuthChanged, CatalogChanged, Signal, VisitedChanged
from runecache.core.contracts.exceptions import (
    AuthenticationError,
    ConfigError,
    RemoteError,
    RuneCacheError,
    SchemaError,
    StoreError,
    VisitedStatusError,
)
from runecache.core.contracts.remote import RemoteDataSource
from runecache.core.contracts.store import SCHEMA_VERSION, PersistentStore
from runecache.core.remote import StaticDataSource, SupabaseDataSource, create_remote
from runecache.core.stores import DocumentStore, MemoryStore, SqliteStore, create_store
from runecache.core.visited import AuthSession, VisitedOverlay
from runecache.sdk import RuneCache

__all__ = [
    "KNOWN_TOTAL",
    "SCHEMA_VERSION",
    "SEARCH_FIELDS",
    "WORLD",
    "AuthChanged",
    "AuthSession",
    "AuthState",
    "AuthenticationError",
    "BoundingBox",
    "CacheStatus",
    "CatalogChanged",
    "CatalogItem",
    "ConfigError",
    "DocumentStore",
    "MemoryStore",
    "NullSyncProgress",
    "PersistentStore",
    "RemoteConfig",
    "RemoteDataSource",
    "RemoteError",
    "RuneCache",
    "RuneCacheConfig",
    "RuneCacheError",
    "SchemaError",
    "Signal",
    "SqliteStore",
    "StaticDataSource",
    "StoreConfig",
    "StoreError",
    "SupabaseDataSource",
    "SyncCache",
    "SyncProgress",
    "User",
    "VisitedChanged",
    "VisitedOverlay",
    "VisitedStatusError",
    "__version__",
    "create_key_resolver",
    "create_remote",
    "create_store",
    "load_config",
]
