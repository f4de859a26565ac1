"""Core contracts-domain exports."""

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

__all__ = [
    "KNOWN_TOTAL",
    "SCHEMA_VERSION",
    "SEARCH_FIELDS",
    "WORLD",
    "AuthChanged",
    "AuthState",
    "AuthenticationError",
    "BoundingBox",
    "CatalogChanged",
    "CatalogItem",
    "ConfigError",
    "PersistentStore",
    "RemoteConfig",
    "RemoteDataSource",
    "RemoteError",
    "RuneCacheConfig",
    "RuneCacheError",
    "SchemaError",
    "Signal",
    "StoreConfig",
    "StoreError",
    "User",
    "VisitedChanged",
    "VisitedStatusError",
]
