"""Persistent store backends and selection."""

from __future__ import annotations

from runecache.core.contracts.config import StoreConfig
from runecache.core.contracts.exceptions import ConfigError
from runecache.core.contracts.store import PersistentStore
from runecache.core.stores.document import DocumentStore
from runecache.core.stores.memory import MemoryStore
from runecache.core.stores.sqlite import SqliteStore


def create_store(config: StoreConfig) -> PersistentStore:
    """Build the configured backend.

    The returned store is an async context manager; entering it opens the
    backend and applies the schema-version migration.
    """
    if config.backend == "sqlite":
        return SqliteStore(config.path)
    if config.backend == "document":
        return DocumentStore(config.path)
    if config.backend == "memory":
        return MemoryStore()
    raise ConfigError(f"Unknown store backend: {config.backend!r}. Available: document, memory, sqlite")


__all__ = ["DocumentStore", "MemoryStore", "SqliteStore", "create_store"]
