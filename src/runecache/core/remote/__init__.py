"""Remote data sources and selection."""

from __future__ import annotations

from runecache.core.auth import create_key_resolver
from runecache.core.contracts.config import RemoteConfig
from runecache.core.contracts.exceptions import ConfigError
from runecache.core.contracts.remote import RemoteDataSource
from runecache.core.remote.static import RemoteOperation, StaticDataSource
from runecache.core.remote.supabase import SupabaseDataSource


def create_remote(config: RemoteConfig) -> RemoteDataSource:
    """Build the configured remote; use the result as an async context manager."""
    if config.kind == "static":
        return StaticDataSource(catalog_path=config.catalog_path)
    if config.kind == "supabase":
        return SupabaseDataSource(
            url=config.url or "",
            key_resolver=create_key_resolver(config),
            timeout=config.timeout,
            max_retries=config.max_retries,
        )
    raise ConfigError(f"Unknown remote kind: {config.kind!r}. Available: static, supabase")


__all__ = ["RemoteOperation", "StaticDataSource", "SupabaseDataSource", "create_remote"]
