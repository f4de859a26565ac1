"""Configuration contracts."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, model_validator

from runecache.core.contracts.catalog import KNOWN_TOTAL


class RemoteConfig(BaseModel):
    kind: str = "supabase"
    url: str | None = None
    auth: str = "env"
    api_key: str | None = None
    catalog_path: Path | None = None
    timeout: float = Field(default=30.0, gt=0)
    max_retries: int = Field(default=3, ge=0, le=10)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_kind(self) -> RemoteConfig:
        if self.kind not in {"supabase", "static"}:
            raise ValueError("remote.kind must be one of: supabase, static")
        if self.kind == "static":
            if self.catalog_path is None:
                raise ValueError("static remote requires catalog_path")
            return self
        if not (self.url or "").strip():
            raise ValueError("supabase remote requires url")
        key = (self.api_key or "").strip()
        if self.auth == "key":
            if not key:
                raise ValueError("key auth requires a non-empty api_key")
            return self
        if key:
            raise ValueError("api_key must be unset when auth is not 'key'")
        if self.auth != "env":
            raise ValueError("remote.auth must be one of: env, key")
        return self


class StoreConfig(BaseModel):
    backend: str = "sqlite"
    path: Path = Path("runestones.db")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_backend(self) -> StoreConfig:
        if self.backend not in {"sqlite", "document", "memory"}:
            raise ValueError("store.backend must be one of: sqlite, document, memory")
        return self


class RuneCacheConfig(BaseModel):
    remote: RemoteConfig
    store: StoreConfig = Field(default_factory=StoreConfig)
    total: int = Field(default=KNOWN_TOTAL, ge=0)
    retention_days: int = Field(default=365, ge=1)
    batch_size: int = Field(default=100, ge=1, le=10_000)
    remote_timeout: float = Field(default=60.0, gt=0)

    model_config = {"frozen": True}
