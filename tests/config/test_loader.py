"""Tests for config loading and validation."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from pydantic import ValidationError

from runecache.core.config import load_config
from runecache.core.contracts.catalog import KNOWN_TOTAL
from runecache.core.contracts.config import RemoteConfig, StoreConfig
from runecache.core.contracts.exceptions import ConfigError


def _write(tmp_path: Path, payload: Any) -> Path:
    path = tmp_path / "runecache.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_load_config_applies_defaults_and_resolves_relative_paths(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        {
            "remote": {"kind": "static", "catalog_path": "data/catalog.json"},
            "store": {"backend": "document", "path": "cache"},
        },
    )

    config = load_config(path)

    assert config.remote.catalog_path == (tmp_path / "data" / "catalog.json").resolve()
    assert config.store.path == (tmp_path / "cache").resolve()
    assert config.total == KNOWN_TOTAL
    assert config.retention_days == 365
    assert config.batch_size == 100


def test_load_config_keeps_absolute_paths(tmp_path: Path) -> None:
    db = tmp_path / "elsewhere" / "runestones.db"
    path = _write(tmp_path, {"remote": {"url": "https://x.supabase.co"}, "store": {"path": str(db)}})

    config = load_config(path)

    assert config.store.path == db
    assert config.remote.auth == "env"


@pytest.mark.parametrize(
    ("content", "message"),
    [
        ("{broken", "invalid JSON"),
        (json.dumps({"store": {}}), "invalid config"),
        (json.dumps({"remote": {"kind": "ftp"}}), "invalid config"),
        (json.dumps({"remote": {"url": "https://x.supabase.co"}, "batch_size": 0}), "invalid config"),
    ],
)
def test_load_config_rejects_bad_files(tmp_path: Path, content: str, message: str) -> None:
    path = tmp_path / "runecache.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError, match=message):
        load_config(path)


def test_load_config_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="failed reading"):
        load_config(tmp_path / "missing.json")


class TestRemoteConfig:
    def test_static_requires_catalog_path(self) -> None:
        with pytest.raises(ValidationError, match="catalog_path"):
            RemoteConfig(kind="static")

    def test_supabase_requires_url(self) -> None:
        with pytest.raises(ValidationError, match="requires url"):
            RemoteConfig(url="  ")

    def test_key_auth_requires_api_key(self) -> None:
        with pytest.raises(ValidationError, match="api_key"):
            RemoteConfig(url="https://x.supabase.co", auth="key")

    def test_env_auth_rejects_inline_key(self) -> None:
        with pytest.raises(ValidationError, match="must be unset"):
            RemoteConfig(url="https://x.supabase.co", api_key="secret")

    def test_unknown_store_backend(self) -> None:
        with pytest.raises(ValidationError, match="store.backend"):
            StoreConfig(backend="redis")
