"""Config loading and path resolution."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from runecache.core.contracts.config import RuneCacheConfig
from runecache.core.contracts.exceptions import ConfigError


def _resolve_path(value: Path | None, *, base_dir: Path) -> Path | None:
    if value is None:
        return None
    if value.is_absolute():
        return value
    return (base_dir / value).resolve()


def load_config(path: str | Path) -> RuneCacheConfig:
    config_path = Path(path).expanduser().resolve()
    config_dir = config_path.parent

    try:
        raw_payload: Any = json.loads(config_path.read_text(encoding="utf-8"))
        parsed = RuneCacheConfig.model_validate(raw_payload)
    except OSError as exc:
        raise ConfigError(f"failed reading config file: {config_path}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"invalid JSON in config file: {config_path}") from exc
    except ValidationError as exc:
        raise ConfigError(f"invalid config: {exc}") from exc

    remote = parsed.remote.model_copy(
        update={"catalog_path": _resolve_path(parsed.remote.catalog_path, base_dir=config_dir)}
    )
    store = parsed.store.model_copy(update={"path": _resolve_path(parsed.store.path, base_dir=config_dir)})
    return parsed.model_copy(update={"remote": remote, "store": store})
