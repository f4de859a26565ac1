"""Schemaless JSON document store.

Layout inside the store directory::

    metadata.json   {"schema_version": "2", "last_update": "..."}
    catalog.jsonl   one catalog record per line, append-only

``bulk_upsert`` appends one line per item and fsyncs once; on load the last
record for an id wins. A log holding superseded records is compacted on open.
Atomicity is best effort: a torn trailing line is dropped with a warning.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any, TypeVar

from pydantic import ValidationError

from runecache.core.contracts.catalog import CatalogItem
from runecache.core.contracts.exceptions import StoreError
from runecache.core.contracts.store import SCHEMA_VERSION, SCHEMA_VERSION_KEY, PersistentStore

_LOG = logging.getLogger(__name__)

T = TypeVar("T")

_METADATA_FILE = "metadata.json"
_CATALOG_FILE = "catalog.jsonl"


def _write_atomic(path: Path, text: str) -> None:
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(text)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class DocumentStore(PersistentStore):
    def __init__(self, path: str | Path, *, schema_version: int = SCHEMA_VERSION) -> None:
        self._root = Path(path)
        self._schema_version = schema_version
        self._lock = asyncio.Lock()
        self._items: dict[int, CatalogItem] = {}
        self._metadata: dict[str, str] = {}
        self._opened = False

    @property
    def path(self) -> Path:
        return self._root

    async def open(self) -> None:
        await self._run(self._open_sync)
        self._opened = True

    async def close(self) -> None:
        self._opened = False

    async def count(self) -> int:
        self._require_open()
        return len(self._items)

    async def get_all(self) -> list[CatalogItem]:
        self._require_open()
        return [self._items[item_id] for item_id in sorted(self._items)]

    async def get_by_slug(self, slug: str) -> CatalogItem | None:
        self._require_open()
        for item_id in sorted(self._items):
            if self._items[item_id].slug == slug:
                return self._items[item_id]
        return None

    async def get_by_id(self, item_id: int) -> CatalogItem | None:
        self._require_open()
        return self._items.get(item_id)

    async def bulk_upsert(self, items: Iterable[CatalogItem]) -> None:
        self._require_open()
        staged = [item.with_visited(False) for item in items]
        if not staged:
            return
        await self._run(lambda: self._append_sync(staged))
        for item in staged:
            self._items[item.id] = item

    async def delete_all(self) -> None:
        self._require_open()
        await self._run(self._reset_sync)

    async def get_metadata(self, key: str) -> str | None:
        self._require_open()
        return self._metadata.get(key)

    async def set_metadata(self, key: str, value: str) -> None:
        self._require_open()
        updated = {**self._metadata, key: value}
        await self._run(lambda: self._write_metadata_sync(updated))
        self._metadata = updated

    # ------------------------------------------------------------------
    # Blocking helpers (run in a worker thread under the store lock)
    # ------------------------------------------------------------------

    async def _run(self, fn: Callable[[], T]) -> T:
        async with self._lock:
            try:
                return await asyncio.to_thread(fn)
            except OSError as exc:
                raise StoreError(f"document store I/O failed under {self._root}: {exc}") from exc

    def _require_open(self) -> None:
        if not self._opened:
            raise StoreError("document store is not open")

    def _open_sync(self) -> None:
        self._root.mkdir(parents=True, exist_ok=True)
        metadata = self._load_metadata_sync()
        stored_version = metadata.get(SCHEMA_VERSION_KEY)
        if stored_version != str(self._schema_version):
            _LOG.info(
                "Schema version mismatch (current: %s, target: %s); dropping documents",
                stored_version,
                self._schema_version,
            )
            self._reset_sync()
            return

        self._metadata = metadata
        self._items, line_count = self._load_catalog_sync()
        if line_count > len(self._items):
            self._compact_sync()

    def _load_metadata_sync(self) -> dict[str, str]:
        path = self._root / _METADATA_FILE
        if not path.exists():
            return {}
        try:
            payload: Any = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError):
            _LOG.warning("Unreadable metadata document %s; treating store as uninitialized", path)
            return {}
        if not isinstance(payload, dict):
            return {}
        return {str(key): str(value) for key, value in payload.items()}

    def _load_catalog_sync(self) -> tuple[dict[int, CatalogItem], int]:
        path = self._root / _CATALOG_FILE
        items: dict[int, CatalogItem] = {}
        line_count = 0
        if not path.exists():
            return items, line_count
        with path.open(encoding="utf-8", errors="replace") as handle:
            for line_number, line in enumerate(handle, start=1):
                if not line.strip():
                    continue
                line_count += 1
                try:
                    item = CatalogItem.model_validate_json(line)
                except ValidationError:
                    _LOG.warning("Skipping unreadable catalog record at %s:%d", path, line_number)
                    continue
                items[item.id] = item
        return items, line_count

    def _append_sync(self, items: list[CatalogItem]) -> None:
        path = self._root / _CATALOG_FILE
        lines = "".join(json.dumps(item.to_record(), ensure_ascii=False) + "\n" for item in items)
        with path.open("a", encoding="utf-8") as handle:
            handle.write(lines)
            handle.flush()
            os.fsync(handle.fileno())

    def _compact_sync(self) -> None:
        ordered = [self._items[item_id] for item_id in sorted(self._items)]
        text = "".join(json.dumps(item.to_record(), ensure_ascii=False) + "\n" for item in ordered)
        _write_atomic(self._root / _CATALOG_FILE, text)

    def _write_metadata_sync(self, metadata: dict[str, str]) -> None:
        _write_atomic(self._root / _METADATA_FILE, json.dumps(metadata, indent=2, sort_keys=True))

    def _reset_sync(self) -> None:
        (self._root / _CATALOG_FILE).unlink(missing_ok=True)
        self._items = {}
        self._metadata = {SCHEMA_VERSION_KEY: str(self._schema_version)}
        self._write_metadata_sync(self._metadata)
