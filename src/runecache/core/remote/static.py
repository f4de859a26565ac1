"""In-memory remote data source seeded from a catalog file or item list."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from types import TracebackType
from typing import Any

from runecache.core.contracts.catalog import BoundingBox, CatalogItem, filter_by_bounds
from runecache.core.contracts.exceptions import RemoteError
from runecache.core.contracts.remote import RemoteDataSource
from runecache.core.remote.supabase import parse_catalog_rows


@dataclass(frozen=True)
class RemoteOperation:
    """Deterministic operation log entry."""

    sequence: int
    name: str
    payload: dict[str, str]


class StaticDataSource(RemoteDataSource):
    """Serves a fixed catalog without network calls.

    The catalog comes from *items* or, when entering the context, from a JSON
    file holding a list of catalog rows. Visited records are kept per user in
    memory.
    """

    def __init__(
        self,
        items: Iterable[CatalogItem] | None = None,
        *,
        catalog_path: Path | None = None,
        visited: dict[str, set[int]] | None = None,
    ) -> None:
        self._items: list[CatalogItem] = list(items or ())
        self._catalog_path = catalog_path
        self._visited: dict[str, set[int]] = {user: set(ids) for user, ids in (visited or {}).items()}
        self._operation_counter = 0
        self._operations: list[RemoteOperation] = []

    @property
    def operations(self) -> tuple[RemoteOperation, ...]:
        return tuple(self._operations)

    def calls(self, name: str) -> int:
        return sum(1 for operation in self._operations if operation.name == name)

    def _record_operation(self, name: str, payload: dict[str, str] | None = None) -> None:
        self._operation_counter += 1
        self._operations.append(RemoteOperation(sequence=self._operation_counter, name=name, payload=payload or {}))

    async def __aenter__(self) -> StaticDataSource:
        if self._catalog_path is not None and not self._items:
            self._items = await asyncio.to_thread(self._load_catalog, self._catalog_path)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        return None

    async def fetch_all(self) -> list[CatalogItem]:
        self._record_operation("fetch_all")
        return list(self._items)

    async def fetch_by_bounds(self, west: float, south: float, east: float, north: float) -> list[CatalogItem]:
        self._record_operation(
            "fetch_by_bounds",
            {"west": str(west), "south": str(south), "east": str(east), "north": str(north)},
        )
        return filter_by_bounds(self._items, BoundingBox(west, south, east, north))

    async def fetch_visited_ids(self, user_id: str) -> list[int]:
        self._record_operation("fetch_visited_ids", {"user_id": user_id})
        return sorted(self._visited.get(user_id, set()))

    async def mark_visited(self, item_id: int, user_id: str) -> bool:
        self._record_operation("mark_visited", {"item_id": str(item_id), "user_id": user_id})
        self._visited.setdefault(user_id, set()).add(item_id)
        return True

    async def unmark_visited(self, item_id: int, user_id: str) -> bool:
        self._record_operation("unmark_visited", {"item_id": str(item_id), "user_id": user_id})
        self._visited.get(user_id, set()).discard(item_id)
        return True

    @staticmethod
    def _load_catalog(path: Path) -> list[CatalogItem]:
        try:
            payload: Any = json.loads(path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise RemoteError(f"failed reading catalog file: {path}", operation="fetch_all") from exc
        except json.JSONDecodeError as exc:
            raise RemoteError(f"invalid JSON in catalog file: {path}", operation="fetch_all") from exc
        if not isinstance(payload, list):
            raise RemoteError(f"catalog file must hold a list of rows: {path}", operation="fetch_all")
        return parse_catalog_rows(payload)
