"""In-memory persistent store."""

from __future__ import annotations

from collections.abc import Iterable

from runecache.core.contracts.catalog import CatalogItem
from runecache.core.contracts.store import SCHEMA_VERSION, SCHEMA_VERSION_KEY, PersistentStore


class MemoryStore(PersistentStore):
    """Process-local store with no durability.

    Used for ephemeral sessions and tests. Items are kept without the derived
    ``visited`` flag, same as the durable backends.
    """

    def __init__(self, *, schema_version: int = SCHEMA_VERSION) -> None:
        self._schema_version = schema_version
        self._items: dict[int, CatalogItem] = {}
        self._metadata: dict[str, str] = {}
        self.upsert_calls = 0

    async def open(self) -> None:
        stored = self._metadata.get(SCHEMA_VERSION_KEY)
        if stored != str(self._schema_version):
            self._items.clear()
            self._metadata.clear()
            self._metadata[SCHEMA_VERSION_KEY] = str(self._schema_version)

    async def close(self) -> None:
        return None

    async def count(self) -> int:
        return len(self._items)

    async def get_all(self) -> list[CatalogItem]:
        return [self._items[item_id] for item_id in sorted(self._items)]

    async def get_by_slug(self, slug: str) -> CatalogItem | None:
        for item_id in sorted(self._items):
            item = self._items[item_id]
            if item.slug == slug:
                return item
        return None

    async def get_by_id(self, item_id: int) -> CatalogItem | None:
        return self._items.get(item_id)

    async def bulk_upsert(self, items: Iterable[CatalogItem]) -> None:
        self.upsert_calls += 1
        staged = {item.id: item.with_visited(False) for item in items}
        self._items.update(staged)

    async def delete_all(self) -> None:
        self._items.clear()
        self._metadata = {SCHEMA_VERSION_KEY: str(self._schema_version)}

    async def get_metadata(self, key: str) -> str | None:
        return self._metadata.get(key)

    async def set_metadata(self, key: str, value: str) -> None:
        self._metadata[key] = value
