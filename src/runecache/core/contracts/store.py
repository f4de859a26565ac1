"""Persistent store contract.

Implementable over relational and schemaless backends alike: the cache only
relies on count/select/delete/upsert and string metadata.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from types import TracebackType
from typing import Final

from runecache.core.contracts.catalog import CatalogItem

SCHEMA_VERSION: Final = 2
SCHEMA_VERSION_KEY: Final = "schema_version"
LAST_UPDATE_KEY: Final = "last_update"


class PersistentStore(ABC):
    async def __aenter__(self) -> PersistentStore:
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    @abstractmethod
    async def open(self) -> None:
        """Open the backend and run the destructive schema-version migration."""

    @abstractmethod
    async def close(self) -> None: ...  # pragma: no cover

    @abstractmethod
    async def count(self) -> int: ...  # pragma: no cover

    @abstractmethod
    async def get_all(self) -> list[CatalogItem]:
        """Return every stored item ordered by ascending id."""

    @abstractmethod
    async def get_by_slug(self, slug: str) -> CatalogItem | None: ...  # pragma: no cover

    @abstractmethod
    async def get_by_id(self, item_id: int) -> CatalogItem | None: ...  # pragma: no cover

    @abstractmethod
    async def bulk_upsert(self, items: Iterable[CatalogItem]) -> None:
        """Insert or replace items by id."""

    @abstractmethod
    async def delete_all(self) -> None:
        """Remove all rows and metadata, keeping only the schema version marker."""

    @abstractmethod
    async def get_metadata(self, key: str) -> str | None: ...  # pragma: no cover

    @abstractmethod
    async def set_metadata(self, key: str, value: str) -> None: ...  # pragma: no cover
