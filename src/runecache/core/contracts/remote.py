"""Remote data source contract."""

from __future__ import annotations

from abc import ABC, abstractmethod
from types import TracebackType

from runecache.core.contracts.catalog import CatalogItem


class RemoteDataSource(ABC):
    @abstractmethod
    async def __aenter__(self) -> RemoteDataSource: ...  # pragma: no cover

    @abstractmethod
    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None: ...  # pragma: no cover

    @abstractmethod
    async def fetch_all(self) -> list[CatalogItem]: ...  # pragma: no cover

    @abstractmethod
    async def fetch_by_bounds(
        self, west: float, south: float, east: float, north: float
    ) -> list[CatalogItem]: ...  # pragma: no cover

    @abstractmethod
    async def fetch_visited_ids(self, user_id: str) -> list[int]: ...  # pragma: no cover

    @abstractmethod
    async def mark_visited(self, item_id: int, user_id: str) -> bool: ...  # pragma: no cover

    @abstractmethod
    async def unmark_visited(self, item_id: int, user_id: str) -> bool: ...  # pragma: no cover
