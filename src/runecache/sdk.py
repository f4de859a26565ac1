"""SDK composition root for runecache."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import timedelta
from types import TracebackType

from runecache.core.cache import CacheStatus, SyncCache, SyncProgress
from runecache.core.contracts.catalog import KNOWN_TOTAL, BoundingBox, CatalogItem
from runecache.core.contracts.config import RuneCacheConfig
from runecache.core.contracts.remote import RemoteDataSource
from runecache.core.contracts.store import PersistentStore
from runecache.core.remote import create_remote
from runecache.core.stores import create_store
from runecache.core.visited import AuthSession, VisitedOverlay

_LOG = logging.getLogger(__name__)


class RuneCache:
    """Public API consumed by presentation code.

    Owns one store, one remote and one session for the lifetime of the
    application; use it as an async context manager::

        async with RuneCache.from_config(load_config("runecache.json")) as runes:
            stones = await runes.get_by_bounds((11.0, 55.0, 19.0, 60.0))

    Every catalog read comes back with ``visited`` derived from the overlay.
    """

    def __init__(
        self,
        *,
        store: PersistentStore,
        remote: RemoteDataSource,
        session: AuthSession | None = None,
        total: int = KNOWN_TOTAL,
        retention: timedelta = timedelta(days=365),
        batch_size: int = 100,
        remote_timeout: float | None = 60.0,
        progress: SyncProgress | None = None,
        clock: Callable[[], int] | None = None,
    ) -> None:
        self._store = store
        self._remote = remote
        self.session = session or AuthSession()
        self.cache = SyncCache(
            store,
            remote,
            total=total,
            retention=retention,
            batch_size=batch_size,
            remote_timeout=remote_timeout,
            progress=progress,
            clock=clock,
        )
        self.visited = VisitedOverlay(remote, self.session, total=total, remote_timeout=remote_timeout)

    @classmethod
    def from_config(
        cls,
        config: RuneCacheConfig,
        *,
        session: AuthSession | None = None,
        progress: SyncProgress | None = None,
    ) -> RuneCache:
        return cls(
            store=create_store(config.store),
            remote=create_remote(config.remote),
            session=session,
            total=config.total,
            retention=timedelta(days=config.retention_days),
            batch_size=config.batch_size,
            remote_timeout=config.remote_timeout,
            progress=progress,
        )

    async def __aenter__(self) -> RuneCache:
        await self._remote.__aenter__()
        try:
            await self._store.open()
        except BaseException as exc:
            await self._remote.__aexit__(type(exc), exc, exc.__traceback__)
            raise
        if self.session.is_fully_authenticated:
            await self.visited.refresh()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.visited.close()
        try:
            await self._store.close()
        finally:
            await self._remote.__aexit__(exc_type, exc_val, exc_tb)

    # ------------------------------------------------------------------
    # Catalog reads
    # ------------------------------------------------------------------

    async def get_all(self) -> list[CatalogItem]:
        return self.visited.apply_to(await self.cache.get_all())

    async def get_by_bounds(self, bbox: BoundingBox | Sequence[float]) -> list[CatalogItem]:
        return self.visited.apply_to(await self.cache.get_by_bounds(bbox))

    async def get_by_slug(self, slug: str) -> CatalogItem | None:
        item = await self.cache.get_by_slug(slug)
        return item.with_visited(self.visited.is_visited(item.id)) if item is not None else None

    async def search(self, query: str, limit: int = 100) -> list[CatalogItem]:
        return self.visited.apply_to(await self.cache.search(query, limit))

    # ------------------------------------------------------------------
    # Visited status
    # ------------------------------------------------------------------

    def is_visited(self, item_id: int) -> bool:
        return self.visited.is_visited(item_id)

    async def mark_visited(self, item_id: int) -> bool:
        return await self.visited.mark_visited(item_id)

    async def unmark_visited(self, item_id: int) -> bool:
        return await self.visited.unmark_visited(item_id)

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    async def sync(self, *, force: bool = False) -> CacheStatus:
        if force:
            _LOG.info("Forcing full catalog refresh")
            await self.cache.refresh()
        else:
            await self.cache.ensure_initialized()
        return await self.cache.status()

    async def clear(self) -> None:
        await self.cache.clear()

    async def status(self) -> CacheStatus:
        return await self.cache.status()
