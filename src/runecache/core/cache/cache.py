"""Local-first catalog mirror."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Iterator, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TypeVar

from runecache.core.cache.bounds import BoundsIndex
from runecache.core.cache.progress import NullSyncProgress, SyncProgress
from runecache.core.cache.search import normalize_query, search_items
from runecache.core.contracts.catalog import KNOWN_TOTAL, BoundingBox, CatalogItem, filter_by_bounds
from runecache.core.contracts.events import CatalogChanged, Signal
from runecache.core.contracts.exceptions import RemoteError, RuneCacheError, StoreError
from runecache.core.contracts.remote import RemoteDataSource
from runecache.core.contracts.store import LAST_UPDATE_KEY, PersistentStore

_LOG = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_RETENTION = timedelta(days=365)


def _now_ms() -> int:
    return int(time.time() * 1000)


def _chunks(items: Sequence[CatalogItem], size: int) -> Iterator[Sequence[CatalogItem]]:
    for start in range(0, len(items), size):
        yield items[start : start + size]


@dataclass(frozen=True)
class CacheStatus:
    count: int
    total: int
    last_update: datetime | None
    stale: bool
    initialized: bool
    covered: tuple[str, ...]

    @property
    def complete(self) -> bool:
        return self.count >= self.total


class SyncCache:
    """Single source of truth for the best-known state of the catalog.

    Reads are served from the persistent store. The mirror is trusted when it
    holds at least *total* rows and was refreshed within *retention*;
    otherwise the full catalog is pulled from the remote and written back in
    batches. Concurrent callers share one in-flight initialization.
    """

    def __init__(
        self,
        store: PersistentStore,
        remote: RemoteDataSource,
        *,
        total: int = KNOWN_TOTAL,
        retention: timedelta = DEFAULT_RETENTION,
        batch_size: int = 100,
        remote_timeout: float | None = 60.0,
        progress: SyncProgress | None = None,
        clock: Callable[[], int] | None = None,
    ) -> None:
        self._store = store
        self._remote = remote
        self._total = total
        self._retention_ms = int(retention.total_seconds() * 1000)
        self._batch_size = batch_size
        self._remote_timeout = remote_timeout
        self._progress: SyncProgress = progress or NullSyncProgress()
        self._clock = clock or _now_ms

        self._initialized = False
        self._last_update: int | None = None
        self._bounds = BoundsIndex()
        self._pending: dict[str, asyncio.Task[None]] = {}
        self.changes: Signal[CatalogChanged] = Signal()

    @property
    def total(self) -> int:
        return self._total

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def bounds(self) -> BoundsIndex:
        return self._bounds

    # ------------------------------------------------------------------
    # Read API
    # ------------------------------------------------------------------

    async def get_all(self) -> list[CatalogItem]:
        await self.ensure_initialized()
        try:
            items = await self._store.get_all()
        except StoreError as exc:
            _LOG.warning("Store read failed during get_all: %s", exc)
            return []
        if len(items) < self._total:
            _LOG.warning("Mirror holds %d of %d items; running corrective full fetch", len(items), self._total)
            await self._shared("refresh", lambda: self._refresh("corrective"))
            items = await self._read("get_all", self._store.get_all(), default=[])
        return items

    async def get_by_bounds(self, bbox: BoundingBox | Sequence[float]) -> list[CatalogItem]:
        box = bbox if isinstance(bbox, BoundingBox) else BoundingBox.of(*bbox)
        box.validate()

        try:
            await self.ensure_initialized()
        except RemoteError as exc:
            _LOG.warning("Full catalog unavailable (%s); falling back to bounded fetch", exc)
        else:
            if self.is_stale():
                _LOG.info("Catalog mirror is stale; clearing and refreshing")
                await self.clear()
                await self.ensure_initialized()

        if self._bounds.covers(box):
            _LOG.debug("Bounds %s served from mirror", box.key)
            items = await self._read("get_by_bounds", self._store.get_all(), default=[])
            return filter_by_bounds(items, box)

        fetched = await self._call_remote("fetch_by_bounds", self._remote.fetch_by_bounds(*box))
        await self._upsert_batches(fetched)
        self._bounds.add(box)
        self.changes.emit(CatalogChanged(reason="bounds", count=len(fetched)))
        return filter_by_bounds(fetched, box)

    async def get_by_slug(self, slug: str) -> CatalogItem | None:
        await self.ensure_initialized()
        return await self._read("get_by_slug", self._store.get_by_slug(slug), default=None)

    async def get_by_id(self, item_id: int) -> CatalogItem | None:
        await self.ensure_initialized()
        return await self._read("get_by_id", self._store.get_by_id(item_id), default=None)

    async def search(self, query: str, limit: int = 100) -> list[CatalogItem]:
        if not normalize_query(query):
            return []
        await self.ensure_initialized()
        items = await self._read("search", self._store.get_all(), default=[])
        return search_items(items, query, limit)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def ensure_initialized(self) -> None:
        if self._initialized:
            return
        await self._shared("init", self._initialize)

    async def refresh(self) -> None:
        """Unconditionally re-pull the full catalog."""
        await self._shared("refresh", lambda: self._refresh("refresh"))
        self._initialized = True

    async def clear(self) -> None:
        await self._store.delete_all()
        self._bounds.clear()
        self._initialized = False
        self._last_update = None
        self.changes.emit(CatalogChanged(reason="clear", count=0))

    def is_stale(self) -> bool:
        if self._last_update is None:
            return True
        return self._clock() - self._last_update > self._retention_ms

    async def status(self) -> CacheStatus:
        count = await self._read("count", self._store.count(), default=0)
        if self._last_update is None:
            self._last_update = await self._read_last_update()
        last_update = (
            datetime.fromtimestamp(self._last_update / 1000, tz=UTC) if self._last_update is not None else None
        )
        return CacheStatus(
            count=count,
            total=self._total,
            last_update=last_update,
            stale=self.is_stale(),
            initialized=self._initialized,
            covered=self._bounds.keys(),
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _shared(self, key: str, factory: Callable[[], Awaitable[None]]) -> None:
        task = self._pending.get(key)
        if task is None:
            task = asyncio.ensure_future(factory())
            self._pending[key] = task
            task.add_done_callback(lambda done, key=key: self._forget(key, done))
        # Shielded so one caller going away does not abort a sync others await.
        await asyncio.shield(task)

    def _forget(self, key: str, task: asyncio.Task[None]) -> None:
        if self._pending.get(key) is task:
            del self._pending[key]
        if not task.cancelled() and task.exception() is not None:
            _LOG.debug("Shared %s task finished with %r", key, task.exception())

    async def _initialize(self) -> None:
        try:
            count = await self._store.count()
            self._last_update = await self._read_last_update()
        except StoreError as exc:
            _LOG.warning("Store not ready (%s); treating mirror as empty", exc)
            count = 0
            self._last_update = None

        if count >= self._total and not self.is_stale():
            _LOG.debug("Mirror trusted: %d rows, refreshed at %s", count, self._last_update)
            self._bounds.cover_world()
            self._initialized = True
            return

        await self._shared("refresh", lambda: self._refresh("initialize"))
        self._initialized = True

    async def _read_last_update(self) -> int | None:
        raw = await self._store.get_metadata(LAST_UPDATE_KEY)
        if raw is None:
            return None
        try:
            return int(raw)
        except ValueError:
            _LOG.warning("Ignoring malformed %s metadata: %r", LAST_UPDATE_KEY, raw)
            return None

    async def _refresh(self, reason: str) -> None:
        try:
            self._progress.phase_start("Fetch")
            try:
                items = await self._call_remote("fetch_all", self._remote.fetch_all())
            except BaseException as exc:
                self._progress.phase_error("Fetch", exc)
                raise
            self._progress.phase_done("Fetch")
            _LOG.info("Fetched %d catalog items; storing in batches of %d", len(items), self._batch_size)

            await self._store.delete_all()
            await self._upsert_batches(items, phase="Store")

            now = self._clock()
            await self._store.set_metadata(LAST_UPDATE_KEY, str(now))
        except RuneCacheError as exc:
            _LOG.error("Catalog %s failed: %s", reason, exc)
            raise

        self._last_update = now
        self._bounds.cover_world()
        if len(items) < self._total:
            _LOG.warning("Remote returned %d items, expected %d", len(items), self._total)
        self.changes.emit(CatalogChanged(reason=reason, count=len(items)))

    async def _upsert_batches(self, items: Sequence[CatalogItem], *, phase: str | None = None) -> None:
        batches = list(_chunks(items, self._batch_size))
        if phase is not None:
            self._progress.phase_start(phase, total=len(batches))
        try:
            for batch in batches:
                await self._store.bulk_upsert(batch)
                if phase is not None:
                    self._progress.item_done(phase)
        except BaseException as exc:
            if phase is not None:
                self._progress.phase_error(phase, exc)
            raise
        if phase is not None:
            self._progress.phase_done(phase)

    async def _call_remote(self, operation: str, awaitable: Awaitable[T]) -> T:
        try:
            async with asyncio.timeout(self._remote_timeout):
                return await awaitable
        except TimeoutError as exc:
            raise RemoteError(
                f"{operation} timed out after {self._remote_timeout}s", operation=operation, retryable=True
            ) from exc
        except RuneCacheError:
            raise
        except Exception as exc:
            raise RemoteError(f"{operation} failed: {exc}", operation=operation) from exc

    async def _read(self, operation: str, awaitable: Awaitable[T], *, default: T) -> T:
        try:
            return await awaitable
        except StoreError as exc:
            _LOG.warning("Store read failed during %s: %s", operation, exc)
            return default
