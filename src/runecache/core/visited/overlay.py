"""Per-user visited overlay on top of catalog reads."""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Awaitable, Iterable
from typing import TYPE_CHECKING, TypeVar

from runecache.core.contracts.auth import AuthState
from runecache.core.contracts.catalog import KNOWN_TOTAL, CatalogItem
from runecache.core.contracts.events import AuthChanged, Signal, VisitedChanged
from runecache.core.contracts.exceptions import VisitedStatusError
from runecache.core.contracts.remote import RemoteDataSource
from runecache.core.visited.session import AuthSession

if TYPE_CHECKING:
    from runecache.core.cache import SyncCache

_LOG = logging.getLogger(__name__)

T = TypeVar("T")


class VisitedOverlay:
    """Set of catalog ids the signed-in user has visited.

    Lives apart from the catalog mirror and is never persisted. The set is
    cleared synchronously whenever the session leaves (or switches) the
    fully-authenticated user, and refetched on entering it. Mark/unmark update
    the set only after the remote call succeeds.
    """

    def __init__(
        self,
        remote: RemoteDataSource,
        session: AuthSession,
        *,
        total: int = KNOWN_TOTAL,
        remote_timeout: float | None = 60.0,
    ) -> None:
        self._remote = remote
        self._session = session
        self._total = total
        self._remote_timeout = remote_timeout

        self._ids: set[int] = set()
        # Bumped on every clear; results from an older generation are dropped.
        self._generation = 0
        # Mutations confirmed while a refresh is in flight, replayed over its result.
        self._mutations: dict[int, bool] = {}
        self._refresh_task: asyncio.Task[bool] | None = None
        self.loading = False
        self.error: str | None = None
        self.changes: Signal[VisitedChanged] = Signal()

        self._disconnect = session.changes.connect(self._on_auth_changed, first=True)

    @property
    def visited_ids(self) -> frozenset[int]:
        return frozenset(self._ids)

    @property
    def visited_count(self) -> int:
        return len(self._ids)

    @property
    def completion_percentage(self) -> int:
        if self._total <= 0:
            return 0
        return math.floor(self.visited_count / self._total * 100 + 0.5)

    def is_visited(self, item_id: int) -> bool:
        return item_id in self._ids

    def apply_to(self, items: Iterable[CatalogItem]) -> list[CatalogItem]:
        return [item.with_visited(item.id in self._ids) for item in items]

    async def visited_items(self, cache: SyncCache) -> list[CatalogItem]:
        if not self._ids:
            return []
        return self.apply_to(item for item in await cache.get_all() if item.id in self._ids)

    async def refresh(self) -> bool:
        """Replace the set with the remote's visited ids for the current user.

        Returns ``False`` (and sets ``error``) when the fetch fails; the
        previous set is kept in that case.
        """
        user = self._session.user
        if user is None or not self._session.is_fully_authenticated:
            self.clear()
            return False

        generation = self._generation
        self._mutations = {}
        self.loading = True
        self.error = None
        try:
            ids = await self._call_remote(self._remote.fetch_visited_ids(user.id))
        except Exception as exc:
            _LOG.error("Fetching visited runestones failed: %s", exc)
            if generation == self._generation:
                self.error = "Failed to fetch visited runestones"
                self.loading = False
            return False

        if generation != self._generation:
            _LOG.debug("Discarding visited ids fetched for a previous session")
            return False
        fetched = set(ids)
        for item_id, visited in self._mutations.items():
            if visited:
                fetched.add(item_id)
            else:
                fetched.discard(item_id)
        self._mutations = {}
        self._ids = fetched
        self.loading = False
        self.changes.emit(VisitedChanged(visited_ids=self.visited_ids))
        return True

    async def mark_visited(self, item_id: int) -> bool:
        user = self._session.user
        if user is None or not self._session.is_fully_authenticated:
            _LOG.warning("mark_visited: user not fully authenticated")
            return False

        generation = self._generation
        try:
            success = await self._call_remote(self._remote.mark_visited(item_id, user.id))
        except Exception as exc:
            _LOG.error("Marking runestone %d as visited failed: %s", item_id, exc)
            self.error = "Failed to mark runestone as visited"
            raise VisitedStatusError(f"Failed to mark runestone {item_id} as visited", item_id=item_id) from exc

        if not success:
            _LOG.error("Remote refused to mark runestone %d as visited", item_id)
            self.error = "Failed to mark runestone as visited"
            return False
        if generation == self._generation:
            self._ids.add(item_id)
            self._mutations[item_id] = True
            self.error = None
            self.changes.emit(VisitedChanged(visited_ids=self.visited_ids))
        return True

    async def unmark_visited(self, item_id: int) -> bool:
        user = self._session.user
        if user is None or not self._session.is_fully_authenticated:
            _LOG.warning("unmark_visited: user not fully authenticated")
            return False

        generation = self._generation
        try:
            success = await self._call_remote(self._remote.unmark_visited(item_id, user.id))
        except Exception as exc:
            _LOG.error("Unmarking runestone %d as visited failed: %s", item_id, exc)
            self.error = "Failed to unmark runestone as visited"
            raise VisitedStatusError(f"Failed to unmark runestone {item_id} as visited", item_id=item_id) from exc

        if not success:
            _LOG.error("Remote refused to unmark runestone %d as visited", item_id)
            self.error = "Failed to unmark runestone as visited"
            return False
        if generation == self._generation:
            self._ids.discard(item_id)
            self._mutations[item_id] = False
            self.error = None
            self.changes.emit(VisitedChanged(visited_ids=self.visited_ids))
        return True

    def clear(self) -> None:
        self._generation += 1
        had_ids = bool(self._ids)
        self._ids = set()
        self._mutations = {}
        self.error = None
        self.loading = False
        if had_ids:
            self.changes.emit(VisitedChanged(visited_ids=frozenset()))

    async def wait_idle(self) -> None:
        """Wait for a refresh scheduled by an auth transition to settle."""
        task = self._refresh_task
        if task is not None:
            await asyncio.shield(task)

    def close(self) -> None:
        self._disconnect()
        if self._refresh_task is not None and not self._refresh_task.done():
            self._refresh_task.cancel()

    def _on_auth_changed(self, event: AuthChanged) -> None:
        self.clear()
        if event.current is not AuthState.FULLY_AUTHENTICATED:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            _LOG.debug("No running event loop; visited ids will load on the next refresh()")
            return
        self._refresh_task = loop.create_task(self.refresh())

    async def _call_remote(self, awaitable: Awaitable[T]) -> T:
        async with asyncio.timeout(self._remote_timeout):
            return await awaitable
