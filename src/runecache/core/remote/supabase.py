"""Supabase (PostgREST RPC) remote data source."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from types import TracebackType
from typing import Any

import httpx
from pydantic import ValidationError

from runecache.core.auth.resolvers import KeyResolver
from runecache.core.contracts.catalog import CatalogItem
from runecache.core.contracts.exceptions import AuthenticationError, RemoteError
from runecache.core.contracts.remote import RemoteDataSource
from runecache.core.remote._retrying_transport import RetryingTransport

_LOG = logging.getLogger(__name__)

RPC_ALL = "get_all_runestones"
RPC_VISIBLE = "get_visible_runestones"
RPC_VISITED = "get_all_visited_runestones"
RPC_MARK_VISITED = "mark_runestone_as_visited"
RPC_DELETE_VISITED = "delete_runestone_visited"

# Procedures with side effects; a replay after an ambiguous failure could double-apply.
_WRITE_RPCS = frozenset({RPC_MARK_VISITED, RPC_DELETE_VISITED})


def is_replayable_rpc(request: httpx.Request) -> bool:
    return request.url.path.rsplit("/", 1)[-1] not in _WRITE_RPCS


def parse_catalog_rows(rows: Iterable[Any]) -> list[CatalogItem]:
    """Validate raw catalog rows, dropping those without a usable id."""
    items: list[CatalogItem] = []
    for row in rows:
        try:
            items.append(CatalogItem.model_validate(row))
        except ValidationError as exc:
            _LOG.warning("Skipping invalid catalog row: %s", exc.errors(include_url=False))
    return items


class SupabaseDataSource(RemoteDataSource):
    """Calls the catalog's stored procedures through the PostgREST RPC endpoint.

    Use as an async context manager; the HTTP client lives for the duration of
    the ``async with`` block. ``access_token`` carries the signed-in user's JWT
    for the visited-status procedures; the anon key is used otherwise.
    """

    def __init__(
        self,
        *,
        url: str,
        key_resolver: KeyResolver,
        timeout: float = 30.0,
        max_retries: int = 3,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = url.rstrip("/")
        self._key_resolver = key_resolver
        self._timeout = timeout
        self._max_retries = max_retries
        self._inner_transport = transport
        self._client: httpx.AsyncClient | None = None
        self._api_key: str | None = None
        self.access_token: str | None = None

    async def __aenter__(self) -> SupabaseDataSource:
        await self._open_transport()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def fetch_all(self) -> list[CatalogItem]:
        rows = await self._rpc(RPC_ALL, {})
        return parse_catalog_rows(self._as_rows(rows, RPC_ALL))

    async def fetch_by_bounds(self, west: float, south: float, east: float, north: float) -> list[CatalogItem]:
        rows = await self._rpc(
            RPC_VISIBLE,
            {"p_west": west, "p_south": south, "p_east": east, "p_north": north},
        )
        return parse_catalog_rows(self._as_rows(rows, RPC_VISIBLE))

    async def fetch_visited_ids(self, user_id: str) -> list[int]:
        rows = await self._rpc(RPC_VISITED, {"p_user_id": user_id})
        visited: list[int] = []
        for row in self._as_rows(rows, RPC_VISITED):
            raw_id = row.get("id") if isinstance(row, dict) else row
            try:
                visited.append(int(raw_id))
            except (TypeError, ValueError):
                _LOG.warning("Skipping visited record without numeric id: %r", row)
        return visited

    async def mark_visited(self, item_id: int, user_id: str) -> bool:
        result = await self._rpc(RPC_MARK_VISITED, {"p_signature_id": item_id, "p_user_id": user_id})
        return bool(result)

    async def unmark_visited(self, item_id: int, user_id: str) -> bool:
        result = await self._rpc(RPC_DELETE_VISITED, {"p_signature_id": item_id, "p_user_id": user_id})
        return bool(result)

    async def _open_transport(self) -> None:
        self._api_key = await self._key_resolver.resolve()
        transport = RetryingTransport(
            transport=self._inner_transport,
            max_retries=self._max_retries,
            replayable=is_replayable_rpc,
        )
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            transport=transport,
            timeout=httpx.Timeout(self._timeout),
        )

    def _headers(self) -> dict[str, str]:
        bearer = self.access_token or self._api_key or ""
        return {
            "apikey": self._api_key or "",
            "Authorization": f"Bearer {bearer}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def _rpc(self, function: str, params: dict[str, Any]) -> Any:
        if self._client is None:
            raise RemoteError("Supabase data source is not open", operation=function)

        try:
            response = await self._client.post(f"/rest/v1/rpc/{function}", json=params, headers=self._headers())
        except httpx.TimeoutException as exc:
            raise RemoteError(f"{function} timed out", operation=function, retryable=True) from exc
        except httpx.HTTPError as exc:
            raise RemoteError(f"{function} failed: {exc}", operation=function, retryable=True) from exc

        if response.status_code in {401, 403}:
            raise AuthenticationError(
                f"{function} rejected credentials (HTTP {response.status_code})", operation=function
            )
        if response.status_code >= 400:
            raise RemoteError(
                f"{function} failed with HTTP {response.status_code}: {response.text[:200]}",
                operation=function,
                retryable=response.status_code >= 500,
            )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise RemoteError(f"{function} returned invalid JSON", operation=function) from exc

    @staticmethod
    def _as_rows(payload: Any, function: str) -> list[Any]:
        if payload is None:
            return []
        if not isinstance(payload, list):
            raise RemoteError(f"{function} returned {type(payload).__name__}, expected a list", operation=function)
        return payload
