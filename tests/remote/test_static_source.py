"""Tests for the in-memory static data source and remote selection."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from runecache.core.contracts.catalog import CatalogItem
from runecache.core.contracts.config import RemoteConfig
from runecache.core.contracts.exceptions import RemoteError
from runecache.core.remote import StaticDataSource, SupabaseDataSource, create_remote


@pytest.mark.asyncio
async def test_loads_catalog_file_on_enter(tmp_path: Path) -> None:
    catalog = tmp_path / "catalog.json"
    catalog.write_text(json.dumps([{"id": 2, "latitude": 59.0, "longitude": 17.0}, {"id": 1}]), encoding="utf-8")

    async with StaticDataSource(catalog_path=catalog) as source:
        items = await source.fetch_all()

    assert [item.id for item in items] == [2, 1]


@pytest.mark.asyncio
@pytest.mark.parametrize(("content", "message"), [("{not json", "invalid JSON"), ('{"id": 1}', "list of rows")])
async def test_bad_catalog_file_raises_remote_error(tmp_path: Path, content: str, message: str) -> None:
    catalog = tmp_path / "catalog.json"
    catalog.write_text(content, encoding="utf-8")

    with pytest.raises(RemoteError, match=message):
        async with StaticDataSource(catalog_path=catalog):
            pass


@pytest.mark.asyncio
async def test_missing_catalog_file_raises_remote_error(tmp_path: Path) -> None:
    with pytest.raises(RemoteError, match="failed reading"):
        async with StaticDataSource(catalog_path=tmp_path / "missing.json"):
            pass


@pytest.mark.asyncio
async def test_bounded_fetch_and_operation_log(sample_items: list[CatalogItem]) -> None:
    source = StaticDataSource(sample_items)

    items = await source.fetch_by_bounds(12.0, 55.0, 14.0, 56.0)

    assert [item.id for item in items] == [2]
    assert source.operations[0].name == "fetch_by_bounds"
    assert source.operations[0].payload == {"west": "12.0", "south": "55.0", "east": "14.0", "north": "56.0"}


@pytest.mark.asyncio
async def test_visited_records_are_per_user() -> None:
    source = StaticDataSource(visited={"user-1": {3}})

    assert await source.mark_visited(5, "user-1")
    assert await source.mark_visited(8, "user-2")
    assert await source.unmark_visited(3, "user-1")

    assert await source.fetch_visited_ids("user-1") == [5]
    assert await source.fetch_visited_ids("user-2") == [8]
    assert await source.fetch_visited_ids("nobody") == []
    assert [operation.sequence for operation in source.operations] == [1, 2, 3, 4, 5, 6]


def test_create_remote_selects_backend(tmp_path: Path) -> None:
    static = create_remote(RemoteConfig(kind="static", catalog_path=tmp_path / "catalog.json"))
    supabase = create_remote(RemoteConfig(url="https://catalog.example.supabase.co", auth="key", api_key="k"))

    assert isinstance(static, StaticDataSource)
    assert isinstance(supabase, SupabaseDataSource)
