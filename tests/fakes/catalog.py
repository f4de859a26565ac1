"""Catalog builders and a controllable clock for runecache tests."""

from __future__ import annotations

from typing import Any

from runecache.core.contracts.catalog import CatalogItem


def make_item(item_id: int, *, latitude: float = 59.0, longitude: float = 17.0, **fields: Any) -> CatalogItem:
    """A catalog item with sensible defaults for the fields a test does not care about."""
    fields.setdefault("signature_text", f"U {item_id}")
    fields.setdefault("slug", f"u-{item_id}")
    return CatalogItem(id=item_id, latitude=latitude, longitude=longitude, **fields)


def make_catalog(count: int) -> list[CatalogItem]:
    return [
        make_item(item_id, latitude=55.0 + item_id / 1000, longitude=12.0 + item_id / 1000)
        for item_id in range(1, count + 1)
    ]


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, now_ms: int = 1_700_000_000_000) -> None:
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, *, days: float = 0, ms: int = 0) -> None:
        self.now_ms += int(days * 86_400_000) + ms
