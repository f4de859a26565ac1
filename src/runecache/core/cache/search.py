"""Free-text catalog matching."""

from __future__ import annotations

from collections.abc import Iterable

from runecache.core.contracts.catalog import SEARCH_FIELDS, CatalogItem


def normalize_query(query: str) -> str:
    return query.strip().lower()


def matches(item: CatalogItem, term: str) -> bool:
    """Case-insensitive substring match of an already-normalized *term*."""
    for field in SEARCH_FIELDS:
        value = getattr(item, field)
        if value and term in value.lower():
            return True
    return False


def search_items(items: Iterable[CatalogItem], query: str, limit: int) -> list[CatalogItem]:
    term = normalize_query(query)
    if not term or limit <= 0:
        return []
    results: list[CatalogItem] = []
    for item in items:
        if matches(item, term):
            results.append(item)
            if len(results) >= limit:
                break
    return results
