"""Shared CLI formatting helpers."""

from __future__ import annotations

from runecache import CacheStatus, CatalogItem


def format_status(status: CacheStatus) -> str:
    last_update = status.last_update.isoformat(timespec="seconds") if status.last_update is not None else "never"
    covered = ", ".join(status.covered) if status.covered else "none"
    lines = [
        "",
        "runecache - mirror status",
        "",
        f"  Items:     {status.count} / {status.total}{'' if status.complete else ' (incomplete)'}",
        f"  Updated:   {last_update}",
        f"  Stale:     {'yes' if status.stale else 'no'}",
        f"  Covered:   {covered}",
        "",
    ]
    return "\n".join(lines)


def format_item_line(item: CatalogItem) -> str:
    name = item.signature_text or f"#{item.id}"
    place = item.found_location or item.parish or "-"
    marker = "*" if item.visited else " "
    return f" {marker} {item.id:>5}  {name:<14}  {place:<28}  {item.latitude:>9.5f} {item.longitude:>10.5f}"


def format_item_list(items: list[CatalogItem], *, heading: str) -> str:
    lines = ["", f"runecache - {heading} ({len(items)} item{'s' if len(items) != 1 else ''})", ""]
    lines.extend(format_item_line(item) for item in items)
    lines.append("")
    return "\n".join(lines)


def format_item_detail(item: CatalogItem) -> str:
    lines = ["", f"runecache - {item.signature_text or item.id}", ""]
    for field, value in item.model_dump(exclude={"visited"}).items():
        if value is None or value is False:
            continue
        lines.append(f"  {field + ':':<21}{value}")
    lines.append("")
    return "\n".join(lines)
