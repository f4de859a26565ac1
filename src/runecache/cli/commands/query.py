"""Catalog query commands."""

from __future__ import annotations

import argparse
import sys

from runecache import BoundingBox
from runecache.cli.common import format_item_detail, format_item_list


async def run_search(args: argparse.Namespace) -> int:
    import runecache.cli as cli

    config = cli.load_config(args.config)
    async with cli.RuneCache.from_config(config) as runes:
        items = await runes.search(args.query, limit=args.limit)
    print(format_item_list(items, heading=f"search {args.query!r}"))
    return 0


async def run_bounds(args: argparse.Namespace) -> int:
    import runecache.cli as cli

    box = BoundingBox(args.west, args.south, args.east, args.north)
    box.validate()

    config = cli.load_config(args.config)
    async with cli.RuneCache.from_config(config) as runes:
        items = await runes.get_by_bounds(box)
    print(format_item_list(items, heading=f"bounds {box.key}"))
    return 0


async def run_show(args: argparse.Namespace) -> int:
    import runecache.cli as cli

    config = cli.load_config(args.config)
    async with cli.RuneCache.from_config(config) as runes:
        item = await runes.get_by_slug(args.slug)
    if item is None:
        print(f"error: no runestone with slug {args.slug!r}", file=sys.stderr)
        return 2
    print(format_item_detail(item))
    return 0


__all__ = ["run_bounds", "run_search", "run_show"]
