"""Sync command formatting."""

from __future__ import annotations

import argparse

from runecache import CacheStatus
from runecache.cli.common import format_status
from runecache.cli.progress.rich import RichSyncProgress


def format_sync_summary(status: CacheStatus, *, forced: bool) -> str:
    mode = "forced" if forced else "incremental"
    lines = [
        "",
        f"runecache - sync complete ({mode})",
        "",
        f"  Items:     {status.count} / {status.total}",
    ]
    if status.complete:
        lines.append("  Status:    mirror complete")
    else:
        lines.append(f"  Status:    {status.total - status.count} items missing from remote")
    if status.last_update is not None:
        lines.append(f"  Updated:   {status.last_update.isoformat(timespec='seconds')}")
    lines.append("")
    return "\n".join(lines)


async def run_sync(args: argparse.Namespace) -> int:
    import runecache.cli as cli

    config = cli.load_config(args.config)

    if not args.verbose:
        with RichSyncProgress() as progress:
            async with cli.RuneCache.from_config(config, progress=progress) as runes:
                status = await runes.sync(force=args.force)
    else:
        async with cli.RuneCache.from_config(config) as runes:
            status = await runes.sync(force=args.force)

    print(format_sync_summary(status, forced=args.force))
    return 0


async def run_status(args: argparse.Namespace) -> int:
    import runecache.cli as cli

    config = cli.load_config(args.config)
    async with cli.RuneCache.from_config(config) as runes:
        status = await runes.status()
    print(format_status(status))
    return 0


async def run_clear(args: argparse.Namespace) -> int:
    import runecache.cli as cli

    config = cli.load_config(args.config)
    async with cli.RuneCache.from_config(config) as runes:
        await runes.clear()
    print("\nrunecache - mirror cleared\n")
    return 0


__all__ = ["format_sync_summary", "run_clear", "run_status", "run_sync"]
