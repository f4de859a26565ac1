"""CLI parser construction."""

from __future__ import annotations

import argparse
from importlib.metadata import PackageNotFoundError, version


def _package_version() -> str:
    try:
        return version("runecache")
    except PackageNotFoundError:
        return "0.0.0"


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", default="./runecache.json", help="Path to runecache.json")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="runecache")
    parser.add_argument("--version", action="version", version=f"%(prog)s {_package_version()}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    sync_parser = subparsers.add_parser("sync", help="Hydrate the local mirror from the remote catalog")
    _add_common(sync_parser)
    sync_parser.add_argument("--force", action="store_true", help="Re-fetch even if the mirror is fresh")

    status_parser = subparsers.add_parser("status", help="Show mirror state")
    _add_common(status_parser)

    search_parser = subparsers.add_parser("search", help="Free-text search over the mirror")
    _add_common(search_parser)
    search_parser.add_argument("query", help="Case-insensitive substring to look for")
    search_parser.add_argument("--limit", type=int, default=100, help="Maximum number of results (default: 100)")

    bounds_parser = subparsers.add_parser("bounds", help="List items inside a bounding box")
    _add_common(bounds_parser)
    for name in ("west", "south", "east", "north"):
        bounds_parser.add_argument(name, type=float)

    show_parser = subparsers.add_parser("show", help="Show one item by slug")
    _add_common(show_parser)
    show_parser.add_argument("slug")

    clear_parser = subparsers.add_parser("clear", help="Wipe the local mirror")
    _add_common(clear_parser)

    return parser


__all__ = ["build_parser"]
