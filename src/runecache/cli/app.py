"""CLI app entrypoint and error mapping."""

from __future__ import annotations

import sys

from runecache import (
    AuthenticationError,
    ConfigError,
    RemoteError,
    RuneCacheError,
    StoreError,
    VisitedStatusError,
)


def main(argv: list[str] | None = None) -> int:
    import runecache.cli as cli

    parser = cli.build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        cli.logging.basicConfig(level=cli.logging.DEBUG, format="%(name)s %(message)s", stream=sys.stderr)

    handler = cli.COMMANDS[args.command]
    try:
        return cli.asyncio.run(handler(args))
    except ConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 3
    except (AuthenticationError, RemoteError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 4
    except (StoreError, VisitedStatusError, RuneCacheError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 5
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except Exception as exc:  # pragma: no cover - defensive fallback
        print(f"error: {exc}", file=sys.stderr)
        return 1


__all__ = ["main"]
