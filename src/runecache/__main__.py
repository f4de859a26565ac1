"""Module entrypoint for ``python -m runecache``."""

from runecache.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
