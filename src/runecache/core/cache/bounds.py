"""Covered-region bookkeeping for bounded fetches."""

from __future__ import annotations

from typing import Final

from runecache.core.contracts.catalog import WORLD, BoundingBox

WILDCARD: Final = "*"


class BoundsIndex:
    """Remembers which rectangles have already been fetched from the remote.

    Once the whole catalog is mirrored the wildcard entry replaces every
    region entry. Kept in memory only; losing it costs at most a redundant
    bounded fetch.
    """

    def __init__(self) -> None:
        self._covered: dict[str, BoundingBox] = {}

    @property
    def world_covered(self) -> bool:
        return WILDCARD in self._covered

    def cover_world(self) -> None:
        self._covered = {WILDCARD: WORLD}

    def add(self, box: BoundingBox) -> None:
        if self.world_covered:
            return
        self._covered[box.key] = box

    def covers(self, box: BoundingBox) -> bool:
        if self.world_covered:
            return True
        return any(box.overlaps(covered) for covered in self._covered.values())

    def clear(self) -> None:
        self._covered.clear()

    def keys(self) -> tuple[str, ...]:
        return tuple(self._covered)

    def __len__(self) -> int:
        return len(self._covered)
