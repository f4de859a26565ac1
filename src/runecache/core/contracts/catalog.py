"""Catalog contracts."""

from __future__ import annotations

import math
from typing import Any, Final, NamedTuple

from pydantic import BaseModel, field_validator

KNOWN_TOTAL: Final = 6815

TEXT_FIELDS: Final = (
    "signature_text",
    "found_location",
    "parish",
    "district",
    "municipality",
    "current_location",
    "material",
    "material_type",
    "rune_type",
    "dating",
    "style",
    "carver",
    "english_translation",
    "swedish_translation",
    "norse_text",
    "transliteration",
    "slug",
    "link_url",
    "direct_url",
)

# Order matters: search walks these fields front to back.
SEARCH_FIELDS: Final = (
    "signature_text",
    "found_location",
    "parish",
    "district",
    "municipality",
    "current_location",
    "material",
    "material_type",
    "rune_type",
    "dating",
    "style",
    "carver",
    "english_translation",
    "swedish_translation",
    "norse_text",
    "transliteration",
)

FLAG_FIELDS: Final = ("lost", "ornamental", "recent")


class CatalogItem(BaseModel):
    """One geotagged runestone record as served by the remote catalog.

    ``visited`` is derived from the visited overlay at read time and is never
    written to a persistent store.
    """

    id: int
    latitude: float = 0.0
    longitude: float = 0.0
    signature_text: str | None = None
    found_location: str | None = None
    parish: str | None = None
    district: str | None = None
    municipality: str | None = None
    current_location: str | None = None
    material: str | None = None
    material_type: str | None = None
    rune_type: str | None = None
    dating: str | None = None
    style: str | None = None
    carver: str | None = None
    english_translation: str | None = None
    swedish_translation: str | None = None
    norse_text: str | None = None
    transliteration: str | None = None
    slug: str | None = None
    link_url: str | None = None
    direct_url: str | None = None
    lost: bool = False
    ornamental: bool = False
    recent: bool = False
    visited: bool = False

    model_config = {"frozen": True, "extra": "ignore"}

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def _coerce_coordinate(cls, value: Any) -> float:
        if value is None or isinstance(value, bool):
            return 0.0
        try:
            number = float(value)
        except (TypeError, ValueError):
            return 0.0
        if not math.isfinite(number):
            return 0.0
        return number

    @field_validator(*TEXT_FIELDS, mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> str | None:
        if value is None:
            return None
        text = str(value)
        return text if text.strip() else None

    @field_validator(*FLAG_FIELDS, "visited", mode="before")
    @classmethod
    def _coerce_flag(cls, value: Any) -> bool:
        return bool(value)

    def to_record(self) -> dict[str, Any]:
        """Persistable field mapping (everything except ``visited``)."""
        return self.model_dump(exclude={"visited"})

    def with_visited(self, visited: bool) -> CatalogItem:
        if self.visited == visited:
            return self
        return self.model_copy(update={"visited": visited})


class BoundingBox(NamedTuple):
    """Geographic rectangle in ``(west, south, east, north)`` order."""

    west: float
    south: float
    east: float
    north: float

    @classmethod
    def of(cls, west: float, south: float, east: float, north: float) -> BoundingBox:
        box = cls(float(west), float(south), float(east), float(north))
        box.validate()
        return box

    def validate(self) -> None:
        if any(not math.isfinite(value) for value in self):
            raise ValueError(f"bounding box values must be finite: {tuple(self)}")
        if self.south > self.north:
            raise ValueError(f"south ({self.south}) must not exceed north ({self.north})")
        if self.west > self.east:
            raise ValueError(f"west ({self.west}) must not exceed east ({self.east})")
        if not (-90.0 <= self.south and self.north <= 90.0):
            raise ValueError("latitudes must be within [-90, 90]")
        if not (-180.0 <= self.west and self.east <= 180.0):
            raise ValueError("longitudes must be within [-180, 180]")

    @property
    def key(self) -> str:
        return ",".join(str(value) for value in self)

    def contains(self, item: CatalogItem) -> bool:
        return self.south <= item.latitude <= self.north and self.west <= item.longitude <= self.east

    def overlaps(self, other: BoundingBox) -> bool:
        return not (
            self.east < other.west or self.west > other.east or self.north < other.south or self.south > other.north
        )


WORLD: Final = BoundingBox(-180.0, -90.0, 180.0, 90.0)


def filter_by_bounds(items: list[CatalogItem], bbox: BoundingBox) -> list[CatalogItem]:
    return [item for item in items if bbox.contains(item)]
