"""
Domain models (Pydantic).

These types are the contract between the store, the query engine and the outer
surfaces (API/CLI/catalog import):
- write payloads (`POICreate`, `POIUpdate`, `TagCreate`, `TagUpdate`)
- read views (`PointOfInterest`, `Tag`)

Views are plain snapshots; mutating one does not touch the store.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, computed_field, field_validator

from geopin.core.geo import point_geometry


class POIStatus(str, Enum):
    """Lifecycle state of a POI."""

    ACTIVE = "ACTIVE"
    ARCHIVED = "ARCHIVED"
    TEMPORARY = "TEMPORARY"


def _clean_tag_names(names: list[str]) -> list[str]:
    # Tag names are case-sensitive; only surrounding whitespace and duplicates go.
    seen: list[str] = []
    for n in names:
        s = n.strip()
        if s and s not in seen:
            seen.append(s)
    return seen


class POICreate(BaseModel):
    """Payload for creating a POI.

    Coordinates are not range-checked here: the store decides, based on
    `validation.enforce_coordinate_range`.
    """

    name: str
    latitude: float
    longitude: float
    description: str | None = None
    source_reference: str | None = None
    status: POIStatus = POIStatus.ACTIVE
    tags: list[str] = Field(default_factory=list)

    @field_validator("tags")
    @classmethod
    def _normalize_tags(cls, tags: list[str]) -> list[str]:
        return _clean_tag_names(tags)


class POIUpdate(BaseModel):
    """Whole-field replacement payload for a POI.

    name, description, latitude and longitude are always replaced.
    `source_reference`, `status` and `tags` are replaced only when present in the
    payload (see `model_fields_set`); tags are replaced wholesale, never merged.
    """

    name: str
    latitude: float
    longitude: float
    description: str | None = None
    source_reference: str | None = None
    status: POIStatus | None = None
    tags: list[str] | None = None

    @field_validator("tags")
    @classmethod
    def _normalize_tags(cls, tags: list[str] | None) -> list[str] | None:
        if tags is None:
            return None
        return _clean_tag_names(tags)


class PointOfInterest(BaseModel):
    """Read view of a stored POI."""

    id: str
    name: str
    description: str | None = None
    latitude: float
    longitude: float
    source_reference: str | None = None
    status: POIStatus = POIStatus.ACTIVE
    tags: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    @computed_field  # type: ignore[prop-decorator]
    @property
    def geometry(self) -> dict[str, Any]:
        return point_geometry(self.latitude, self.longitude)

    def has_tag(self, name: str) -> bool:
        return name in self.tags


class TagCreate(BaseModel):
    name: str


class TagUpdate(BaseModel):
    name: str


class Tag(BaseModel):
    """Read view of a tag with its derived POI membership."""

    id: str
    name: str
    poi_ids: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
