"""
Query engine.

Answers "which POIs satisfy this geographic or categorical predicate" by pulling
a fresh snapshot from the source on every call and filtering it in memory.

There is no spatial index and no cache: every geographic query is a linear scan
over all POIs. That is fine for a personal collection (hundreds of rows); a
collection in the hundreds of thousands would need an index in front of this.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from typing import Protocol

from geopin.core.errors import ValidationFailure
from geopin.core.geo import BoundingBox, validate_coordinates
from geopin.domain.models import POIStatus, PointOfInterest
from geopin.query.filters import (
    filter_by_status,
    filter_by_tag_name,
    filter_text,
    filter_within_boxes,
    filter_within_distance,
    nearest,
)

logger = logging.getLogger(__name__)


class PoiSource(Protocol):
    def list_pois(self) -> list[PointOfInterest]: ...


class _StaticSource:
    def __init__(self, pois: Iterable[PointOfInterest]):
        self._pois = list(pois)

    def list_pois(self) -> list[PointOfInterest]:
        return list(self._pois)


class QueryEngine:
    def __init__(self, source: PoiSource):
        self._source = source

    @classmethod
    def over(cls, pois: Iterable[PointOfInterest]) -> "QueryEngine":
        """Engine over a fixed collection instead of a store."""
        return cls(_StaticSource(pois))

    def all(self) -> list[PointOfInterest]:
        return self._source.list_pois()

    def by_status(self, status: POIStatus) -> list[PointOfInterest]:
        return filter_by_status(self._source.list_pois(), POIStatus(status))

    def within_distance(self, lat: float, lon: float, radius_m: float) -> list[PointOfInterest]:
        """POIs at great-circle distance <= radius_m from (lat, lon)."""
        validate_coordinates(lat, lon)
        if not math.isfinite(radius_m) or radius_m < 0:
            raise ValidationFailure(f"radius must be a finite number of meters >= 0, got {radius_m}")
        return filter_within_distance(self._source.list_pois(), lat=lat, lon=lon, radius_m=radius_m)

    def within_bounding_box(
        self, sw_lat: float, sw_lon: float, ne_lat: float, ne_lon: float
    ) -> list[PointOfInterest]:
        """POIs inside the box, all four edges inclusive.

        A box with sw_lon > ne_lon is read as crossing the antimeridian and is
        answered as the union of [sw_lon, 180] and [-180, ne_lon].
        """
        validate_coordinates(sw_lat, sw_lon)
        validate_coordinates(ne_lat, ne_lon)
        if sw_lat > ne_lat:
            raise ValidationFailure(
                f"south-west latitude {sw_lat} is north of north-east latitude {ne_lat}"
            )
        box = BoundingBox(sw_lat, sw_lon, ne_lat, ne_lon)
        if box.crosses_antimeridian:
            logger.info("Bounding box %s crosses the antimeridian; splitting into two boxes", box)
        return filter_within_boxes(self._source.list_pois(), box.split())

    def by_tag_name(self, tag_name: str) -> list[PointOfInterest]:
        """Every distinct POI carrying a tag named exactly `tag_name` (case-sensitive)."""
        lookup = getattr(self._source, "pois_for_tag_name", None)
        if lookup is not None:
            return lookup(tag_name)
        return filter_by_tag_name(self._source.list_pois(), (tag_name or "").strip())

    def search_text(self, text: str) -> list[PointOfInterest]:
        needle = (text or "").strip()
        if not needle:
            raise ValidationFailure("search text must not be empty")
        return filter_text(self._source.list_pois(), needle)

    def nearest(self, lat: float, lon: float, limit: int = 10) -> list[tuple[PointOfInterest, float]]:
        validate_coordinates(lat, lon)
        if limit < 1:
            raise ValidationFailure(f"limit must be >= 1, got {limit}")
        return nearest(self._source.list_pois(), lat=lat, lon=lon, limit=limit)
