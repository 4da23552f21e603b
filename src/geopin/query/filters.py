"""
POI filters.

Pure functions over any iterable of POIs. They keep the input order and never
sort, except `nearest`, which is explicitly ordered by distance.
"""

from __future__ import annotations

from collections.abc import Iterable

from geopin.core.geo import BoundingBox, distance_m
from geopin.domain.models import POIStatus, PointOfInterest


def filter_by_status(pois: Iterable[PointOfInterest], status: POIStatus) -> list[PointOfInterest]:
    return [p for p in pois if p.status == status]


def filter_within_distance(
    pois: Iterable[PointOfInterest], *, lat: float, lon: float, radius_m: float
) -> list[PointOfInterest]:
    """Keep POIs whose great-circle distance to (lat, lon) is <= radius_m."""
    return [p for p in pois if distance_m(lat, lon, p.latitude, p.longitude) <= radius_m]


def filter_within_boxes(pois: Iterable[PointOfInterest], boxes: list[BoundingBox]) -> list[PointOfInterest]:
    """Keep POIs inside any of the boxes (each POI at most once)."""
    return [p for p in pois if any(b.contains(p.latitude, p.longitude) for b in boxes)]


def filter_by_tag_name(pois: Iterable[PointOfInterest], tag_name: str) -> list[PointOfInterest]:
    out: list[PointOfInterest] = []
    seen: set[str] = set()
    for p in pois:
        if p.id in seen or not p.has_tag(tag_name):
            continue
        seen.add(p.id)
        out.append(p)
    return out


def filter_text(pois: Iterable[PointOfInterest], text: str) -> list[PointOfInterest]:
    """Case-insensitive substring match over name or description."""
    needle = text.casefold()
    return [
        p
        for p in pois
        if needle in p.name.casefold() or (p.description is not None and needle in p.description.casefold())
    ]


def nearest(
    pois: Iterable[PointOfInterest], *, lat: float, lon: float, limit: int
) -> list[tuple[PointOfInterest, float]]:
    """Return up to `limit` (poi, distance_m) pairs, closest first."""
    scored = [(p, distance_m(lat, lon, p.latitude, p.longitude)) for p in pois]
    scored.sort(key=lambda pair: pair[1])
    return scored[: max(0, int(limit))]
