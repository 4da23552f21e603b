from __future__ import annotations

import math
from dataclasses import dataclass
from math import asin, cos, radians, sin, sqrt
from typing import Any

from geopin.core.errors import ValidationFailure

"""
Geospatial helpers.

We keep a tiny geometry layer here instead of pulling in a GIS stack:
- great-circle distance on a spherical Earth (Haversine),
- a naive degree-space bounding-box test,
- a GeoJSON point view derived from latitude/longitude on demand.

Latitude/longitude are the only stored coordinates; nothing in this module keeps
a second representation around.
"""

EARTH_RADIUS_M = 6_371_000.0

LAT_MIN, LAT_MAX = -90.0, 90.0
LON_MIN, LON_MAX = -180.0, 180.0


@dataclass(frozen=True)
class GeoPoint:
    """A latitude/longitude pair in decimal degrees (WGS84)."""

    lat: float
    lon: float


def distance_m(lat_a: float, lon_a: float, lat_b: float, lon_b: float) -> float:
    """Compute great-circle distance in meters between two coordinates.

    No validation is done here; callers check domains first.
    """
    lat1 = radians(lat_a)
    lon1 = radians(lon_a)
    lat2 = radians(lat_b)
    lon2 = radians(lon_b)

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    h = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    # Rounding can push h a hair above 1.0 for antipodal points.
    return 2 * EARTH_RADIUS_M * asin(sqrt(min(1.0, h)))


def haversine_m(a: GeoPoint, b: GeoPoint) -> float:
    """Point-based form of `distance_m`."""
    return distance_m(a.lat, a.lon, b.lat, b.lon)


def in_bounding_box(
    point_lat: float,
    point_lon: float,
    sw_lat: float,
    sw_lon: float,
    ne_lat: float,
    ne_lon: float,
) -> bool:
    """Return True if the point lies inside the box (all four edges inclusive).

    This is a plain rectangle test in degree space. A box whose south-west
    longitude is east of its north-east longitude (antimeridian crossing) never
    matches here; see `BoundingBox.split`.
    """
    return sw_lat <= point_lat <= ne_lat and sw_lon <= point_lon <= ne_lon


@dataclass(frozen=True)
class BoundingBox:
    sw_lat: float
    sw_lon: float
    ne_lat: float
    ne_lon: float

    @property
    def crosses_antimeridian(self) -> bool:
        return self.sw_lon > self.ne_lon

    def split(self) -> list["BoundingBox"]:
        """Split an antimeridian-crossing box into two non-crossing boxes."""
        if not self.crosses_antimeridian:
            return [self]
        return [
            BoundingBox(self.sw_lat, self.sw_lon, self.ne_lat, LON_MAX),
            BoundingBox(self.sw_lat, LON_MIN, self.ne_lat, self.ne_lon),
        ]

    def contains(self, lat: float, lon: float) -> bool:
        return in_bounding_box(lat, lon, self.sw_lat, self.sw_lon, self.ne_lat, self.ne_lon)


def point_geometry(lat: float, lon: float) -> dict[str, Any]:
    """GeoJSON Point for a coordinate (x=longitude, y=latitude)."""
    return {"type": "Point", "coordinates": [lon, lat]}


def validate_coordinates(lat: float, lon: float) -> None:
    """Raise `ValidationFailure` for non-finite or out-of-range coordinates."""
    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise ValidationFailure(f"Coordinates must be finite numbers, got ({lat}, {lon})")
    if not LAT_MIN <= lat <= LAT_MAX:
        raise ValidationFailure(f"latitude must be within [-90, 90], got {lat}")
    if not LON_MIN <= lon <= LON_MAX:
        raise ValidationFailure(f"longitude must be within [-180, 180], got {lon}")
