"""
API routes.

Endpoints:
- `/api/pois`: CRUD + tag attach/detach
- `/api/pois/search/*`: radius, bounding-box, text and nearest search
- `/api/tags`: CRUD + POIs by tag name
- `/api/quality/report`: offline data quality report
"""

from __future__ import annotations

from functools import lru_cache

from fastapi import APIRouter, HTTPException, Query, Response, status

from geopin.config.settings import get_settings
from geopin.core.errors import DuplicateTagNameError, GeoPinError, NotFoundError, ValidationFailure
from geopin.domain.models import POICreate, POIStatus, POIUpdate, PointOfInterest, Tag, TagCreate, TagUpdate
from geopin.quality.report import build_quality_report
from geopin.query.engine import QueryEngine
from geopin.store.repository import PoiStore

router = APIRouter()


@lru_cache
def _store() -> PoiStore:
    return PoiStore.from_settings(get_settings())


def _engine() -> QueryEngine:
    return QueryEngine(_store())


def _http_error(exc: GeoPinError) -> HTTPException:
    if isinstance(exc, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, DuplicateTagNameError):
        code = status.HTTP_409_CONFLICT
    elif isinstance(exc, ValidationFailure):
        code = status.HTTP_400_BAD_REQUEST
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(status_code=code, detail={"code": exc.code, "message": str(exc)})


@router.get("/api/health")
def get_health() -> dict:
    return {"status": "ok"}


@router.get("/api/pois/search/radius", response_model=list[PointOfInterest])
def search_radius(
    lat: float,
    lng: float,
    distance: float = Query(..., description="Radius in meters (inclusive)"),
) -> list[PointOfInterest]:
    try:
        return _engine().within_distance(lat, lng, distance)
    except GeoPinError as e:
        raise _http_error(e) from e


@router.get("/api/pois/search/bounds", response_model=list[PointOfInterest])
def search_bounds(
    sw_lat: float = Query(..., alias="swLat"),
    sw_lng: float = Query(..., alias="swLng"),
    ne_lat: float = Query(..., alias="neLat"),
    ne_lng: float = Query(..., alias="neLng"),
) -> list[PointOfInterest]:
    try:
        return _engine().within_bounding_box(sw_lat, sw_lng, ne_lat, ne_lng)
    except GeoPinError as e:
        raise _http_error(e) from e


@router.get("/api/pois/search/text", response_model=list[PointOfInterest])
def search_text(q: str) -> list[PointOfInterest]:
    try:
        return _engine().search_text(q)
    except GeoPinError as e:
        raise _http_error(e) from e


@router.get("/api/pois/search/nearest")
def search_nearest(lat: float, lng: float, limit: int | None = None) -> dict:
    """Closest POIs first, each with its distance in meters."""
    settings = get_settings()
    n = min(limit or settings.query.nearest_limit_default, settings.query.nearest_limit_max)
    try:
        pairs = _engine().nearest(lat, lng, n)
    except GeoPinError as e:
        raise _http_error(e) from e
    return {
        "results": [
            {"poi": poi.model_dump(mode="json"), "distance_m": round(d, 2)}
            for poi, d in pairs
        ]
    }


@router.post("/api/pois", response_model=PointOfInterest, status_code=status.HTTP_201_CREATED)
def create_poi(payload: POICreate) -> PointOfInterest:
    try:
        return _store().create_poi(payload)
    except GeoPinError as e:
        raise _http_error(e) from e


@router.get("/api/pois", response_model=list[PointOfInterest])
def list_pois(status_filter: POIStatus | None = Query(None, alias="status")) -> list[PointOfInterest]:
    if status_filter is not None:
        return _engine().by_status(status_filter)
    return _store().list_pois()


@router.get("/api/pois/{poi_id}", response_model=PointOfInterest)
def get_poi(poi_id: str) -> PointOfInterest:
    try:
        return _store().get_poi(poi_id)
    except GeoPinError as e:
        raise _http_error(e) from e


@router.put("/api/pois/{poi_id}", response_model=PointOfInterest)
def update_poi(poi_id: str, payload: POIUpdate) -> PointOfInterest:
    try:
        return _store().update_poi(poi_id, payload)
    except GeoPinError as e:
        raise _http_error(e) from e


@router.delete("/api/pois/{poi_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_poi(poi_id: str) -> Response:
    try:
        _store().delete_poi(poi_id)
    except GeoPinError as e:
        raise _http_error(e) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/api/pois/{poi_id}/tags/{tag_name}", response_model=PointOfInterest)
def add_poi_tag(poi_id: str, tag_name: str) -> PointOfInterest:
    try:
        return _store().add_tag(poi_id, tag_name)
    except GeoPinError as e:
        raise _http_error(e) from e


@router.delete("/api/pois/{poi_id}/tags/{tag_name}", response_model=PointOfInterest)
def remove_poi_tag(poi_id: str, tag_name: str) -> PointOfInterest:
    try:
        return _store().remove_tag(poi_id, tag_name)
    except GeoPinError as e:
        raise _http_error(e) from e


@router.post("/api/tags", response_model=Tag, status_code=status.HTTP_201_CREATED)
def create_tag(payload: TagCreate) -> Tag:
    try:
        return _store().create_tag(payload.name)
    except GeoPinError as e:
        raise _http_error(e) from e


@router.get("/api/tags", response_model=list[Tag])
def list_tags() -> list[Tag]:
    return _store().list_tags()


@router.get("/api/tags/search/{tag_name}/pois", response_model=list[PointOfInterest])
def get_pois_by_tag_name(tag_name: str) -> list[PointOfInterest]:
    """POIs carrying the tag; an unknown tag name yields an empty list."""
    return _engine().by_tag_name(tag_name)


@router.get("/api/tags/{tag_id}", response_model=Tag)
def get_tag(tag_id: str) -> Tag:
    try:
        return _store().get_tag(tag_id)
    except GeoPinError as e:
        raise _http_error(e) from e


@router.put("/api/tags/{tag_id}", response_model=Tag)
def update_tag(tag_id: str, payload: TagUpdate) -> Tag:
    try:
        return _store().update_tag(tag_id, payload.name)
    except GeoPinError as e:
        raise _http_error(e) from e


@router.delete("/api/tags/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_tag(tag_id: str) -> Response:
    try:
        _store().delete_tag(tag_id)
    except GeoPinError as e:
        raise _http_error(e) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/api/quality/report")
def get_quality_report() -> dict:
    """Return an offline data quality report over the stored POIs and tags."""
    return build_quality_report(_store())
