"""
POI and tag store.

`PoiStore` is the only data-access surface the rest of GeoPin uses. Every public
method runs in its own short transaction (`sessionmaker.begin()`): it either
commits completely or rolls back and leaves prior state untouched.

Rules enforced here:
- validation happens before any row is touched,
- ids are UUID4 strings assigned at creation,
- `created_at`/`updated_at` come from the injected clock (converted to UTC), never from ORM hooks,
- tag membership lives in the `poi_tags` association table only, so a POI's tag
  list and a tag's POI list are two reads of the same rows.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from geopin.config.settings import Settings
from geopin.core.errors import DuplicateTagNameError, NotFoundError, ValidationFailure
from geopin.core.geo import validate_coordinates
from geopin.core.time import Clock, ensure_utc, utc_now
from geopin.domain.models import POICreate, POIStatus, POIUpdate, PointOfInterest, Tag
from geopin.store.database import build_engine, build_session_factory, init_db
from geopin.store.schema import PoiRow, TagRow, poi_tags

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid.uuid4())


def _poi_view(row: PoiRow) -> PointOfInterest:
    return PointOfInterest(
        id=row.id,
        name=row.name,
        description=row.description,
        latitude=row.latitude,
        longitude=row.longitude,
        source_reference=row.source_reference,
        status=POIStatus(row.status),
        tags=sorted(t.name for t in row.tags),
        created_at=ensure_utc(row.created_at),
        updated_at=ensure_utc(row.updated_at),
    )


def _tag_view(row: TagRow, poi_ids: list[str]) -> Tag:
    return Tag(
        id=row.id,
        name=row.name,
        poi_ids=sorted(poi_ids),
        created_at=ensure_utc(row.created_at),
        updated_at=ensure_utc(row.updated_at),
    )


def _clean_name(value: str) -> str:
    return (value or "").strip()


def _require_name(value: str, *, what: str) -> str:
    name = _clean_name(value)
    if not name:
        raise ValidationFailure(f"{what} name must not be empty")
    return name


@contextmanager
def _tag_name_conflicts(names: list[str]) -> Iterator[None]:
    # A concurrent writer can insert the same tag name between our lookup and commit.
    try:
        yield
    except IntegrityError as e:
        raise DuplicateTagNameError(", ".join(names)) from e


class PoiStore:
    def __init__(
        self,
        session_factory: sessionmaker[Session],
        *,
        clock: Clock = utc_now,
        enforce_coordinate_range: bool = True,
    ):
        self._session_factory = session_factory
        self._clock = clock
        self._enforce_coordinate_range = enforce_coordinate_range

    @classmethod
    def from_settings(cls, settings: Settings, *, clock: Clock = utc_now) -> "PoiStore":
        """Build engine + schema + store from settings."""
        engine = build_engine(settings.database)
        init_db(engine)
        return cls(
            build_session_factory(engine),
            clock=clock,
            enforce_coordinate_range=settings.validation.enforce_coordinate_range,
        )

    @contextmanager
    def _transaction(self) -> Iterator[Session]:
        with self._session_factory.begin() as session:
            yield session

    def _now(self) -> datetime:
        # SQLite keeps wall time only, so everything is stored as UTC.
        return ensure_utc(self._clock())

    def _check_coordinates(self, lat: float, lon: float) -> None:
        if self._enforce_coordinate_range:
            validate_coordinates(lat, lon)

    @staticmethod
    def _load_poi(session: Session, poi_id: str) -> PoiRow:
        row = session.get(PoiRow, poi_id)
        if row is None:
            raise NotFoundError("POI", poi_id)
        return row

    @staticmethod
    def _load_tag(session: Session, tag_id: str) -> TagRow:
        row = session.get(TagRow, tag_id)
        if row is None:
            raise NotFoundError("Tag", tag_id)
        return row

    @staticmethod
    def _tag_by_name(session: Session, name: str) -> TagRow | None:
        return session.scalars(select(TagRow).where(TagRow.name == name)).one_or_none()

    def _get_or_create_tags(self, session: Session, names: list[str]) -> list[TagRow]:
        rows: list[TagRow] = []
        for name in names:
            row = self._tag_by_name(session, name)
            if row is None:
                now = self._now()
                row = TagRow(id=_new_id(), name=name, created_at=now, updated_at=now)
                session.add(row)
                logger.debug("Created tag %s (%s)", row.id, name)
            rows.append(row)
        return rows

    @staticmethod
    def _poi_ids_for_tag(session: Session, tag_id: str) -> list[str]:
        return list(session.scalars(select(poi_tags.c.poi_id).where(poi_tags.c.tag_id == tag_id)))

    # POIs

    def create_poi(self, payload: POICreate) -> PointOfInterest:
        name = _require_name(payload.name, what="POI")
        self._check_coordinates(payload.latitude, payload.longitude)
        tag_names = [_require_name(t, what="Tag") for t in payload.tags]

        with _tag_name_conflicts(tag_names), self._transaction() as session:
            now = self._now()
            row = PoiRow(
                id=_new_id(),
                name=name,
                description=payload.description,
                latitude=payload.latitude,
                longitude=payload.longitude,
                source_reference=payload.source_reference,
                status=payload.status.value,
                created_at=now,
                updated_at=now,
            )
            row.tags = self._get_or_create_tags(session, tag_names)
            session.add(row)
            view = _poi_view(row)
        logger.info("Created POI %s (%s)", view.id, view.name)
        return view

    def get_poi(self, poi_id: str) -> PointOfInterest:
        with self._transaction() as session:
            return _poi_view(self._load_poi(session, poi_id))

    def list_pois(self) -> list[PointOfInterest]:
        with self._transaction() as session:
            return [_poi_view(r) for r in session.scalars(select(PoiRow))]

    def update_poi(self, poi_id: str, payload: POIUpdate) -> PointOfInterest:
        name = _require_name(payload.name, what="POI")
        self._check_coordinates(payload.latitude, payload.longitude)
        supplied = payload.model_fields_set
        tag_names = None
        if "tags" in supplied and payload.tags is not None:
            tag_names = [_require_name(t, what="Tag") for t in payload.tags]

        with _tag_name_conflicts(tag_names or []), self._transaction() as session:
            row = self._load_poi(session, poi_id)
            row.name = name
            row.description = payload.description
            row.latitude = payload.latitude
            row.longitude = payload.longitude
            if "source_reference" in supplied:
                row.source_reference = payload.source_reference
            if "status" in supplied and payload.status is not None:
                row.status = payload.status.value
            if tag_names is not None:
                row.tags = self._get_or_create_tags(session, tag_names)
            row.updated_at = self._now()
            view = _poi_view(row)
        logger.info("Updated POI %s", poi_id)
        return view

    def delete_poi(self, poi_id: str) -> None:
        with self._transaction() as session:
            row = self._load_poi(session, poi_id)
            # The ORM removes the poi_tags rows for this POI before the POI row.
            session.delete(row)
        logger.info("Deleted POI %s", poi_id)

    def add_tag(self, poi_id: str, tag_name: str) -> PointOfInterest:
        """Attach a tag (created on first use) to a POI in one transaction."""
        name = _require_name(tag_name, what="Tag")
        with _tag_name_conflicts([name]), self._transaction() as session:
            row = self._load_poi(session, poi_id)
            (tag,) = self._get_or_create_tags(session, [name])
            if tag not in row.tags:
                row.tags.append(tag)
                row.updated_at = self._now()
            view = _poi_view(row)
        return view

    def remove_tag(self, poi_id: str, tag_name: str) -> PointOfInterest:
        """Detach a tag from a POI. The tag itself is kept even if now unused."""
        name = _require_name(tag_name, what="Tag")
        with self._transaction() as session:
            row = self._load_poi(session, poi_id)
            tag = self._tag_by_name(session, name)
            if tag is None:
                raise NotFoundError("Tag", name)
            if tag in row.tags:
                row.tags.remove(tag)
                row.updated_at = self._now()
            view = _poi_view(row)
        return view

    def pois_for_tag_name(self, tag_name: str) -> list[PointOfInterest]:
        """Every distinct POI carrying the tag named exactly `tag_name`."""
        stmt = (
            select(PoiRow)
            .join(poi_tags, poi_tags.c.poi_id == PoiRow.id)
            .join(TagRow, TagRow.id == poi_tags.c.tag_id)
            .where(TagRow.name == _clean_name(tag_name))
            .distinct()
        )
        with self._transaction() as session:
            return [_poi_view(r) for r in session.scalars(stmt)]

    # Tags

    def create_tag(self, tag_name: str) -> Tag:
        name = _require_name(tag_name, what="Tag")
        with _tag_name_conflicts([name]), self._transaction() as session:
            if self._tag_by_name(session, name) is not None:
                raise DuplicateTagNameError(name)
            now = self._now()
            row = TagRow(id=_new_id(), name=name, created_at=now, updated_at=now)
            session.add(row)
            view = _tag_view(row, [])
        logger.info("Created tag %s (%s)", view.id, view.name)
        return view

    def get_tag(self, tag_id: str) -> Tag:
        with self._transaction() as session:
            row = self._load_tag(session, tag_id)
            return _tag_view(row, self._poi_ids_for_tag(session, row.id))

    def get_tag_by_name(self, tag_name: str) -> Tag | None:
        with self._transaction() as session:
            row = self._tag_by_name(session, _clean_name(tag_name))
            if row is None:
                return None
            return _tag_view(row, self._poi_ids_for_tag(session, row.id))

    def list_tags(self) -> list[Tag]:
        with self._transaction() as session:
            members: dict[str, list[str]] = {}
            for poi_id, tag_id in session.execute(select(poi_tags.c.poi_id, poi_tags.c.tag_id)):
                members.setdefault(tag_id, []).append(poi_id)
            return [_tag_view(r, members.get(r.id, [])) for r in session.scalars(select(TagRow))]

    def update_tag(self, tag_id: str, tag_name: str) -> Tag:
        """Rename a tag."""
        name = _require_name(tag_name, what="Tag")
        with _tag_name_conflicts([name]), self._transaction() as session:
            row = self._load_tag(session, tag_id)
            clash = self._tag_by_name(session, name)
            if clash is not None and clash.id != row.id:
                raise DuplicateTagNameError(name)
            row.name = name
            row.updated_at = self._now()
            view = _tag_view(row, self._poi_ids_for_tag(session, row.id))
        return view

    def delete_tag(self, tag_id: str) -> None:
        """Delete a tag and detach it from every POI."""
        with self._transaction() as session:
            row = self._load_tag(session, tag_id)
            session.execute(delete(poi_tags).where(poi_tags.c.tag_id == row.id))
            session.delete(row)
        logger.info("Deleted tag %s", tag_id)
