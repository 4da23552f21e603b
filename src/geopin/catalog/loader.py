"""
POI catalog loader.

A catalog is a local JSON file (default: `data/catalogs/pois.json`) holding a
list of POI objects (name, latitude, longitude and optional description,
source_reference, status, tags). We validate it into `POICreate` payloads so the
import goes through the same store rules as any other write.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from geopin.core.env import resolve_project_path
from geopin.core.errors import CatalogError, GeoPinError
from geopin.domain.models import POICreate, PointOfInterest
from geopin.store.repository import PoiStore

logger = logging.getLogger(__name__)

_CATALOG_ADAPTER = TypeAdapter(list[POICreate])


def load_catalog(path: str | Path) -> list[POICreate]:
    """Load and validate a POI catalog JSON file."""
    resolved = resolve_project_path(path)
    try:
        payload = json.loads(resolved.read_text(encoding="utf-8"))
    except OSError as e:
        raise CatalogError(f"cannot read catalog {resolved}: {e.strerror or e}") from e
    except json.JSONDecodeError as e:
        raise CatalogError(f"catalog {resolved} is not valid JSON: {e}") from e
    try:
        return _CATALOG_ADAPTER.validate_python(payload)
    except ValidationError as e:
        raise CatalogError(f"catalog {resolved} has invalid entries: {e.error_count()} error(s)\n{e}") from e


@dataclass
class ImportResult:
    created: list[PointOfInterest] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


def import_catalog(store: PoiStore, entries: list[POICreate], *, skip_existing: bool = True) -> ImportResult:
    """Insert catalog entries one by one.

    An entry whose (name, latitude, longitude) already exists is skipped when
    `skip_existing` is set. A rejected entry is recorded and does not stop the
    rest of the import.
    """
    result = ImportResult()
    existing = {(p.name, p.latitude, p.longitude) for p in store.list_pois()} if skip_existing else set()

    for entry in entries:
        key = (entry.name.strip(), entry.latitude, entry.longitude)
        if key in existing:
            result.skipped.append(entry.name)
            continue
        try:
            poi = store.create_poi(entry)
        except GeoPinError as e:
            logger.warning("Catalog entry '%s' rejected: %s", entry.name, e)
            result.errors.append(f"{entry.name}: {e}")
            continue
        existing.add(key)
        result.created.append(poi)

    logger.info(
        "Catalog import: %d created, %d skipped, %d rejected",
        len(result.created),
        len(result.skipped),
        len(result.errors),
    )
    return result
