import json

import pytest
from geopin.catalog.loader import import_catalog, load_catalog
from geopin.core.errors import CatalogError
from geopin.domain.models import POIStatus
from geopin.query.engine import QueryEngine


def _write_catalog(tmp_path, payload):
    path = tmp_path / "pois.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_load_catalog_validates_entries(tmp_path):
    path = _write_catalog(
        tmp_path,
        [
            {"name": "Trafalgar Square", "latitude": 51.508, "longitude": -0.1284, "tags": ["tourist", " tourist "]},
            {"name": "Pop-up bar", "latitude": 51.51, "longitude": -0.12, "status": "TEMPORARY"},
        ],
    )
    entries = load_catalog(path)

    assert [e.name for e in entries] == ["Trafalgar Square", "Pop-up bar"]
    assert entries[0].tags == ["tourist"]
    assert entries[1].status == POIStatus.TEMPORARY


def test_load_catalog_rejects_malformed_entries(tmp_path):
    path = _write_catalog(tmp_path, [{"name": "No coordinates"}])
    with pytest.raises(CatalogError, match="invalid entries"):
        load_catalog(path)


def test_load_catalog_reports_missing_and_unparsable_files(tmp_path):
    with pytest.raises(CatalogError, match="cannot read catalog"):
        load_catalog(tmp_path / "missing.json")

    broken = tmp_path / "broken.json"
    broken.write_text("[{not json", encoding="utf-8")
    with pytest.raises(CatalogError, match="not valid JSON"):
        load_catalog(broken)


def test_import_catalog_creates_pois_with_tags(store, tmp_path):
    path = _write_catalog(
        tmp_path,
        [
            {"name": "Trafalgar Square", "latitude": 51.508, "longitude": -0.1284, "tags": ["restaurant"]},
            {"name": "Leicester Square", "latitude": 51.5113, "longitude": -0.1283, "tags": ["restaurant"]},
            {"name": "St Paul's", "latitude": 51.5138, "longitude": -0.0983},
        ],
    )
    result = import_catalog(store, load_catalog(path))

    assert len(result.created) == 3
    names = {p.name for p in QueryEngine(store).by_tag_name("restaurant")}
    assert names == {"Trafalgar Square", "Leicester Square"}


def test_import_catalog_skips_existing_and_records_rejections(store, tmp_path):
    path = _write_catalog(
        tmp_path,
        [
            {"name": "Trafalgar Square", "latitude": 51.508, "longitude": -0.1284},
            {"name": "Off the map", "latitude": 123.0, "longitude": 0.0},
        ],
    )
    entries = load_catalog(path)

    first = import_catalog(store, entries)
    second = import_catalog(store, entries)

    assert [p.name for p in first.created] == ["Trafalgar Square"]
    assert len(first.errors) == 1 and first.errors[0].startswith("Off the map")
    assert second.created == []
    assert second.skipped == ["Trafalgar Square"]
    assert len(store.list_pois()) == 1


def test_bundled_sample_catalog_loads():
    from geopin.core.env import resolve_project_path

    path = resolve_project_path("data/catalogs/pois.json")
    if not path.is_file():
        pytest.skip("sample catalog not available outside the repository")
    entries = load_catalog(path)
    assert {"Trafalgar Square", "Leicester Square", "St Paul's"} <= {e.name for e in entries}
