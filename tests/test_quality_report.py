from geopin.domain.models import POICreate, POIStatus
from geopin.quality.report import build_quality_report


def _codes(report):
    return {i["code"]: i for i in report["issues"]}


def test_quality_report_on_empty_store(store):
    report = build_quality_report(store)
    assert report["poi_count"] == 0
    assert report["tag_count"] == 0
    assert report["issues"] == []


def test_quality_report_flags_common_issues(store):
    a = store.create_poi(POICreate(name="A", latitude=51.5, longitude=-0.1, tags=["Food"]))
    store.create_poi(POICreate(name="B", latitude=51.5, longitude=-0.1, status=POIStatus.ARCHIVED))
    store.create_tag("food")
    store.create_tag("unused")

    report = build_quality_report(store)
    codes = _codes(report)

    assert report["poi_count"] == 2
    assert report["status_counts"] == {"ACTIVE": 1, "ARCHIVED": 1}
    assert codes["POI_DUPLICATE_POSITION"]["count"] == 2
    assert codes["POI_UNTAGGED"]["count"] == 1
    assert set(codes["TAG_UNUSED"]["sample"]) == {"food", "unused"}
    assert codes["TAG_CASE_VARIANTS"]["sample"] == ["Food", "food"]
    assert a.id not in codes["POI_UNTAGGED"]["sample"]


def test_quality_report_flags_out_of_range_coordinates(make_store):
    store = make_store(enforce_coordinate_range=False)
    bad = store.create_poi(POICreate(name="Typo", latitude=515.0, longitude=-0.1))

    codes = _codes(build_quality_report(store))
    assert codes["POI_COORDINATES_OUT_OF_RANGE"]["sample"] == [bad.id]
