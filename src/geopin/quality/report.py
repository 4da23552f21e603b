"""
Offline data quality report.

A read-only look at the stored POIs and tags: "is the collection complete and sane?"
Used by the CLI (`geopin quality-report`) and `GET /api/quality/report`.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Any

from geopin.core.errors import ValidationFailure
from geopin.core.geo import validate_coordinates
from geopin.store.repository import PoiStore


@dataclass(frozen=True)
class Issue:
    severity: str  # "info" | "warning" | "error"
    code: str
    message: str
    count: int = 1
    sample: list[str] | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "severity": self.severity,
            "code": self.code,
            "message": self.message,
            "count": int(self.count),
            "sample": list(self.sample or []),
        }


def build_quality_report(store: PoiStore) -> dict[str, Any]:
    pois = store.list_pois()
    tags = store.list_tags()
    issues: list[Issue] = []

    bad_coords = []
    for p in pois:
        try:
            validate_coordinates(p.latitude, p.longitude)
        except ValidationFailure:
            bad_coords.append(p.id)
    if bad_coords:
        issues.append(
            Issue(
                severity="error",
                code="POI_COORDINATES_OUT_OF_RANGE",
                message="Some POIs have latitude/longitude outside the WGS84 range.",
                count=len(bad_coords),
                sample=bad_coords[:8],
            )
        )

    positions = Counter((p.latitude, p.longitude) for p in pois)
    dup_positions = [p.id for p in pois if positions[(p.latitude, p.longitude)] > 1]
    if dup_positions:
        issues.append(
            Issue(
                severity="warning",
                code="POI_DUPLICATE_POSITION",
                message="Several POIs share the exact same coordinates.",
                count=len(dup_positions),
                sample=dup_positions[:8],
            )
        )

    untagged = [p.id for p in pois if not p.tags]
    if untagged:
        issues.append(
            Issue(
                severity="info",
                code="POI_UNTAGGED",
                message="Some POIs have no tags.",
                count=len(untagged),
                sample=untagged[:8],
            )
        )

    unused = [t.name for t in tags if not t.poi_ids]
    if unused:
        issues.append(
            Issue(
                severity="info",
                code="TAG_UNUSED",
                message="Some tags are not attached to any POI.",
                count=len(unused),
                sample=sorted(unused)[:8],
            )
        )

    folded = Counter(t.name.casefold() for t in tags)
    case_clash = sorted(t.name for t in tags if folded[t.name.casefold()] > 1)
    if case_clash:
        issues.append(
            Issue(
                severity="warning",
                code="TAG_CASE_VARIANTS",
                message="Tag names differ only by case (tag lookups are case-sensitive).",
                count=len(case_clash),
                sample=case_clash[:8],
            )
        )

    status_counts = Counter(p.status.value for p in pois)
    return {
        "poi_count": len(pois),
        "tag_count": len(tags),
        "status_counts": dict(sorted(status_counts.items())),
        "issues": [i.as_dict() for i in issues],
    }
