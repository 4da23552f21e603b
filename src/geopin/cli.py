"""
GeoPin CLI entrypoint.

Quick local use of the POI store without the HTTP API or a map frontend.
All reads/writes go through `PoiStore` and `QueryEngine`.
"""

from __future__ import annotations

import argparse
import json
from typing import Any

from geopin.catalog.loader import import_catalog, load_catalog
from geopin.config.settings import get_settings
from geopin.core.errors import GeoPinError
from geopin.core.logging import configure_logging
from geopin.core.time import to_local
from geopin.domain.models import POICreate, POIStatus, POIUpdate, PointOfInterest
from geopin.quality.report import build_quality_report
from geopin.query.engine import QueryEngine
from geopin.store.repository import PoiStore


def _build_store() -> PoiStore:
    return PoiStore.from_settings(get_settings())


def _print_pois(pois: list[PointOfInterest], *, as_json: bool) -> None:
    if as_json:
        print(json.dumps([p.model_dump(mode="json") for p in pois], ensure_ascii=False, indent=2))
        return
    if not pois:
        print("No POIs found.")
        return
    for p in pois:
        tags = ", ".join(p.tags)
        print(f"{p.id}  {p.name}  ({p.latitude:.6f}, {p.longitude:.6f})  [{p.status.value}]  {tags}")


def _cmd_add(args: argparse.Namespace) -> int:
    store = _build_store()
    poi = store.create_poi(
        POICreate(
            name=args.name,
            latitude=args.lat,
            longitude=args.lon,
            description=args.description,
            source_reference=args.source,
            status=POIStatus(args.status),
            tags=args.tag or [],
        )
    )
    print(poi.id)
    return 0


def _cmd_list(args: argparse.Namespace) -> int:
    store = _build_store()
    if args.status:
        pois = QueryEngine(store).by_status(POIStatus(args.status))
    else:
        pois = store.list_pois()
    _print_pois(pois, as_json=args.json)
    return 0


def _cmd_show(args: argparse.Namespace) -> int:
    settings = get_settings()
    poi = _build_store().get_poi(args.id)
    if args.json:
        print(json.dumps(poi.model_dump(mode="json"), ensure_ascii=False, indent=2))
        return 0
    tz = settings.app.timezone
    print(f"{poi.name} [{poi.status.value}]")
    print(f"  id: {poi.id}")
    print(f"  position: {poi.latitude:.6f}, {poi.longitude:.6f}")
    if poi.description:
        print(f"  description: {poi.description}")
    if poi.source_reference:
        print(f"  source: {poi.source_reference}")
    print(f"  tags: {', '.join(poi.tags) or '-'}")
    print(f"  created: {to_local(poi.created_at, tz).isoformat()}")
    print(f"  updated: {to_local(poi.updated_at, tz).isoformat()}")
    return 0


def _cmd_update(args: argparse.Namespace) -> int:
    fields: dict[str, Any] = {
        "name": args.name,
        "latitude": args.lat,
        "longitude": args.lon,
        "description": args.description,
    }
    if args.source is not None:
        fields["source_reference"] = args.source
    if args.status is not None:
        fields["status"] = POIStatus(args.status)
    if args.tag is not None:
        fields["tags"] = args.tag
    poi = _build_store().update_poi(args.id, POIUpdate(**fields))
    print(poi.id)
    return 0


def _cmd_delete(args: argparse.Namespace) -> int:
    _build_store().delete_poi(args.id)
    print(f"Deleted {args.id}")
    return 0


def _cmd_tag(args: argparse.Namespace) -> int:
    poi = _build_store().add_tag(args.id, args.tag)
    print(f"{poi.name}: {', '.join(poi.tags)}")
    return 0


def _cmd_untag(args: argparse.Namespace) -> int:
    poi = _build_store().remove_tag(args.id, args.tag)
    print(f"{poi.name}: {', '.join(poi.tags) or '-'}")
    return 0


def _cmd_tags(_: argparse.Namespace) -> int:
    for t in _build_store().list_tags():
        print(f"{t.id}  {t.name}  ({len(t.poi_ids)} POIs)")
    return 0


def _cmd_near(args: argparse.Namespace) -> int:
    pois = QueryEngine(_build_store()).within_distance(args.lat, args.lon, args.radius)
    _print_pois(pois, as_json=args.json)
    return 0


def _cmd_nearest(args: argparse.Namespace) -> int:
    settings = get_settings()
    limit = min(args.limit or settings.query.nearest_limit_default, settings.query.nearest_limit_max)
    pairs = QueryEngine(_build_store()).nearest(args.lat, args.lon, limit)
    for i, (poi, d) in enumerate(pairs, start=1):
        print(f"{i:>2}. {poi.name}  {d:,.0f} m")
    return 0


def _cmd_bbox(args: argparse.Namespace) -> int:
    pois = QueryEngine(_build_store()).within_bounding_box(args.sw_lat, args.sw_lon, args.ne_lat, args.ne_lon)
    _print_pois(pois, as_json=args.json)
    return 0


def _cmd_search(args: argparse.Namespace) -> int:
    pois = QueryEngine(_build_store()).search_text(args.text)
    _print_pois(pois, as_json=args.json)
    return 0


def _cmd_by_tag(args: argparse.Namespace) -> int:
    pois = QueryEngine(_build_store()).by_tag_name(args.tag)
    _print_pois(pois, as_json=args.json)
    return 0


def _cmd_import(args: argparse.Namespace) -> int:
    path = args.path or get_settings().catalog.path
    entries = load_catalog(path)
    result = import_catalog(_build_store(), entries, skip_existing=not args.allow_duplicates)
    print(f"created={len(result.created)} skipped={len(result.skipped)} rejected={len(result.errors)}")
    for err in result.errors:
        print(f"  rejected: {err}")
    return 1 if result.errors else 0


def _cmd_quality_report(_: argparse.Namespace) -> int:
    report = build_quality_report(_build_store())
    print(json.dumps(report, ensure_ascii=False, indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the GeoPin CLI."""
    statuses = [s.value for s in POIStatus]
    parser = argparse.ArgumentParser(prog="geopin")
    sub = parser.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add", help="Save a new POI.")
    add.add_argument("name")
    add.add_argument("--lat", required=True, type=float)
    add.add_argument("--lon", required=True, type=float)
    add.add_argument("--description", default=None)
    add.add_argument("--source", default=None, help="Where you heard about it (free text).")
    add.add_argument("--status", choices=statuses, default=POIStatus.ACTIVE.value)
    add.add_argument("--tag", action="append", default=[], help="Repeatable.")
    add.set_defaults(func=_cmd_add)

    ls = sub.add_parser("list", help="List POIs.")
    ls.add_argument("--status", choices=statuses, default=None)
    ls.add_argument("--json", action="store_true")
    ls.set_defaults(func=_cmd_list)

    show = sub.add_parser("show", help="Show one POI.")
    show.add_argument("id")
    show.add_argument("--json", action="store_true")
    show.set_defaults(func=_cmd_show)

    upd = sub.add_parser("update", help="Replace a POI's fields (name, position, description).")
    upd.add_argument("id")
    upd.add_argument("--name", required=True)
    upd.add_argument("--lat", required=True, type=float)
    upd.add_argument("--lon", required=True, type=float)
    upd.add_argument("--description", default=None)
    upd.add_argument("--source", default=None)
    upd.add_argument("--status", choices=statuses, default=None)
    upd.add_argument("--tag", action="append", default=None, help="Repeatable; replaces all tags.")
    upd.set_defaults(func=_cmd_update)

    rm = sub.add_parser("delete", help="Delete a POI.")
    rm.add_argument("id")
    rm.set_defaults(func=_cmd_delete)

    tag = sub.add_parser("tag", help="Attach a tag to a POI (creates the tag if needed).")
    tag.add_argument("id")
    tag.add_argument("tag")
    tag.set_defaults(func=_cmd_tag)

    untag = sub.add_parser("untag", help="Detach a tag from a POI.")
    untag.add_argument("id")
    untag.add_argument("tag")
    untag.set_defaults(func=_cmd_untag)

    tags = sub.add_parser("tags", help="List tags.")
    tags.set_defaults(func=_cmd_tags)

    near = sub.add_parser("near", help="POIs within a radius (meters) of a point.")
    near.add_argument("--lat", required=True, type=float)
    near.add_argument("--lon", required=True, type=float)
    near.add_argument("--radius", required=True, type=float)
    near.add_argument("--json", action="store_true")
    near.set_defaults(func=_cmd_near)

    nst = sub.add_parser("nearest", help="Closest POIs to a point, with distances.")
    nst.add_argument("--lat", required=True, type=float)
    nst.add_argument("--lon", required=True, type=float)
    nst.add_argument("--limit", type=int, default=None)
    nst.set_defaults(func=_cmd_nearest)

    box = sub.add_parser("bbox", help="POIs inside a south-west / north-east box.")
    box.add_argument("--sw-lat", required=True, type=float)
    box.add_argument("--sw-lon", required=True, type=float)
    box.add_argument("--ne-lat", required=True, type=float)
    box.add_argument("--ne-lon", required=True, type=float)
    box.add_argument("--json", action="store_true")
    box.set_defaults(func=_cmd_bbox)

    search = sub.add_parser("search", help="Case-insensitive text search over name and description.")
    search.add_argument("text")
    search.add_argument("--json", action="store_true")
    search.set_defaults(func=_cmd_search)

    by_tag = sub.add_parser("by-tag", help="POIs carrying a tag (exact, case-sensitive name).")
    by_tag.add_argument("tag")
    by_tag.add_argument("--json", action="store_true")
    by_tag.set_defaults(func=_cmd_by_tag)

    imp = sub.add_parser("import", help="Import POIs from a JSON catalog.")
    imp.add_argument("path", nargs="?", default=None, help="Defaults to catalog.path from settings.")
    imp.add_argument("--allow-duplicates", action="store_true")
    imp.set_defaults(func=_cmd_import)

    q = sub.add_parser("quality-report", help="Offline data quality report over stored POIs and tags.")
    q.set_defaults(func=_cmd_quality_report)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m geopin.cli`."""
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)
    func: Any = getattr(args, "func")
    try:
        return int(func(args))
    except GeoPinError as e:
        parser.exit(2, f"geopin: error: {e}\n")


if __name__ == "__main__":
    raise SystemExit(main())
