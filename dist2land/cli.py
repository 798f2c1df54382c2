"""Command-line interface."""

from __future__ import annotations

import math
import shutil
import sys

from .archive import extract_zip
from .distance import DistanceQueryResult, distance_query_geodesic
from .download import http_download_to
from .metrics import chord_distance_wgs84_m, convert_units, rhumb_distance_sphere_m
from .paths import downloads_dir, provider_dir
from .providers import (
    Provider,
    all_providers,
    best_available_provider_id,
    provider_by_id,
    provider_extract_root,
    provider_installed,
    provider_shapefile_path,
)
from .util import ArgView

_USAGE = """\
dist2land

Commands:
  dist2land help
  dist2land providers
  dist2land setup --provider (osm|gshhg|ne|all)
  dist2land distance --lat <deg> --lon <deg>
                    [--provider (auto|osm|gshhg|ne)]
                    [--units (m|km|nm)]
                    [--metric (geodesic|chord|rhumb)]
                    [--json]

Examples:
  dist2land setup --provider osm
  dist2land distance --lat 36.84 --lon -122.42 --provider auto
  dist2land distance --lat 0 --lon -30 --metric rhumb --units nm
  dist2land distance --lat 36.84 --lon -122.42 --json

Output:
  <distance> <units> <land_lat_deg> <land_lon_deg>
  (or JSON if --json)

Notes:
  - First run: you must download a dataset:
      dist2land setup --provider osm
  - If your point is on land (inside polygon), distance is 0 and the reported land point
    is the query point itself.

Performance:
  Queries read the provider shapefile sequentially and skip records whose
  bounding boxes lie outside the current search window.

  You can locate the provider shapefile path by running:
     dist2land distance --lat 0 --lon 0 --provider osm
  (it prints shp=... on stderr).
"""

_JSON_ESCAPES = {
    '"': '\\"',
    "\\": "\\\\",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def usage_text() -> str:
    """Return the help text."""
    return _USAGE


def json_escape(text: str) -> str:
    """Escape a string for inclusion between JSON double quotes."""
    return "".join(
        _JSON_ESCAPES.get(ch) or (f"\\u{ord(ch):04x}" if ord(ch) < 0x20 else ch)
        for ch in text
    )


def format_json_result(
    lat: float,
    lon: float,
    distance: float,
    units: str,
    metric: str,
    result: DistanceQueryResult,
    distance_m: float,
) -> str:
    """Return the JSON document describing a query result."""
    fields = [
        f'"distance":{distance:.3f}',
        f'"units":"{json_escape(units.lower())}"',
        f'"metric":"{json_escape(metric)}"',
        f'"provider":"{json_escape(result.provider_id)}"',
        f'"land_lat_deg":{result.land_lat_deg:.8f}',
        f'"land_lon_deg":{result.land_lon_deg:.8f}',
        f'"distance_m":{distance_m:.3f}',
        f'"geodesic_m":{result.geodesic_m:.3f}',
        f'"in_land":{"true" if result.in_land else "false"}',
        f'"shp":"{json_escape(str(result.shp_path))}"',
    ]
    query = f'"query":{{"lat_deg":{lat:.8f},"lon_deg":{lon:.8f}}}'
    return "{" + query + ',"result":{' + ",".join(fields) + "}}"


def format_text_result(distance: float, units: str, result: DistanceQueryResult) -> str:
    """Return the plain ``<distance> <units> <land_lat> <land_lon>`` line."""
    return (
        f"{distance:.3f} {units.lower()} "
        f"{result.land_lat_deg:.8f} {result.land_lon_deg:.8f}"
    )


def _cmd_providers() -> None:
    print("Providers:")
    for provider in all_providers():
        state = "installed" if provider_installed(provider) else "not installed"
        print(f"  {provider.id}  [{state}]  {provider.display_name}")


def _setup_one(provider: Provider) -> None:
    provider_dir(provider.id).mkdir(parents=True, exist_ok=True)
    ddir = downloads_dir()
    ddir.mkdir(parents=True, exist_ok=True)

    zip_path = ddir / f"{provider.id}.zip"
    print(f"Downloading {provider.id}...")
    http_download_to(provider.url_zip, zip_path)

    out_root = provider_extract_root(provider)
    print(f"Extracting to {out_root}...")
    if out_root.is_dir() and not out_root.is_symlink():
        shutil.rmtree(out_root)
    elif out_root.exists() or out_root.is_symlink():
        out_root.unlink()
    extract_zip(zip_path, out_root)

    shapefile = provider_shapefile_path(provider)
    print(f"OK: found shapefile: {shapefile}")
    print(f"License note: {provider.license_hint}")


def _cmd_setup(args: ArgView) -> None:
    wanted = args.get("--provider", "").lower()
    if not wanted:
        raise ValueError("setup requires --provider")
    if wanted == "all":
        for provider in all_providers():
            _setup_one(provider)
        return
    _setup_one(provider_by_id(wanted))


def _cmd_distance(args: ArgView) -> None:
    lat = args.get_double("--lat", math.nan)
    lon = args.get_double("--lon", math.nan)
    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise ValueError("distance requires --lat and --lon")
    if not -90.0 <= lat <= 90.0:
        raise ValueError("--lat must be in [-90, 90] degrees")
    if not -180.0 <= lon <= 180.0:
        raise ValueError("--lon must be in [-180, 180] degrees")

    wanted = args.get("--provider", "auto").lower()
    units = args.get("--units", "m")
    metric = args.get("--metric", "geodesic").lower()
    as_json = args.has("--json")

    if wanted == "auto":
        best = best_available_provider_id()
        if not best:
            raise RuntimeError(
                "No providers installed. Run: dist2land setup --provider osm (or gshhg/ne)"
            )
        provider = provider_by_id(best)
    else:
        provider = provider_by_id(wanted)
    if not provider_installed(provider):
        raise RuntimeError(
            f"Provider '{provider.id}' not installed. "
            f"Run: dist2land setup --provider {provider.id}"
        )
    shapefile = provider_shapefile_path(provider)

    result = distance_query_geodesic(lat, lon, provider.id, shapefile)

    if metric == "geodesic":
        distance_m = result.geodesic_m
    elif metric == "chord":
        distance_m = chord_distance_wgs84_m(lat, lon, result.land_lat_deg, result.land_lon_deg)
    elif metric == "rhumb":
        distance_m = rhumb_distance_sphere_m(lat, lon, result.land_lat_deg, result.land_lon_deg)
    else:
        raise ValueError(f"Unknown --metric: {metric} (use geodesic|chord|rhumb)")

    distance = convert_units(distance_m, units)

    if as_json:
        print(format_json_result(lat, lon, distance, units, metric, result, distance_m))
    else:
        print(format_text_result(distance, units, result))

    print(
        f"provider={result.provider_id} metric={metric} "
        f"shp={result.shp_path} geodesic_m={result.geodesic_m:g}",
        file=sys.stderr,
    )


def main(argv: list[str] | None = None) -> int:
    """Run the command line; return the process exit status."""
    argv = list(sys.argv[1:] if argv is None else argv)
    try:
        if not argv:
            print(usage_text(), end="")
            return 2
        args = ArgView(argv)
        command = argv[0].lower()
        if command in ("help", "-h", "--help"):
            print(usage_text(), end="")
            return 0
        if command == "providers":
            _cmd_providers()
            return 0
        if command == "setup":
            _cmd_setup(args)
            return 0
        if command == "distance":
            _cmd_distance(args)
            return 0
        print(usage_text(), end="")
        return 2
    except Exception as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())