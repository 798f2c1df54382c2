"""Nearest-land queries against a land-polygon shapefile."""

from __future__ import annotations

import math
import os
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from shapely.errors import GEOSException
from shapely.geometry import LineString, Point
from shapely.geometry.base import BaseGeometry, BaseMultipartGeometry

from .geodesy import AzimuthalEquidistant
from .shapefile import ShapefileReader

METERS_PER_DEG_LAT = 111320.0
INITIAL_RADIUS_M = 10_000.0
MAX_RADIUS_M = 20_000_000.0


class DistanceError(RuntimeError):
    """No distance could be computed from the dataset."""


@dataclass
class DistanceQueryResult:
    """Nearest land point to a query and the geodesic distance to it."""

    provider_id: str
    shp_path: Path
    geodesic_m: float = 0.0
    land_lat_deg: float = 0.0
    land_lon_deg: float = 0.0
    in_land: bool = False


def meters_to_deg_window(lat_deg: float, radius_m: float) -> tuple[float, float]:
    """Return the (latitude, longitude) half-widths in degrees of a search radius."""
    dlat = radius_m / METERS_PER_DEG_LAT
    coslat = max(math.cos(math.radians(lat_deg)), 1e-6)
    return dlat, radius_m / (METERS_PER_DEG_LAT * coslat)


def _line_parts(geometry: BaseGeometry | None) -> Iterator[LineString]:
    if geometry is None or geometry.is_empty:
        return
    if isinstance(geometry, LineString):
        if len(geometry.coords) >= 2:
            yield geometry
    elif isinstance(geometry, BaseMultipartGeometry):
        for part in geometry.geoms:
            yield from _line_parts(part)


def _windows(lon: float, dlon: float, ymin: float, ymax: float) -> list[tuple[float, float, float, float]]:
    xmin, xmax = lon - dlon, lon + dlon
    if xmin < -180.0:
        return [(xmin + 360.0, ymin, 180.0, ymax), (-180.0, ymin, xmax, ymax)]
    if xmax > 180.0:
        return [(xmin, ymin, 180.0, ymax), (-180.0, ymin, xmax - 360.0, ymax)]
    return [(xmin, ymin, xmax, ymax)]


def _nearest_in_window(
    reader: ShapefileReader,
    projection: AzimuthalEquidistant,
    origin: Point,
    window: tuple[float, float, float, float],
) -> tuple[float, Point | None, bool]:
    """Return (distance, nearest boundary point, inside) over one window."""
    best = math.inf
    best_point: Point | None = None
    for geometry in reader.shapes(window):
        try:
            projected = projection.transform_geometry(geometry)
            if projected.is_empty:
                continue
            if origin.distance(projected) == 0.0:
                return 0.0, origin, True
            boundary = projected.boundary
        except (GEOSException, ValueError):
            continue
        for line in _line_parts(boundary):
            candidate = line.interpolate(line.project(origin))
            distance = candidate.distance(origin)
            if distance < best:
                best, best_point = distance, candidate
    return best, best_point, False


def distance_query_geodesic(
    lat_deg: float,
    lon_deg: float,
    provider_id: str,
    shp_path: str | os.PathLike[str],
) -> DistanceQueryResult:
    """Find the nearest land point by searching windows of growing radius.

    Distances are measured in an azimuthal equidistant projection centred on
    the query, so they are geodesic distances from the query point.
    """
    shp_path = Path(shp_path)
    projection = AzimuthalEquidistant(lat_deg, lon_deg)
    origin = Point(projection.forward(lat_deg, lon_deg))

    best = math.inf
    best_point = origin
    in_land = False

    with ShapefileReader(shp_path) as reader:
        radius = INITIAL_RADIUS_M
        while radius <= MAX_RADIUS_M:
            dlat, dlon = meters_to_deg_window(lat_deg, radius)
            for window in _windows(lon_deg, dlon, lat_deg - dlat, lat_deg + dlat):
                distance, point, inside = _nearest_in_window(reader, projection, origin, window)
                if inside:
                    best, best_point, in_land = 0.0, origin, True
                elif point is not None and distance < best:
                    best, best_point = distance, point
                if best == 0.0:
                    break
            if best == 0.0:
                break
            if math.isfinite(best) and best <= radius * 1.2:
                break
            radius *= 2.0

    if not math.isfinite(best):
        raise DistanceError("No distance computed (bad dataset?)")

    land_lat, land_lon = projection.inverse(best_point.x, best_point.y)
    return DistanceQueryResult(
        provider_id=provider_id,
        shp_path=shp_path,
        geodesic_m=best,
        land_lat_deg=land_lat,
        land_lon_deg=land_lon,
        in_land=in_land,
    )


def distance_backend_selftest() -> bool:
    """Report whether the distance backend is usable; it always is here."""
    return True