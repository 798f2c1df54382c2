"""Reading geometries from ESRI shapefiles."""

from __future__ import annotations

import os
import struct
from collections.abc import Iterator
from pathlib import Path

from shapely.errors import GEOSException
from shapely.geometry import (
    LineString,
    MultiLineString,
    MultiPoint,
    MultiPolygon,
    Point,
    Polygon,
    box,
)
from shapely.geometry.base import BaseGeometry

_FILE_CODE = 9994
_HEADER_SIZE = 100

_POINT_TYPES = {1, 11, 21}
_POLYLINE_TYPES = {3, 13, 23}
_POLYGON_TYPES = {5, 15, 25}
_MULTIPOINT_TYPES = {8, 18, 28}
_MULTIPATCH = 31

BBox = tuple[float, float, float, float]


class ShapefileError(RuntimeError):
    """A shapefile could not be opened or is malformed."""


def _boxes_intersect(a: BBox, b: BBox) -> bool:
    return not (a[2] < b[0] or b[2] < a[0] or a[3] < b[1] or b[3] < a[1])


def _signed_area(ring: list[tuple[float, float]]) -> float:
    return sum(x0 * y1 - x1 * y0 for (x0, y0), (x1, y1) in zip(ring, ring[1:])) / 2.0


def _read_parts(content: bytes, with_part_types: bool) -> list[list[tuple[float, float]]]:
    num_parts, num_points = struct.unpack_from("<2i", content, 36)
    offset = 44
    starts = list(struct.unpack_from(f"<{num_parts}i", content, offset))
    offset += 4 * num_parts
    if with_part_types:
        offset += 4 * num_parts
    coords = struct.unpack_from(f"<{2 * num_points}d", content, offset)
    points = list(zip(coords[0::2], coords[1::2]))
    bounds = starts + [num_points]
    return [points[start:end] for start, end in zip(bounds, bounds[1:])]


def _closed(ring: list[tuple[float, float]]) -> list[tuple[float, float]]:
    return ring if ring and ring[0] == ring[-1] else ring + ring[:1]


def _assemble_polygon(parts: list[list[tuple[float, float]]]) -> BaseGeometry | None:
    shells: list[list[tuple[float, float]]] = []
    holes: list[list[tuple[float, float]]] = []
    for part in parts:
        ring = _closed(part)
        if len(ring) < 4:
            continue
        area = _signed_area(ring)
        if area < 0.0:
            shells.append(ring)
        elif area > 0.0:
            holes.append(ring)
    if not shells:
        shells, holes = holes, []

    shell_polygons = [Polygon(shell) for shell in shells]
    interiors: list[list[list[tuple[float, float]]]] = [[] for _ in shells]
    orphans: list[list[tuple[float, float]]] = []
    for hole in holes:
        probe = Point(hole[0])
        owner = next(
            (index for index, poly in enumerate(shell_polygons) if poly.covers(probe)),
            None,
        )
        if owner is None:
            orphans.append(hole)
        else:
            interiors[owner].append(hole)

    polygons = [Polygon(shell, rings) for shell, rings in zip(shells, interiors)]
    polygons += [Polygon(orphan) for orphan in orphans]
    if not polygons:
        return None
    return polygons[0] if len(polygons) == 1 else MultiPolygon(polygons)


def _parse_shape(shape_type: int, content: bytes) -> BaseGeometry | None:
    if shape_type in _POINT_TYPES:
        return Point(struct.unpack_from("<2d", content, 4))
    if shape_type in _MULTIPOINT_TYPES:
        (num_points,) = struct.unpack_from("<i", content, 36)
        coords = struct.unpack_from(f"<{2 * num_points}d", content, 40)
        return MultiPoint(list(zip(coords[0::2], coords[1::2])))
    if shape_type in _POLYLINE_TYPES:
        lines = [LineString(part) for part in _read_parts(content, False) if len(part) >= 2]
        if not lines:
            return None
        return lines[0] if len(lines) == 1 else MultiLineString(lines)
    if shape_type in _POLYGON_TYPES:
        return _assemble_polygon(_read_parts(content, False))
    if shape_type == _MULTIPATCH:
        return _assemble_polygon(_read_parts(content, True))
    raise ShapefileError(f"Unsupported shape type: {shape_type}")


class ShapefileReader:
    """Sequential reader of the geometries in a ``.shp`` file."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)
        try:
            self._file = open(self.path, "rb")
        except OSError as exc:
            raise ShapefileError(f"Failed to open shapefile: {self.path}") from exc
        header = self._file.read(_HEADER_SIZE)
        if len(header) < _HEADER_SIZE or struct.unpack_from(">i", header, 0)[0] != _FILE_CODE:
            self._file.close()
            raise ShapefileError(f"Failed to open shapefile: {self.path}")
        self.shape_type: int = struct.unpack_from("<i", header, 32)[0]
        self.bbox: BBox = struct.unpack_from("<4d", header, 36)

    @property
    def closed(self) -> bool:
        return self._file.closed

    def shapes(self, bbox: BBox | None = None) -> Iterator[BaseGeometry]:
        """Yield geometries in file order, limited to those meeting ``bbox`` if given.

        ``bbox`` is (xmin, ymin, xmax, ymax); a geometry is yielded when its
        bounds overlap the box and the geometry itself intersects it.
        """
        handle = self._file
        handle.seek(_HEADER_SIZE)
        window = box(*bbox) if bbox is not None else None
        while True:
            record_header = handle.read(8)
            if len(record_header) < 8:
                return
            _, words = struct.unpack(">2i", record_header)
            size = 2 * words
            content = handle.read(size)
            if len(content) < size or size < 4:
                raise ShapefileError(f"Truncated record in shapefile: {self.path}")
            (shape_type,) = struct.unpack_from("<i", content, 0)
            if shape_type == 0:
                continue
            if bbox is not None:
                if shape_type in _POINT_TYPES:
                    x, y = struct.unpack_from("<2d", content, 4)
                    record_box: BBox = (x, y, x, y)
                else:
                    record_box = struct.unpack_from("<4d", content, 4)
                if not _boxes_intersect(record_box, bbox):
                    continue
            try:
                geometry = _parse_shape(shape_type, content)
            except struct.error as exc:
                raise ShapefileError(f"Malformed record in shapefile: {self.path}") from exc
            if geometry is None or geometry.is_empty:
                continue
            if window is not None:
                try:
                    if not geometry.intersects(window):
                        continue
                except GEOSException:
                    pass
            yield geometry

    def close(self) -> None:
        """Close the underlying file."""
        self._file.close()

    def __enter__(self) -> ShapefileReader:
        return self

    def __exit__(self, *args) -> None:
        self.close()