"""Geodesics on the WGS84 ellipsoid and the azimuthal equidistant projection."""

from __future__ import annotations

import math
from dataclasses import dataclass
from numbers import Real

from shapely.geometry.base import BaseGeometry
from shapely.ops import transform

WGS84_A = 6378137.0
WGS84_F = 1.0 / 298.257223563
WGS84_B = WGS84_A * (1.0 - WGS84_F)
MEAN_RADIUS_M = 6371008.8

_EP2 = (WGS84_A**2 - WGS84_B**2) / WGS84_B**2
_MAX_ITER = 200
_TOL = 1e-12


class _NoConvergence(Exception):
    """The iterative inverse solution did not converge."""


def _normalize_deg(angle: float) -> float:
    return math.remainder(angle, 360.0)


def _reduced_latitude(lat_rad: float) -> tuple[float, float]:
    u = math.atan2((1.0 - WGS84_F) * math.sin(lat_rad), math.cos(lat_rad))
    return math.sin(u), math.cos(u)


def _series(cos_sq_alpha: float) -> tuple[float, float]:
    u2 = cos_sq_alpha * _EP2
    a_coef = 1.0 + u2 / 16384.0 * (4096.0 + u2 * (-768.0 + u2 * (320.0 - 175.0 * u2)))
    b_coef = u2 / 1024.0 * (256.0 + u2 * (-128.0 + u2 * (74.0 - 47.0 * u2)))
    return a_coef, b_coef


def _delta_sigma(b_coef: float, sin_s: float, cos_s: float, cos_2sm: float) -> float:
    return b_coef * sin_s * (
        cos_2sm
        + b_coef
        / 4.0
        * (
            cos_s * (-1.0 + 2.0 * cos_2sm**2)
            - b_coef / 6.0 * cos_2sm * (-3.0 + 4.0 * sin_s**2) * (-3.0 + 4.0 * cos_2sm**2)
        )
    )


def _vincenty_inverse(lat1: float, lon1: float, lat2: float, lon2: float) -> tuple[float, float, float]:
    f = WGS84_F
    big_l = math.remainder(math.radians(lon2 - lon1), 2.0 * math.pi)
    sin_u1, cos_u1 = _reduced_latitude(math.radians(lat1))
    sin_u2, cos_u2 = _reduced_latitude(math.radians(lat2))

    lam = big_l
    for _ in range(_MAX_ITER):
        sin_lam, cos_lam = math.sin(lam), math.cos(lam)
        sin_sigma = math.hypot(
            cos_u2 * sin_lam, cos_u1 * sin_u2 - sin_u1 * cos_u2 * cos_lam
        )
        if sin_sigma == 0.0:
            return 0.0, 0.0, 0.0
        cos_sigma = sin_u1 * sin_u2 + cos_u1 * cos_u2 * cos_lam
        sigma = math.atan2(sin_sigma, cos_sigma)
        sin_alpha = cos_u1 * cos_u2 * sin_lam / sin_sigma
        cos_sq_alpha = 1.0 - sin_alpha**2
        cos_2sm = cos_sigma - 2.0 * sin_u1 * sin_u2 / cos_sq_alpha if cos_sq_alpha != 0.0 else 0.0
        c = f / 16.0 * cos_sq_alpha * (4.0 + f * (4.0 - 3.0 * cos_sq_alpha))
        previous = lam
        lam = big_l + (1.0 - c) * f * sin_alpha * (
            sigma + c * sin_sigma * (cos_2sm + c * cos_sigma * (-1.0 + 2.0 * cos_2sm**2))
        )
        if abs(lam) > math.pi:
            raise _NoConvergence
        if abs(lam - previous) < _TOL:
            break
    else:
        raise _NoConvergence

    a_coef, b_coef = _series(cos_sq_alpha)
    distance = WGS84_B * a_coef * (sigma - _delta_sigma(b_coef, sin_sigma, cos_sigma, cos_2sm))
    sin_lam, cos_lam = math.sin(lam), math.cos(lam)
    azi1 = math.atan2(cos_u2 * sin_lam, cos_u1 * sin_u2 - sin_u1 * cos_u2 * cos_lam)
    azi2 = math.atan2(cos_u1 * sin_lam, -sin_u1 * cos_u2 + cos_u1 * sin_u2 * cos_lam)
    return distance, math.degrees(azi1), math.degrees(azi2)


def _spherical_inverse(lat1: float, lon1: float, lat2: float, lon2: float) -> tuple[float, float, float]:
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dlam = math.radians(lon2 - lon1)
    hav = math.sin((phi2 - phi1) / 2.0) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlam / 2.0) ** 2
    central = 2.0 * math.asin(min(1.0, math.sqrt(hav)))
    azi1 = math.atan2(
        math.sin(dlam) * math.cos(phi2),
        math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(dlam),
    )
    azi2 = math.atan2(
        math.sin(dlam) * math.cos(phi1),
        math.sin(phi2) * math.cos(phi1) * math.cos(dlam) - math.cos(phi2) * math.sin(phi1),
    )
    return central * MEAN_RADIUS_M, math.degrees(azi1), math.degrees(azi2)


def geodesic_inverse(lat1: float, lon1: float, lat2: float, lon2: float) -> tuple[float, float, float]:
    """Return (distance in metres, initial azimuth, final azimuth) between two points.

    Nearly antipodal pairs, where the ellipsoidal iteration does not
    converge, fall back to a great circle on the mean-radius sphere.
    """
    try:
        return _vincenty_inverse(lat1, lon1, lat2, lon2)
    except _NoConvergence:
        return _spherical_inverse(lat1, lon1, lat2, lon2)


def geodesic_direct(lat1: float, lon1: float, azi1: float, distance: float) -> tuple[float, float, float]:
    """Return (latitude, longitude, final azimuth) reached from a start point."""
    f = WGS84_F
    alpha1 = math.radians(azi1)
    sin_a1, cos_a1 = math.sin(alpha1), math.cos(alpha1)
    sin_u1, cos_u1 = _reduced_latitude(math.radians(lat1))

    sigma1 = math.atan2(sin_u1, cos_u1 * cos_a1)
    sin_alpha = cos_u1 * sin_a1
    cos_sq_alpha = 1.0 - sin_alpha**2
    a_coef, b_coef = _series(cos_sq_alpha)

    base = distance / (WGS84_B * a_coef)
    sigma = base
    for _ in range(_MAX_ITER):
        cos_2sm = math.cos(2.0 * sigma1 + sigma)
        sin_s, cos_s = math.sin(sigma), math.cos(sigma)
        updated = base + _delta_sigma(b_coef, sin_s, cos_s, cos_2sm)
        if abs(updated - sigma) < _TOL:
            sigma = updated
            break
        sigma = updated
    cos_2sm = math.cos(2.0 * sigma1 + sigma)
    sin_s, cos_s = math.sin(sigma), math.cos(sigma)

    tmp = sin_u1 * sin_s - cos_u1 * cos_s * cos_a1
    lat2 = math.atan2(
        sin_u1 * cos_s + cos_u1 * sin_s * cos_a1,
        (1.0 - f) * math.hypot(sin_alpha, tmp),
    )
    lam = math.atan2(sin_s * sin_a1, cos_u1 * cos_s - sin_u1 * sin_s * cos_a1)
    c = f / 16.0 * cos_sq_alpha * (4.0 + f * (4.0 - 3.0 * cos_sq_alpha))
    big_l = lam - (1.0 - c) * f * sin_alpha * (
        sigma + c * sin_s * (cos_2sm + c * cos_s * (-1.0 + 2.0 * cos_2sm**2))
    )
    azi2 = math.atan2(sin_alpha, -tmp)
    lon2 = _normalize_deg(lon1 + math.degrees(big_l))
    return math.degrees(lat2), lon2, math.degrees(azi2)


@dataclass(frozen=True)
class AzimuthalEquidistant:
    """Azimuthal equidistant projection on WGS84, centred on a point.

    Projected coordinates are metres east (x) and north (y); the distance
    of any projected point from the origin is its geodesic distance from
    the centre.
    """

    lat_0: float
    lon_0: float

    def forward(self, lat: float, lon: float) -> tuple[float, float]:
        """Project a latitude/longitude to (x, y) metres."""
        distance, azimuth, _ = geodesic_inverse(self.lat_0, self.lon_0, lat, lon)
        theta = math.radians(azimuth)
        return distance * math.sin(theta), distance * math.cos(theta)

    def inverse(self, x: float, y: float) -> tuple[float, float]:
        """Map projected (x, y) metres back to (latitude, longitude)."""
        distance = math.hypot(x, y)
        if distance == 0.0:
            return self.lat_0, self.lon_0
        azimuth = math.degrees(math.atan2(x, y))
        lat, lon, _ = geodesic_direct(self.lat_0, self.lon_0, azimuth, distance)
        return lat, lon

    def _project(self, x, y, z=None):
        if isinstance(x, Real):
            return self.forward(float(y), float(x))
        pairs = [self.forward(float(lat), float(lon)) for lon, lat in zip(x, y)]
        return tuple(p[0] for p in pairs), tuple(p[1] for p in pairs)

    def transform_geometry(self, geometry: BaseGeometry) -> BaseGeometry:
        """Project a geometry given in longitude/latitude order."""
        return transform(self._project, geometry)