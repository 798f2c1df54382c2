"""Alternative distance metrics and unit conversion."""

from __future__ import annotations

import math

from .geodesy import MEAN_RADIUS_M, WGS84_A, WGS84_F

_E2 = WGS84_F * (2.0 - WGS84_F)
_MERCATOR_EPS = 1e-12

_UNIT_METERS = {"m": 1.0, "km": 1000.0, "nm": 1852.0}


def wrap_pi(x: float) -> float:
    """Bring an angle in radians into the range [-pi, pi]."""
    while x > math.pi:
        x -= 2.0 * math.pi
    while x < -math.pi:
        x += 2.0 * math.pi
    return x


def _ecef(lat_deg: float, lon_deg: float) -> tuple[float, float, float]:
    lat = math.radians(lat_deg)
    lon = math.radians(lon_deg)
    sin_lat, cos_lat = math.sin(lat), math.cos(lat)
    n = WGS84_A / math.sqrt(1.0 - _E2 * sin_lat * sin_lat)
    return (
        n * cos_lat * math.cos(lon),
        n * cos_lat * math.sin(lon),
        n * (1.0 - _E2) * sin_lat,
    )


def chord_distance_wgs84_m(
    lat1_deg: float, lon1_deg: float, lat2_deg: float, lon2_deg: float
) -> float:
    """Return the straight-line distance in metres between two points on WGS84."""
    return math.dist(_ecef(lat1_deg, lon1_deg), _ecef(lat2_deg, lon2_deg))


def _mercator(phi: float) -> float:
    limit = math.pi / 2.0 - _MERCATOR_EPS
    clamped = max(min(phi, limit), -limit)
    return math.log(math.tan(math.pi / 4.0 + clamped / 2.0))


def rhumb_distance_sphere_m(
    lat1_deg: float, lon1_deg: float, lat2_deg: float, lon2_deg: float
) -> float:
    """Return the rhumb-line distance in metres on the mean-radius sphere."""
    phi1 = math.radians(lat1_deg)
    phi2 = math.radians(lat2_deg)
    dphi = phi2 - phi1
    dlam = wrap_pi(math.radians(lon2_deg) - math.radians(lon1_deg))

    dpsi = _mercator(phi2) - _mercator(phi1)
    q = dphi / dpsi if abs(dpsi) > _MERCATOR_EPS else math.cos(phi1)
    return math.hypot(dphi, q * dlam) * MEAN_RADIUS_M


def convert_units(meters: float, units: str) -> float:
    """Convert metres to ``m``, ``km`` or ``nm`` (nautical miles), case-insensitively."""
    try:
        factor = _UNIT_METERS[units.lower()]
    except KeyError:
        raise ValueError(f"Unknown units: {units}") from None
    return meters / factor