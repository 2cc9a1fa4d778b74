"""Great-circle distance from a reported position to a fixed reference point."""

from __future__ import annotations

import logging
import math
from typing import NamedTuple, Optional

log = logging.getLogger(__name__)

EARTH_RADIUS_NM: float = 3440.065


class GeoPoint(NamedTuple):
    lat: float
    lon: float


class Distance(NamedTuple):
    distance_nm: Optional[float]
    display: Optional[str]


# Approximate centre of the Gaza coast
GAZA = GeoPoint(31.5, 34.45)

NO_DISTANCE = Distance(None, None)


def haversine_nm(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in nautical miles between two WGS-84 coordinates."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlam = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlam / 2) ** 2
    return EARTH_RADIUS_NM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def parse_position(position: str | None) -> GeoPoint | None:
    """Read ``"lat, lon"``; return None unless exactly two finite numbers."""
    if not isinstance(position, str) or not position.strip():
        return None
    parts = position.split(",")
    if len(parts) != 2:
        return None
    try:
        lat, lon = (float(p.strip()) for p in parts)
    except ValueError:
        return None
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return None
    return GeoPoint(lat, lon)


def distance_to(position: str | None, reference: GeoPoint = GAZA) -> Distance:
    point = parse_position(position)
    if point is None:
        if position:
            log.warning("unreadable position %r, distance left empty", position)
        return NO_DISTANCE
    nm = round(haversine_nm(point.lat, point.lon, reference.lat, reference.lon), 1)
    return Distance(nm, f"{nm:.1f} nm")
