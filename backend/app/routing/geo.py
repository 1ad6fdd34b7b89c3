"""Great-circle distance helpers."""

import math
from collections.abc import Sequence

from backend.app.models.common import Geo

# Mean Earth radius (IUGG), meters
EARTH_RADIUS_M = 6_371_008.8


def haversine_m(a: Geo, b: Geo) -> float:
    """Haversine distance between two WGS84 points in meters."""
    phi1, phi2 = math.radians(a.lat), math.radians(b.lat)
    dphi = math.radians(b.lat - a.lat)
    dlam = math.radians(b.lon - a.lon)
    h = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlam / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(h)))


def path_length_m(points: Sequence[Geo]) -> float:
    """Sum of straight-line distances along consecutive points."""
    return sum(haversine_m(points[i], points[i + 1]) for i in range(len(points) - 1))
