"""Planar lat/long helpers.

Positions are (lat, lon) in degrees. Distances use the equirectangular
approximation around the mean latitude of the two points, which is plenty
for the few tens of nautical miles a scope covers.
"""
import math
from typing import Optional, Tuple

import config
from .math_utils import Vec2, wrap_heading

Point2LL = Tuple[float, float]


def nm_per_longitude(lat_deg: float) -> float:
    return config.NM_PER_LATITUDE * math.cos(math.radians(lat_deg))


def ll_to_nm(p: Point2LL, origin: Point2LL) -> Vec2:
    """(east, north) offset of p from origin, in nm."""
    mid_lat = 0.5 * (p[0] + origin[0])
    return (
        (p[1] - origin[1]) * nm_per_longitude(mid_lat),
        (p[0] - origin[0]) * config.NM_PER_LATITUDE,
    )


def nm_to_ll(v_nm: Vec2, origin: Point2LL) -> Point2LL:
    """Point v_nm = (east, north) nm away from origin."""
    lat = origin[0] + v_nm[1] / config.NM_PER_LATITUDE
    nm_lon = nm_per_longitude(0.5 * (lat + origin[0]))
    if abs(nm_lon) < 1e-9:
        return (lat, origin[1])
    return (lat, origin[1] + v_nm[0] / nm_lon)


def nm_distance(a: Point2LL, b: Point2LL) -> float:
    dx, dy = ll_to_nm(b, a)
    return math.hypot(dx, dy)


def heading_between(a: Point2LL, b: Point2LL,
                    magnetic_variation: float = config.MAGNETIC_VARIATION) -> float:
    """Heading from a to b in degrees, corrected by magnetic variation."""
    dx, dy = ll_to_nm(b, a)
    return wrap_heading(math.degrees(math.atan2(dx, dy)) - magnetic_variation)


def extrapolate(p: Point2LL, velocity_kt: Optional[Vec2], seconds: float) -> Optional[Point2LL]:
    """Position after flying the ground velocity for `seconds`."""
    if velocity_kt is None:
        return None
    hours = seconds / 3600.0
    return nm_to_ll((velocity_kt[0] * hours, velocity_kt[1] * hours), p)


def estimated_future_distance(p0: Point2LL, v0: Optional[Vec2],
                              p1: Point2LL, v1: Optional[Vec2],
                              seconds: float) -> Optional[float]:
    a = extrapolate(p0, v0, seconds)
    b = extrapolate(p1, v1, seconds)
    if a is None or b is None:
        return None
    return nm_distance(a, b)
