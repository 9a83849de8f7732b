"""Lat/long <-> window transforms for a scope.

The engine itself only needs an object with `window_from_latlong` and
`latlong_from_window`; this is the simple equirectangular one the app uses.
Window coordinates have their origin at the lower-left of the pane, y up.
"""
import math
from dataclasses import dataclass
from typing import Tuple

from .geo import Point2LL, ll_to_nm, nm_to_ll
from .math_utils import Vec2


@dataclass
class ScopeTransform:
    center: Point2LL
    range_nm: float
    rotation: float = 0.0
    width: float = 800.0
    height: float = 800.0

    def pixel_distance_nm(self) -> float:
        """Nautical miles covered by one window unit."""
        return 2.0 * self.range_nm / min(self.width, self.height)

    def _rotate(self, v: Vec2, degrees: float) -> Vec2:
        r = math.radians(degrees)
        c, s = math.cos(r), math.sin(r)
        return (v[0] * c - v[1] * s, v[0] * s + v[1] * c)

    def window_from_latlong(self, p: Point2LL) -> Vec2:
        east, north = ll_to_nm(p, self.center)
        # positive rotation turns the map clockwise, as headings + rotation do in layout
        x, y = self._rotate((east, north), -self.rotation)
        scale = 1.0 / self.pixel_distance_nm()
        return (self.width / 2 + x * scale, self.height / 2 + y * scale)

    def latlong_from_window(self, p: Vec2) -> Point2LL:
        scale = self.pixel_distance_nm()
        x = (p[0] - self.width / 2) * scale
        y = (p[1] - self.height / 2) * scale
        east, north = self._rotate((x, y), self.rotation)
        return nm_to_ll((east, north), self.center)

    def pane_size(self) -> Tuple[float, float]:
        return (self.width, self.height)
