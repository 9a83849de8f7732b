"""Converging runway display aid (CRDA).

Aircraft established on the approach to a source runway are mirrored as
"ghost" aircraft onto the approach of a converging destination runway, so
that a controller can stagger the two arrival streams.
"""
import dataclasses
import math
from dataclasses import dataclass
from typing import Optional, Tuple

import config
from .geo import Point2LL, heading_between, nm_distance, nm_to_ll
from .math_utils import Vec2, heading_difference, wrap_heading
from .models import Aircraft, ghost_id_for


@dataclass
class Runway:
    threshold: Point2LL
    heading: float          # runway heading, degrees


def _rotate(v: Vec2, degrees: float) -> Vec2:
    # headings are clockwise from north, so rotate (east, north) clockwise
    r = math.radians(degrees)
    c, s = math.cos(r), math.sin(r)
    return (v[0] * c + v[1] * s, -v[0] * s + v[1] * c)


@dataclass
class CRDAConfig:
    enabled: bool = False
    source: Optional[Runway] = None
    destination: Optional[Runway] = None
    glideslope_lateral_spread: float = config.CRDA_LATERAL_SPREAD_DEG
    range_nm: float = config.CRDA_RANGE_NM

    def get_runways(self) -> Tuple[Optional[Runway], Optional[Runway]]:
        return self.source, self.destination

    def approach_course(self, rwy: Runway) -> float:
        # Bearing from the threshold out along the final approach course.
        return wrap_heading(rwy.heading + 180 - config.MAGNETIC_VARIATION)

    def get_ghost(self, ac: Aircraft) -> Optional[Aircraft]:
        src, dst = self.get_runways()
        if src is None or dst is None or ac.on_ground:
            return None

        dist = nm_distance(src.threshold, ac.position)
        if dist > self.range_nm:
            return None

        bearing = heading_between(src.threshold, ac.position)
        if heading_difference(bearing, self.approach_course(src)) > self.glideslope_lateral_spread:
            return None

        # Keep the same distance and angular offset from the destination's
        # approach course.
        lateral = wrap_heading(bearing - self.approach_course(src) + 180) - 180
        ghost_bearing = math.radians(self.approach_course(dst) + lateral)
        pos = nm_to_ll((dist * math.sin(ghost_bearing), dist * math.cos(ghost_bearing)),
                       dst.threshold)

        turn = dst.heading - src.heading
        heading = None if ac.heading is None else wrap_heading(ac.heading + turn)
        velocity = None
        if ac.ground_velocity_kt is not None:
            velocity = _rotate(ac.ground_velocity_kt, turn)

        return dataclasses.replace(
            ac,
            callsign=ghost_id_for(ac.callsign),
            position=pos,
            heading=heading,
            ground_velocity_kt=velocity,
            history=(),
        )
