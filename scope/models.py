from dataclasses import dataclass, field
from typing import Optional, Dict, Tuple, FrozenSet
from enum import Enum, auto

from .math_utils import Vec2, add, is_zero
from .geo import extrapolate

AircraftId = str

GHOST_SUFFIX = "~ghost"


def ghost_id_for(source: AircraftId) -> AircraftId:
    return source + GHOST_SUFFIX


class FlightRules(Enum):
    IFR = auto()
    VFR = auto()


class Severity(Enum):
    SAFE = auto()
    CAUTION = auto()
    DANGER = auto()


class ConflictKind(Enum):
    WARNING = auto()
    VIOLATION = auto()


@dataclass(frozen=True)
class Extent2D:
    """Axis-aligned rectangle in window coordinates, p0 = min corner."""
    p0: Vec2 = (0.0, 0.0)
    p1: Vec2 = (0.0, 0.0)

    def offset(self, v: Vec2) -> "Extent2D":
        return Extent2D(add(self.p0, v), add(self.p1, v))

    def expand(self, d: float) -> "Extent2D":
        return Extent2D((self.p0[0] - d, self.p0[1] - d), (self.p1[0] + d, self.p1[1] + d))

    def center(self) -> Vec2:
        return (0.5 * (self.p0[0] + self.p1[0]), 0.5 * (self.p0[1] + self.p1[1]))

    def width(self) -> float:
        return self.p1[0] - self.p0[0]

    def height(self) -> float:
        return self.p1[1] - self.p0[1]

    def inside(self, p: Vec2) -> bool:
        return self.p0[0] <= p[0] <= self.p1[0] and self.p0[1] <= p[1] <= self.p1[1]


def overlaps(a: Extent2D, b: Extent2D) -> bool:
    # Boxes that merely touch along an edge are not overlapping.
    return (a.p0[0] < b.p1[0] and b.p0[0] < a.p1[0]
            and a.p0[1] < b.p1[1] and b.p0[1] < a.p1[1])


@dataclass
class Aircraft:
    # -------------------------------
    # Basic positional state
    # -------------------------------
    callsign: AircraftId
    position: Tuple[float, float]               # (lat, lon) degrees
    altitude_ft: float
    heading: Optional[float] = None             # degrees; None until known
    ground_velocity_kt: Optional[Vec2] = None   # (east, north) knots

    # -------------------------------
    # Flight plan / transponder
    # -------------------------------
    rules: FlightRules = FlightRules.VFR
    destination: Optional[str] = None
    squawk: Optional[str] = None
    lost_track: bool = False
    on_ground: bool = False

    # Older track positions, newest first
    history: Tuple[Tuple[float, float], ...] = ()

    def heading_vector(self) -> Optional[Vec2]:
        """Ground track vector, or None when there is not enough track yet."""
        v = self.ground_velocity_kt
        if v is None or is_zero(v):
            return None
        return v

    def step(self, dt: float):
        """Advance along the ground velocity; keeps a short position history."""
        p = extrapolate(self.position, self.ground_velocity_kt, dt)
        if p is None:
            return
        self.history = (self.position,) + self.history[:9]
        self.position = p


@dataclass
class ScopeState:
    is_ghost: bool = False

    automatic_offset: Vec2 = (0.0, 0.0)
    manual_offset: Vec2 = (0.0, 0.0)
    datablock_text: Tuple[str, str] = ("", "")
    text_dirty: bool = True
    # w.r.t. the upper-left corner: p0 = (0, -h), p1 = (w, 0)
    datablock_bounds: Extent2D = field(default_factory=Extent2D)

    def has_manual_offset(self) -> bool:
        return not is_zero(self.manual_offset)

    def window_bounds(self, p: Vec2) -> Extent2D:
        """Datablock bounds for a track drawn at window position p."""
        db = self.datablock_bounds.offset(p)
        if self.has_manual_offset():
            return db.offset(self.manual_offset)
        return db.offset(self.automatic_offset)


@dataclass(frozen=True)
class RangeLimits:
    warning_lateral_nm: float
    warning_vertical_ft: float
    violation_lateral_nm: float
    violation_vertical_ft: float

    def strictness_key(self):
        return (self.violation_lateral_nm, self.violation_vertical_ft,
                self.warning_lateral_nm, self.warning_vertical_ft)


RangeLimitsTable = Dict[FlightRules, RangeLimits]

AircraftPair = FrozenSet[AircraftId]


def aircraft_pair(a: AircraftId, b: AircraftId) -> AircraftPair:
    return frozenset((a, b))


@dataclass
class RangeConflict:
    kind: ConflictKind
    aircraft: Tuple[AircraftId, AircraftId]
    lateral_nm: float
    vertical_ft: float
    limits: RangeLimits

    @property
    def pair(self) -> AircraftPair:
        return aircraft_pair(*self.aircraft)


@dataclass
class MITResult:
    leading: AircraftId
    trailing: AircraftId
    distance_nm: float
    projected_nm: Optional[float]
    severity: Severity

    def label(self) -> str:
        if self.projected_nm is None:
            return f"{self.distance_nm:.1f} nm"
        return f"{self.distance_nm:.1f} ({self.projected_nm:.1f}) nm"


# -------------------------------
# Changelist events
# -------------------------------

@dataclass
class AddedAircraftEvent:
    aircraft: Aircraft


@dataclass
class RemovedAircraftEvent:
    callsign: AircraftId


@dataclass
class ModifiedAircraftEvent:
    aircraft: Aircraft


@dataclass
class PointOutEvent:
    callsign: AircraftId
    controller: str


TrafficPicture = Dict[AircraftId, Aircraft]
