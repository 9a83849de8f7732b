"""Per-frame radar scope orchestration.

A RadarScope owns its ScopeStore and a subscription on the event bus. Every
frame it drains the queued add/remove/modify/point-out events into the
store, refreshes datablock text, lays out the datablocks, and runs the
range-conflict and miles-in-trail checks over a consistent snapshot.
"""
from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set, Tuple

import config
from .bus import EventBus
from .crda import CRDAConfig
from .geo import Point2LL, nm_to_ll
from .labels import (
    Formatter, Measurer, default_formatter, monospace_measure,
    update_datablock_text, visible_text,
)
from .layout import LayoutReport, layout_datablocks, leader_line_end
from .math_utils import Vec2, mul, normalize
from .models import (
    Aircraft, AircraftId, AircraftPair, Extent2D, MITResult, RangeConflict,
    RangeLimitsTable, TrafficPicture,
)
from .monitor import AlertMonitor
from .proximity import compute_mit, conflict_pairs, default_range_limits, get_conflicts
from .store import ScopeStore

log = logging.getLogger(__name__)

ALERT_TOPIC = "conflict_alert"

VECTOR_LINE_NM = "nm"
VECTOR_LINE_MINUTES = "minutes"


@dataclass
class ScopeConfig:
    automatic_layout: bool = True
    rotation_angle: float = 0.0
    min_altitude: int = config.MIN_ALTITUDE_FT
    max_altitude: int = config.MAX_ALTITUDE_FT

    draw_range_indicators: bool = True
    range_limits: RangeLimitsTable = field(default_factory=default_range_limits)

    mit_sequence: List[AircraftId] = field(default_factory=list)
    auto_mit: bool = False
    auto_mit_airports: Set[str] = field(default_factory=set)
    airport_locations: Dict[str, Point2LL] = field(default_factory=dict)

    vector_line_mode: str = config.VECTOR_LINE_MODE
    vector_line_extent: float = config.VECTOR_LINE_EXTENT
    tracks_drawn: int = config.RADAR_TRACKS_DRAWN
    datablock_frequency: int = config.DATABLOCK_FREQUENCY_S

    crda: CRDAConfig = field(default_factory=CRDAConfig)


@dataclass
class FrameContext:
    aircraft: Sequence[Aircraft]
    now: float
    projector: object               # window_from_latlong / latlong_from_window
    pane_size: Tuple[float, float] = (config.SCREEN_W, config.SCREEN_H)


@dataclass
class DatablockOutput:
    callsign: AircraftId
    is_ghost: bool
    window_pos: Vec2
    bounds: Extent2D
    offset: Vec2
    text: str
    leader_end: Optional[Vec2]
    vector_end: Optional[Point2LL]
    track_fades: List[Tuple[Point2LL, float]]


@dataclass
class FrameOutput:
    datablocks: Dict[AircraftId, DatablockOutput] = field(default_factory=dict)
    warnings: List[RangeConflict] = field(default_factory=list)
    violations: List[RangeConflict] = field(default_factory=list)
    mit: List[MITResult] = field(default_factory=list)
    alert_fired: bool = False
    layout: LayoutReport = field(default_factory=LayoutReport)


def track_fade_factors(tracks_drawn: int) -> List[float]:
    """Background blend for track history, oldest first (0 <= x <= 0.5)."""
    n = tracks_drawn
    # 1e-6 keeps n == 1 from dividing by zero
    return [(i - 1) / (1e-6 + 2 * (n - 1)) for i in range(n, 0, -1)]


def vector_line_end(ac: Aircraft, mode: str, extent: float) -> Optional[Point2LL]:
    """End point of the aircraft's vector line, or None without a track vector."""
    v = ac.heading_vector()
    if v is None:
        return None
    if mode == VECTOR_LINE_NM:
        return nm_to_ll(mul(normalize(v), extent), ac.position)
    if mode == VECTOR_LINE_MINUTES:
        # ground speed in knots -> nm flown in `extent` minutes
        return nm_to_ll(mul(v, extent / 60.0), ac.position)
    log.warning("unexpected vector line mode: %r", mode)
    return None


class RadarScope:
    def __init__(self, name: str, cfg: Optional[ScopeConfig] = None,
                 bus: Optional[EventBus] = None,
                 formatter: Formatter = default_formatter,
                 measure: Measurer = monospace_measure) -> None:
        self.name = name
        self.config = cfg or ScopeConfig()
        self.bus = bus or EventBus()
        self.formatter = formatter
        self.measure = measure

        self.store = ScopeStore()
        self.alerts = AlertMonitor()
        self.range_warnings: Set[AircraftPair] = set()
        self.events_id: Optional[int] = self.bus.subscribe()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def activate(self, aircraft: Sequence[Aircraft]) -> None:
        """Start tracking all of the currently active aircraft."""
        if self.events_id is None:
            self.events_id = self.bus.subscribe()
        else:
            # starting from scratch; anything queued is already reflected
            self.bus.get(self.events_id)
        if self.config.datablock_frequency <= 0:
            self.config.datablock_frequency = config.DATABLOCK_FREQUENCY_S
        if self.config.tracks_drawn <= 0:
            self.config.tracks_drawn = config.RADAR_TRACKS_DRAWN
        self.store.initialize(aircraft, self.config.crda)
        # callers may restart their clock; a stale last-fired time would mute the alert
        self.alerts = AlertMonitor(self.alerts.cooldown_s)

    def deactivate(self) -> None:
        self.store = ScopeStore()
        if self.events_id is not None:
            self.bus.unsubscribe(self.events_id)
            self.events_id = None

    def duplicate(self, name_as_copy: bool = True) -> "RadarScope":
        name = self.name + " Copy" if name_as_copy else self.name
        dupe = RadarScope(name, copy.deepcopy(self.config), self.bus,
                          self.formatter, self.measure)
        dupe.store = self.store.duplicate()
        dupe.range_warnings = set(self.range_warnings)
        return dupe

    # ------------------------------------------------------------------
    # User interaction
    # ------------------------------------------------------------------

    def drag_datablock(self, ac_id: AircraftId, delta: Vec2) -> None:
        state = self.store.get(ac_id)
        if state is None:
            return
        mx, my = state.manual_offset
        ax, ay = state.automatic_offset
        state.manual_offset = (ax + mx + delta[0], ay + my + delta[1])
        state.automatic_offset = (0.0, 0.0)

    def clear_manual_offset(self, ac_id: AircraftId) -> None:
        state = self.store.get(ac_id)
        if state is not None:
            state.manual_offset = (0.0, 0.0)

    def datablock_at(self, window_p: Vec2, output: FrameOutput) -> Optional[AircraftId]:
        for ac_id in sorted(output.datablocks):
            if output.datablocks[ac_id].bounds.inside(window_p):
                return ac_id
        return None

    # ------------------------------------------------------------------
    # Frame
    # ------------------------------------------------------------------

    def _visible(self, snapshot: TrafficPicture) -> Dict[AircraftId, Aircraft]:
        cfg = self.config
        visible: Dict[AircraftId, Aircraft] = {}
        for ac_id, state in self.store.states.items():
            ac = self.store.ghost_aircraft.get(ac_id) if state.is_ghost else snapshot.get(ac_id)
            if ac is None:
                continue
            if ac.lost_track or ac.altitude_ft < cfg.min_altitude or ac.altitude_ft > cfg.max_altitude:
                continue
            visible[ac_id] = ac
        return visible

    def frame(self, ctx: FrameContext) -> FrameOutput:
        cfg = self.config
        snapshot: TrafficPicture = {ac.callsign: ac for ac in ctx.aircraft}

        # 1) changelist since the previous frame
        if self.events_id is not None:
            self.store.apply(self.bus.get(self.events_id), cfg.crda, ctx.now)

        # 2) visible set and window positions
        visible = self._visible(snapshot)
        window_pos = {ac_id: ctx.projector.window_from_latlong(ac.position)
                      for ac_id, ac in visible.items()}

        # 3) datablocks
        update_datablock_text(self.store, visible, ctx.now, self.formatter, self.measure,
                              tracked=snapshot)
        report = layout_datablocks(self.store, visible, window_pos, ctx.pane_size,
                                   cfg.rotation_angle, cfg.automatic_layout)

        out = FrameOutput(layout=report)

        # 4) range warnings / violations (reset each frame)
        real = [ac for ac_id, ac in visible.items() if not self.store.is_ghost(ac_id)]
        if cfg.draw_range_indicators:
            out.warnings, out.violations = get_conflicts(real, cfg.range_limits)
            out.alert_fired = self.alerts.update(len(out.warnings), len(out.violations), ctx.now)
            if out.alert_fired:
                self.bus.emit(ALERT_TOPIC, self.name, out.violations)
        self.range_warnings = conflict_pairs(out.warnings, out.violations)

        # 5) miles in trail
        real_by_id = {ac.callsign: ac for ac in real}
        out.mit = compute_mit(real_by_id, cfg.mit_sequence, cfg.auto_mit,
                              cfg.auto_mit_airports, cfg.airport_locations,
                              self.range_warnings)

        # 6) per-aircraft outputs for the renderer
        texts = visible_text(self.store, visible, ctx.now, cfg.datablock_frequency)
        fades = track_fade_factors(cfg.tracks_drawn)
        for ac_id, ac in visible.items():
            state = self.store.states[ac_id]
            pw = window_pos[ac_id]
            bounds = state.window_bounds(pw)
            offset = state.manual_offset if state.has_manual_offset() else state.automatic_offset
            positions = (ac.position,) + ac.history
            out.datablocks[ac_id] = DatablockOutput(
                callsign=ac_id,
                is_ghost=state.is_ghost,
                window_pos=pw,
                bounds=bounds,
                offset=offset,
                text=texts[ac_id],
                leader_end=leader_line_end(pw, bounds),
                vector_end=vector_line_end(ac, cfg.vector_line_mode, cfg.vector_line_extent),
                track_fades=[(positions[i - 1], x)
                             for i, x in zip(range(len(fades), 0, -1), fades)
                             if i - 1 < len(positions)],
            )
        return out
