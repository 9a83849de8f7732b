"""Datablock layout.

Each visible aircraft gets a window-space offset for its datablock. With
automatic layout off, the offset depends only on the aircraft's own heading.
With it on, datablocks are placed in four passes:

  1. datablocks with a manual offset are pinned where the user put them;
  2. everyone whose ideal (heading based) spot is free of pinned/placed
     datablocks takes it;
  3. the rest are pushed apart for a bounded number of iterations, each
     overlapping neighbour repelling along the line between box centers
     (Fruchterman and Reingold 91, ish);
  4. finally the pushed datablocks are pulled back toward their ideal spot
     one unit at a time, as long as that doesn't create an overlap.

Residual overlap after step 3 is accepted; the returned LayoutReport says
whether the final layout is fully settled.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple

import config
from .math_utils import (
    Vec2, add, clamp_length, is_zero, mul, norm, normalize, sub, wrap_heading,
)
from .models import Aircraft, AircraftId, Extent2D, ScopeState, overlaps
from .store import ScopeStore

log = logging.getLogger(__name__)


@dataclass
class LayoutReport:
    placed: List[AircraftId] = field(default_factory=list)
    laid_out: List[AircraftId] = field(default_factory=list)
    settled: bool = True
    residual_overlaps: int = 0


# Sector table: (upper bound of shifted heading, anchor, is_corner).
# Anchors are ("min"|"mid", "min"|"mid"|"max") picks of the padded box along
# x and y. The right-hand side is never used: the text there is ragged and
# the bounds have slop.
_ANCHOR_SECTORS = (
    (30.0,  ("min", "mid"), False),   # northbound (30 deg slice)
    (90.0,  ("min", "max"), True),    # NE (60 deg slice)
    (120.0, ("mid", "max"), False),   # E (30 deg slice)
    (180.0, ("min", "min"), True),    # SE (60 deg slice)
    (210.0, ("min", "mid"), False),   # S (30 deg slice)
    (270.0, ("min", "max"), True),    # SW (60 deg slice)
    (300.0, ("mid", "min"), False),   # W (30 deg slice)
    (360.0, ("min", "min"), True),    # NW (60 deg slice)
)


def _pick(lo: float, hi: float, which: str) -> float:
    if which == "min":
        return lo
    if which == "max":
        return hi
    return 0.5 * (lo + hi)


def datablock_connect_point(bbox: Extent2D, heading: float) -> Tuple[Vec2, bool]:
    """Point on the datablock edge that should sit closest to the track.

    Returns the point and whether it is a corner (as opposed to an edge
    midpoint).
    """
    # shifting by 15 degrees lets every slice start at a multiple of 30
    h = wrap_heading(heading + 15)
    for upper, (ax, ay), is_corner in _ANCHOR_SECTORS:
        if h < upper:
            break
    p = (_pick(bbox.p0[0], bbox.p1[0], ax), _pick(bbox.p0[1], bbox.p1[1], ay))
    return p, is_corner


def ideal_offset(state: ScopeState, heading: Optional[float], rotation: float) -> Vec2:
    """Offset that puts the padded anchor point right at the track."""
    bbox = state.datablock_bounds.expand(config.DATABLOCK_PADDING)
    # We want the heading w.r.t. the window
    p_connect, is_corner = datablock_connect_point(bbox, (heading or 0.0) + rotation)
    v = mul(p_connect, -1)
    if not is_corner:
        # edge midpoint, so add a little more slop
        v = add(v, mul(normalize(v), config.EDGE_ANCHOR_NUDGE))
    return v


def layout_self_only(store: ScopeStore, visible: Mapping[AircraftId, Aircraft],
                     rotation: float) -> LayoutReport:
    """Lay out each datablock w.r.t. its own track only."""
    report = LayoutReport()
    for ac_id in sorted(visible):
        state = store.get(ac_id)
        if state is None:
            continue
        report.laid_out.append(ac_id)
        if state.has_manual_offset():
            state.automatic_offset = (0.0, 0.0)
            continue
        state.automatic_offset = ideal_offset(state, visible[ac_id].heading, rotation)
    return report


def _on_screen(p: Vec2, pane_size: Tuple[float, float]) -> bool:
    m = config.ONSCREEN_MARGIN
    width, height = pane_size
    return -m < p[0] < width + m and -m < p[1] < height + m


def layout_automatic(store: ScopeStore, visible: Mapping[AircraftId, Aircraft],
                     window_pos: Mapping[AircraftId, Vec2],
                     pane_size: Tuple[float, float], rotation: float) -> LayoutReport:
    pad = config.DATABLOCK_PADDING

    # Sort by callsign so our iteration order is consistent
    ids = sorted(ac_id for ac_id in visible
                 if ac_id in store and _on_screen(window_pos[ac_id], pane_size))
    order = {ac_id: i for i, ac_id in enumerate(ids)}
    states = {ac_id: store.states[ac_id] for ac_id in ids}
    ideal = {ac_id: ideal_offset(states[ac_id], visible[ac_id].heading, rotation)
             for ac_id in ids}

    bounds: Dict[AircraftId, Extent2D] = {}
    placed: List[AircraftId] = []

    # First pass: anyone who has a manual offset goes where they go, period.
    for ac_id in ids:
        state = states[ac_id]
        if state.has_manual_offset():
            bounds[ac_id] = state.window_bounds(window_pos[ac_id]).expand(pad)
            placed.append(ac_id)

    # Second pass: anyone who can be placed without interfering with
    # already-placed ones gets to be in their happy place.
    for ac_id in ids:
        if ac_id in bounds:
            continue
        state = states[ac_id]
        db = state.datablock_bounds.offset(window_pos[ac_id]).offset(ideal[ac_id]).expand(pad)
        if not any(overlaps(db, bounds[other]) for other in placed):
            state.automatic_offset = ideal[ac_id]
            bounds[ac_id] = db
            placed.append(ac_id)

    unplaced = [ac_id for ac_id in ids if ac_id not in bounds]

    # Third pass: the tricky ones start from last frame's offset, or the
    # ideal if this is the first time we've seen them.
    for ac_id in unplaced:
        state = states[ac_id]
        if is_zero(state.automatic_offset):
            state.automatic_offset = ideal[ac_id]
        bounds[ac_id] = state.window_bounds(window_pos[ac_id]).expand(pad)

    _relax(unplaced, ids, order, states, bounds)
    _attract(unplaced, ids, states, bounds, ideal)

    residual = sum(1 for i, a in enumerate(ids) for b in ids[i + 1:]
                   if overlaps(bounds[a], bounds[b]))
    if residual:
        log.debug("datablock layout left %d overlapping pairs", residual)

    return LayoutReport(placed=placed, laid_out=ids, settled=residual == 0,
                        residual_overlaps=residual)


def _relax(unplaced, ids, order, states, bounds) -> None:
    """Repel overlapping datablocks for a fixed number of iterations."""
    if not unplaced:
        return
    for _ in range(config.RELAXATION_ITERATIONS):
        for ac_id in unplaced:
            db = bounds[ac_id]
            force = (0.0, 0.0)
            for other in ids:
                if other == ac_id or not overlaps(db, bounds[other]):
                    continue
                direction = normalize(sub(db.center(), bounds[other].center()))
                if is_zero(direction):
                    # coincident centers: split them along x
                    direction = (1.0, 0.0) if order[ac_id] > order[other] else (-1.0, 0.0)
                force = add(force, direction)

            force = clamp_length(mul(force, config.RELAXATION_GAIN), config.RELAXATION_MAX_STEP)
            state = states[ac_id]
            state.automatic_offset = add(state.automatic_offset, force)
            bounds[ac_id] = db.offset(force)


def _attract(unplaced, ids, states, bounds, ideal) -> None:
    """Pull datablocks back toward their ideal offsets while that stays clear."""
    while True:
        any_moved = False
        for ac_id in unplaced:
            state = states[ac_id]
            go_back = sub(ideal[ac_id], state.automatic_offset)
            if norm(go_back) < config.ATTRACTION_MIN_DISTANCE:
                continue
            step = normalize(go_back)
            moved = bounds[ac_id].offset(step)
            if any(other != ac_id and overlaps(moved, bounds[other]) for other in ids):
                continue
            any_moved = True
            bounds[ac_id] = moved
            state.automatic_offset = add(state.automatic_offset, step)
        if not any_moved:
            break


def layout_datablocks(store: ScopeStore, visible: Mapping[AircraftId, Aircraft],
                      window_pos: Mapping[AircraftId, Vec2],
                      pane_size: Tuple[float, float], rotation: float,
                      automatic: bool) -> LayoutReport:
    if not automatic:
        return layout_self_only(store, visible, rotation)
    return layout_automatic(store, visible, window_pos, pane_size, rotation)


def _quantized_clamp(x: float, a: float, b: float) -> float:
    if x < a:
        return a
    if x > b:
        return b
    return 0.5 * (a + b)


def leader_line_end(track: Vec2, box: Extent2D) -> Optional[Vec2]:
    """Where the leader line from the track meets the datablock.

    None when the track sits inside the datablock.
    """
    if track[1] < box.p0[1]:
        return (_quantized_clamp(track[0], box.p0[0], box.p1[0]), box.p0[1])
    if track[1] > box.p1[1]:
        return (_quantized_clamp(track[0], box.p0[0], box.p1[0]), box.p1[1])
    if track[0] < box.p0[0]:
        return (box.p0[0], _quantized_clamp(track[1], box.p0[1], box.p1[1]))
    if track[0] > box.p1[0]:
        return (box.p1[0], _quantized_clamp(track[1], box.p0[1], box.p1[1]))
    return None
