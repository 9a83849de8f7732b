"""Datablock text and bounds.

Formatting and font metrics belong to the host application; this module
only needs a formatter `(aircraft, duplicate_squawk, phase) -> str` and a
measurer `(text) -> (width, height)`. Defaults are provided so the scope
works standalone with a monospace font.
"""
from collections import Counter
from typing import Callable, Dict, Iterable, Optional, Tuple

import config
from .models import Aircraft, AircraftId, Extent2D
from .store import ScopeStore

Formatter = Callable[[Aircraft, bool, int], str]
Measurer = Callable[[str], Tuple[float, float]]

POINT_OUT_MARK = "!"


def default_formatter(ac: Aircraft, duplicate_squawk: bool, phase: int) -> str:
    """Two alternating phases: altitude/speed, then destination/squawk."""
    if phase == 0:
        alt = int(round(ac.altitude_ft / 100.0))
        speed = ""
        v = ac.heading_vector()
        if v is not None:
            gs = (v[0] ** 2 + v[1] ** 2) ** 0.5
            speed = f" {int(round(gs / 10.0)):02d}"
        return f"{ac.callsign}\n{alt:03d}{speed}"

    squawk = ac.squawk or "----"
    if duplicate_squawk:
        squawk += "*"
    return f"{ac.callsign}\n{ac.destination or '----'} {squawk}"


def monospace_measure(text: str) -> Tuple[float, float]:
    lines = text.split("\n")
    width = max(len(line) for line in lines) * config.CHAR_W
    height = len(lines) * config.LINE_H
    return float(width), float(height)


def flash_phase(now: float, frequency: int) -> int:
    """Which of the two datablock texts is shown at time `now`."""
    if frequency <= 0:
        frequency = config.DATABLOCK_FREQUENCY_S
    second = int(now) % 60
    return (second // frequency) & 1


def update_datablock_text(store: ScopeStore,
                          visible: Dict[AircraftId, Aircraft],
                          now: float,
                          formatter: Formatter = default_formatter,
                          measure: Measurer = monospace_measure,
                          tracked: Optional[Dict[AircraftId, Aircraft]] = None) -> None:
    """Refresh text and bounds for every visible aircraft with stale text.

    Duplicate squawks are counted over `tracked` (every aircraft the scope
    knows about, filtered or not); it defaults to `visible`.
    """
    if tracked is None:
        tracked = visible
    squawk_count = Counter(
        tracked[ac_id].squawk
        for ac_id, state in store.states.items()
        if not state.is_ghost and ac_id in tracked
    )

    for ac_id, ac in visible.items():
        state = store.get(ac_id)
        if state is None or not state.text_dirty:
            continue

        suffix = ""
        controller = store.pointed_out.get(ac_id, now)
        if controller:
            suffix = "\n" + POINT_OUT_MARK + controller

        dup = ac.squawk is not None and squawk_count[ac.squawk] != 1
        texts = tuple(formatter(ac, dup, phase) + suffix for phase in (0, 1))
        state.datablock_text = texts
        state.text_dirty = False

        sizes = [measure(t) for t in texts]
        bx = max(s[0] for s in sizes)
        by = max(s[1] for s in sizes)
        state.datablock_bounds = Extent2D(p0=(0.0, -by), p1=(bx, 0.0))


def visible_text(store: ScopeStore, ids: Iterable[AircraftId], now: float,
                 frequency: int) -> Dict[AircraftId, str]:
    phase = flash_phase(now, frequency)
    return {ac_id: store.states[ac_id].datablock_text[phase]
            for ac_id in ids if ac_id in store.states}
