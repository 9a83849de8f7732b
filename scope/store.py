"""Per-display aircraft scope state.

The store owns one ScopeState per tracked aircraft id, plus the ghost link
table for CRDA ghosts. All mutation goes through `apply`, which takes the
changelist drained from the event bus since the previous frame.
"""
import copy
import logging
from typing import Dict, Generic, Iterable, Optional, Tuple, TypeVar

import config
from .models import (
    AddedAircraftEvent, Aircraft, AircraftId, ModifiedAircraftEvent,
    PointOutEvent, RemovedAircraftEvent, ScopeState,
)

log = logging.getLogger(__name__)

K = TypeVar("K")
V = TypeVar("V")


class TransientMap(Generic[K, V]):
    """Map whose entries expire a fixed time after they are added."""

    def __init__(self) -> None:
        self._entries: Dict[K, Tuple[V, float]] = {}

    def add(self, key: K, value: V, now: float, duration_s: float) -> None:
        self._entries[key] = (value, now + duration_s)

    def get(self, key: K, now: float) -> Optional[V]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expiry = entry
        if now >= expiry:
            del self._entries[key]
            return None
        return value

    def __len__(self) -> int:
        return len(self._entries)


class ScopeStore:
    def __init__(self) -> None:
        self.states: Dict[AircraftId, ScopeState] = {}
        # source id -> ghost id
        self.ghost_links: Dict[AircraftId, AircraftId] = {}
        # ghost id -> synthetic aircraft
        self.ghost_aircraft: Dict[AircraftId, Aircraft] = {}
        self.pointed_out: TransientMap[AircraftId, str] = TransientMap()

    def __contains__(self, ac_id: AircraftId) -> bool:
        return ac_id in self.states

    def __len__(self) -> int:
        return len(self.states)

    def get(self, ac_id: AircraftId) -> Optional[ScopeState]:
        return self.states.get(ac_id)

    def initialize(self, aircraft: Iterable[Aircraft], crda=None) -> None:
        """Reset and start tracking every aircraft in `aircraft`."""
        self.states = {}
        self.ghost_links = {}
        self.ghost_aircraft = {}
        for ac in aircraft:
            self.states[ac.callsign] = ScopeState()
            self._add_ghost(ac, crda)

    # ------------------------------------------------------------------
    # Ghosts
    # ------------------------------------------------------------------

    def _add_ghost(self, ac: Aircraft, crda) -> None:
        if crda is None or not crda.enabled:
            return
        ghost = crda.get_ghost(ac)
        if ghost is None:
            return
        self.ghost_links[ac.callsign] = ghost.callsign
        self.ghost_aircraft[ghost.callsign] = ghost
        self.states[ghost.callsign] = ScopeState(is_ghost=True)

    def _remove_ghost(self, source: AircraftId) -> None:
        ghost_id = self.ghost_links.pop(source, None)
        if ghost_id is not None:
            self.states.pop(ghost_id, None)
            self.ghost_aircraft.pop(ghost_id, None)

    def is_ghost(self, ac_id: AircraftId) -> bool:
        state = self.states.get(ac_id)
        return state is not None and state.is_ghost

    # ------------------------------------------------------------------
    # Changelist
    # ------------------------------------------------------------------

    def apply(self, events: Iterable, crda=None, now: float = 0.0) -> None:
        """Apply add / remove / modify / point-out events in delivery order."""
        for event in events:
            if isinstance(event, AddedAircraftEvent):
                self.states[event.aircraft.callsign] = ScopeState()
                self._add_ghost(event.aircraft, crda)

            elif isinstance(event, RemovedAircraftEvent):
                self._remove_ghost(event.callsign)
                self.states.pop(event.callsign, None)

            elif isinstance(event, ModifiedAircraftEvent):
                ac = event.aircraft
                crda_on = crda is not None and crda.enabled
                if crda_on:
                    # always start out by removing the old ghost
                    self._remove_ghost(ac.callsign)

                state = self.states.get(ac.callsign)
                if state is None:
                    self.states[ac.callsign] = ScopeState()
                else:
                    state.text_dirty = True

                if crda_on:
                    self._add_ghost(ac, crda)

            elif isinstance(event, PointOutEvent):
                self.pointed_out.add(event.callsign, event.controller, now,
                                     config.POINT_OUT_DURATION_S)
                state = self.states.get(event.callsign)
                if state is not None:
                    state.text_dirty = True

            else:
                log.warning("ignoring unexpected scope event %r", event)

    def duplicate(self) -> "ScopeStore":
        dupe = ScopeStore()
        for ac_id, state in self.states.items():
            if state.is_ghost:
                continue
            dupe.states[ac_id] = copy.deepcopy(state)
            dupe.states[ac_id].text_dirty = True
        # Ghost entries are rebuilt from the link table rather than aliased.
        for source, ghost_id in self.ghost_links.items():
            dupe.ghost_links[source] = ghost_id
            dupe.ghost_aircraft[ghost_id] = copy.deepcopy(self.ghost_aircraft[ghost_id])
            dupe.states[ghost_id] = ScopeState(is_ghost=True)
        return dupe
