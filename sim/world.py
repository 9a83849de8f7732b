from __future__ import annotations
from typing import Dict, Optional
import csv
import os

from scope.bus import EventBus
from scope.display import FrameContext, FrameOutput, RadarScope
from scope.geo import nm_distance
from scope.models import (
    AddedAircraftEvent, Aircraft, ModifiedAircraftEvent, PointOutEvent,
    RemovedAircraftEvent,
)
from scope.projection import ScopeTransform

# Arrivals closer than this to their destination are dropped from the scope
LANDED_NM = 1.0


class World:
    def __init__(self, aircraft: Dict[str, Aircraft], scope: RadarScope,
                 transform: ScopeTransform,
                 log_path: str | None = "logs/scope_log.csv") -> None:
        self.ac: Dict[str, Aircraft] = aircraft
        self.scope = scope
        self.bus: EventBus = scope.bus
        self.transform = transform

        self.time_s: float = 0.0
        self.paused: bool = False
        self.last_frame: Optional[FrameOutput] = None

        self.scope.activate(self.ac.values())

        # --- Logging setup ---
        self.log_path = log_path
        self.log_file = None
        self.log_writer: csv.writer | None = None

        if self.log_path is not None:
            # Ensure directory exists
            log_dir = os.path.dirname(self.log_path)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)

            self.log_file = open(self.log_path, "w", newline="", encoding="utf-8")
            self.log_writer = csv.writer(self.log_file)

            # Header: one row per flagged pair / MIT line per frame
            self.log_writer.writerow([
                "time_s",
                "kind",
                "ac0",
                "ac1",
                "lateral_nm",
                "vertical_ft",
                "projected_nm",
                "alert",
            ])

    def reset(self, aircraft: Dict[str, Aircraft]) -> None:
        self.ac = aircraft
        self.time_s = 0.0
        self.scope.activate(self.ac.values())

    # --- changes coming from "outside" --------------------------------

    def add(self, ac: Aircraft) -> None:
        self.ac[ac.callsign] = ac
        self.bus.post(AddedAircraftEvent(ac))

    def remove(self, callsign: str) -> None:
        if self.ac.pop(callsign, None) is not None:
            self.bus.post(RemovedAircraftEvent(callsign))

    def point_out(self, callsign: str, controller: str) -> None:
        self.bus.post(PointOutEvent(callsign, controller))

    def step(self, dt: float) -> FrameOutput:
        if not self.paused:
            # --- 1) Integrate aircraft motion ---
            for ac in self.ac.values():
                ac.step(dt)
                self.bus.post(ModifiedAircraftEvent(ac))

            # --- 2) Land arrivals that reached their airport ---
            airports = self.scope.config.airport_locations
            for cs, ac in list(self.ac.items()):
                loc = airports.get(ac.destination) if ac.destination else None
                if loc is not None and nm_distance(loc, ac.position) < LANDED_NM:
                    self.remove(cs)

            self.time_s += dt

        # --- 3) Scope frame over a consistent snapshot ---
        out = self.scope.frame(FrameContext(
            aircraft=list(self.ac.values()),
            now=self.time_s,
            projector=self.transform,
            pane_size=self.transform.pane_size(),
        ))
        self.last_frame = out

        if self.log_writer is not None and not self.paused:
            self._log(out)
        return out

    def _log(self, out: FrameOutput) -> None:
        alert = 1 if out.alert_fired else 0
        for c in out.violations + out.warnings:
            self.log_writer.writerow([
                f"{self.time_s:.2f}",
                c.kind.name,
                c.aircraft[0],
                c.aircraft[1],
                f"{c.lateral_nm:.2f}",
                f"{c.vertical_ft:.0f}",
                "",
                alert,
            ])
        for m in out.mit:
            self.log_writer.writerow([
                f"{self.time_s:.2f}",
                f"MIT_{m.severity.name}",
                m.leading,
                m.trailing,
                f"{m.distance_nm:.2f}",
                "",
                "" if m.projected_nm is None else f"{m.projected_nm:.2f}",
                alert,
            ])

    def close(self) -> None:
        """Call this when the simulation ends to flush/close the log file."""
        if self.log_file is not None:
            self.log_file.close()
            self.log_file = None
            self.log_writer = None
