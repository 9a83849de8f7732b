from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
import logging

import config

log = logging.getLogger(__name__)


@dataclass
class AlertStats:
    """Aggregated conflict statistics for a display session."""
    frames: int = 0
    warning_frames: int = 0
    violation_frames: int = 0
    alerts_fired: int = 0
    max_violations: int = 0

    def record(self, n_warnings: int, n_violations: int, fired: bool) -> None:
        self.frames += 1
        if n_warnings:
            self.warning_frames += 1
        if n_violations:
            self.violation_frames += 1
        if n_violations > self.max_violations:
            self.max_violations = n_violations
        if fired:
            self.alerts_fired += 1


class AlertMonitor:
    """
    Rate limits the audible conflict alert.

    At most one alert fires per frame, however many violations there are,
    and never again until `cooldown_s` has elapsed since the last one.
    """

    def __init__(self, cooldown_s: float = config.ALERT_COOLDOWN_S) -> None:
        self.cooldown_s = cooldown_s
        self.last_fired: Optional[float] = None
        self.stats = AlertStats()

    def update(self, n_warnings: int, n_violations: int, now: float) -> bool:
        fired = n_violations > 0 and (
            self.last_fired is None or now - self.last_fired >= self.cooldown_s
        )
        if fired:
            self.last_fired = now
            log.info("conflict alert: %d violation(s) at t=%.1f", n_violations, now)

        self.stats.record(n_warnings, n_violations, fired)
        return fired

    def summary(self) -> AlertStats:
        return self.stats
