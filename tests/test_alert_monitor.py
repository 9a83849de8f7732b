import pytest
from hypothesis import given, strategies as st

import config
from scope.monitor import AlertMonitor


def test_alert_fires_once_within_cooldown():
    mon = AlertMonitor()
    fired = [mon.update(0, 1, 0.0), mon.update(0, 1, 1.0)]
    assert fired == [True, False]
    assert mon.stats.alerts_fired == 1


def test_alert_fires_again_after_cooldown():
    mon = AlertMonitor()
    fired = [mon.update(0, 1, 0.0), mon.update(0, 1, 4.0)]
    assert fired == [True, True]
    assert mon.stats.alerts_fired == 2


def test_alert_fires_at_exactly_cooldown():
    mon = AlertMonitor()
    assert mon.update(0, 1, 10.0)
    assert mon.update(0, 1, 10.0 + config.ALERT_COOLDOWN_S)


def test_no_alert_for_warnings_only():
    mon = AlertMonitor()
    assert mon.update(3, 0, 0.0) is False
    assert mon.stats.alerts_fired == 0
    assert mon.stats.warning_frames == 1
    # a later violation is not held back by the warning frame
    assert mon.update(0, 1, 0.5) is True


def test_many_violations_one_alert():
    mon = AlertMonitor()
    assert mon.update(0, 7, 0.0) is True
    stats = mon.summary()
    assert stats.alerts_fired == 1
    assert stats.max_violations == 7
    assert stats.violation_frames == 1


@given(times=st.lists(st.floats(0, 1000), min_size=1, max_size=40))
def test_fired_alerts_are_spaced_by_cooldown(times):
    mon = AlertMonitor()
    fired_at = [t for t in sorted(times) if mon.update(0, 1, t)]
    assert fired_at[0] == min(times)
    for a, b in zip(fired_at, fired_at[1:]):
        assert b - a >= mon.cooldown_s
