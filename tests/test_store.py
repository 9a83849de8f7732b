import pytest

from scope.crda import CRDAConfig, Runway
from scope.models import (
    AddedAircraftEvent, Aircraft, ModifiedAircraftEvent, PointOutEvent,
    RemovedAircraftEvent, ScopeState, ghost_id_for,
)
from scope.store import ScopeStore, TransientMap

SRC = Runway(threshold=(40.0, -73.0), heading=360.0)
DST = Runway(threshold=(40.0, -72.9), heading=90.0)


def _crda(enabled=True):
    return CRDAConfig(enabled=enabled, source=SRC, destination=DST)


def _on_final(cs="AAL1", nm_south=5.0):
    return Aircraft(cs, position=(40.0 - nm_south / 60.0, -73.0), altitude_ft=2000,
                    heading=0.0, ground_velocity_kt=(0.0, 150.0))


def _elsewhere(cs="AAL1"):
    return Aircraft(cs, position=(40.0, -73.2), altitude_ft=2000,
                    heading=90.0, ground_velocity_kt=(150.0, 0.0))


def test_add_remove():
    store = ScopeStore()
    store.apply([AddedAircraftEvent(_elsewhere("A")), AddedAircraftEvent(_elsewhere("B"))])
    assert "A" in store and "B" in store
    assert len(store) == 2

    store.apply([RemovedAircraftEvent("A")])
    assert "A" not in store
    assert len(store) == 1


def test_modify_marks_text_dirty_and_creates_missing_state():
    store = ScopeStore()
    store.initialize([_elsewhere("A")])
    store.states["A"].text_dirty = False

    store.apply([ModifiedAircraftEvent(_elsewhere("A")), ModifiedAircraftEvent(_elsewhere("NEW"))])
    assert store.states["A"].text_dirty
    assert "NEW" in store


def test_events_apply_in_order():
    store = ScopeStore()
    ac = _elsewhere("A")
    store.apply([AddedAircraftEvent(ac), RemovedAircraftEvent("A")])
    assert "A" not in store
    store.apply([RemovedAircraftEvent("A"), AddedAircraftEvent(ac)])
    assert "A" in store


def test_ghost_lifecycle():
    store = ScopeStore()
    crda = _crda()
    ghost_id = ghost_id_for("AAL1")

    store.apply([AddedAircraftEvent(_on_final())], crda)
    assert ghost_id in store
    assert store.is_ghost(ghost_id)
    assert not store.is_ghost("AAL1")
    assert store.ghost_links == {"AAL1": ghost_id}

    # turned off the final: the old ghost goes away
    store.apply([ModifiedAircraftEvent(_elsewhere())], crda)
    assert ghost_id not in store
    assert store.ghost_links == {}
    assert ghost_id not in store.ghost_aircraft

    store.apply([ModifiedAircraftEvent(_on_final(nm_south=4.0))], crda)
    assert ghost_id in store

    store.apply([RemovedAircraftEvent("AAL1")], crda)
    assert len(store) == 0
    assert store.ghost_links == {}


def test_no_ghosts_when_crda_disabled():
    store = ScopeStore()
    store.initialize([_on_final()], _crda(enabled=False))
    assert list(store.states) == ["AAL1"]


def test_every_ghost_has_one_source():
    store = ScopeStore()
    store.initialize([_on_final("A", 3.0), _on_final("B", 6.0), _elsewhere("C")], _crda())
    ghosts = [ac_id for ac_id, s in store.states.items() if s.is_ghost]
    assert sorted(ghosts) == sorted(store.ghost_links.values())
    assert len(set(store.ghost_links.values())) == len(store.ghost_links)


def test_duplicate_is_independent():
    store = ScopeStore()
    store.initialize([_on_final("A"), _elsewhere("B")], _crda())
    store.states["B"].manual_offset = (10.0, 10.0)
    store.states["B"].text_dirty = False

    dupe = store.duplicate()
    assert set(dupe.states) == set(store.states)
    assert dupe.ghost_links == store.ghost_links
    assert dupe.states["B"].manual_offset == (10.0, 10.0)
    assert dupe.states["B"].text_dirty

    dupe.states["B"].manual_offset = (0.0, 0.0)
    dupe.apply([RemovedAircraftEvent("A")])
    assert store.states["B"].manual_offset == (10.0, 10.0)
    assert "A" in store
    assert ghost_id_for("A") in store
    for ac_id in store.states:
        if ac_id in dupe.states:
            assert dupe.states[ac_id] is not store.states[ac_id]


def test_point_out_expires():
    store = ScopeStore()
    store.initialize([_elsewhere("A")])
    store.states["A"].text_dirty = False

    store.apply([PointOutEvent("A", "N56")], now=10.0)
    assert store.states["A"].text_dirty
    assert store.pointed_out.get("A", 12.0) == "N56"
    assert store.pointed_out.get("A", 15.0) is None
    assert len(store.pointed_out) == 0


def test_unknown_event_is_logged(caplog):
    store = ScopeStore()
    with caplog.at_level("WARNING"):
        store.apply(["not an event"])
    assert "unexpected scope event" in caplog.text


def test_transient_map_overwrites():
    m = TransientMap()
    m.add("k", 1, now=0.0, duration_s=1.0)
    m.add("k", 2, now=0.5, duration_s=1.0)
    assert m.get("k", 1.2) == 2


def test_window_bounds_prefers_manual_offset():
    state = ScopeState(automatic_offset=(5.0, 5.0))
    assert state.window_bounds((100.0, 100.0)).p0 == (105.0, 105.0)
    state.manual_offset = (10.0, 10.0)
    assert state.window_bounds((100.0, 100.0)).p0 == (110.0, 110.0)
