import pytest
from hypothesis import given, strategies as st

import config
from scope.labels import (
    POINT_OUT_MARK, default_formatter, flash_phase, monospace_measure,
    update_datablock_text, visible_text,
)
from scope.models import Aircraft, Extent2D, PointOutEvent
from scope.store import ScopeStore


def _ac(cs, squawk="1234", alt=5000, velocity=(0.0, 250.0)):
    return Aircraft(cs, position=(40.0, -73.0), altitude_ft=alt, heading=0.0,
                    ground_velocity_kt=velocity, destination="KJFK", squawk=squawk)


def test_default_formatter_phases():
    ac = _ac("AAL1")
    assert default_formatter(ac, False, 0) == "AAL1\n050 25"
    assert default_formatter(ac, False, 1) == "AAL1\nKJFK 1234"
    assert default_formatter(ac, True, 1) == "AAL1\nKJFK 1234*"


def test_formatter_without_track_vector():
    ac = _ac("AAL1", velocity=None)
    assert default_formatter(ac, False, 0) == "AAL1\n050"


def test_monospace_measure():
    w, h = monospace_measure("AAL1\nKJFK 1234")
    assert w == 9 * config.CHAR_W
    assert h == 2 * config.LINE_H


@pytest.mark.parametrize("now, phase", [(0.0, 0), (2.9, 0), (3.0, 1), (6.5, 0), (61.0, 0), (63.0, 1)])
def test_flash_phase(now, phase):
    assert flash_phase(now, 3) == phase


def test_flash_phase_bad_frequency_uses_default():
    assert flash_phase(4.0, 0) == flash_phase(4.0, config.DATABLOCK_FREQUENCY_S)


@given(now=st.floats(0, 1e6), freq=st.integers(-5, 30))
def test_flash_phase_is_binary(now, freq):
    assert flash_phase(now, freq) in (0, 1)


def test_update_text_sets_bounds_and_clears_dirty():
    store = ScopeStore()
    ac = _ac("AAL1")
    store.initialize([ac])
    update_datablock_text(store, {"AAL1": ac}, 0.0)

    state = store.states["AAL1"]
    assert not state.text_dirty
    assert state.datablock_text == ("AAL1\n050 25", "AAL1\nKJFK 1234")
    assert state.datablock_bounds == Extent2D((0.0, -2.0 * config.LINE_H), (9.0 * config.CHAR_W, 0.0))


def test_clean_text_is_left_alone():
    store = ScopeStore()
    ac = _ac("AAL1")
    store.initialize([ac])
    store.states["AAL1"].text_dirty = False
    update_datablock_text(store, {"AAL1": ac}, 0.0)
    assert store.states["AAL1"].datablock_text == ("", "")


def test_duplicate_squawks_are_flagged():
    store = ScopeStore()
    acs = {"A": _ac("A", "4000"), "B": _ac("B", "4000"), "C": _ac("C", "5000")}
    store.initialize(acs.values())
    update_datablock_text(store, acs, 0.0)
    assert store.states["A"].datablock_text[1].endswith("4000*")
    assert store.states["B"].datablock_text[1].endswith("4000*")
    assert store.states["C"].datablock_text[1].endswith("5000")


def test_point_out_adds_a_line():
    store = ScopeStore()
    ac = _ac("AAL1")
    store.initialize([ac])
    store.apply([PointOutEvent("AAL1", "N56")], now=0.0)
    update_datablock_text(store, {"AAL1": ac}, 1.0)
    assert store.states["AAL1"].datablock_text[0].endswith("\n" + POINT_OUT_MARK + "N56")
    assert store.states["AAL1"].datablock_bounds.height() == 3 * config.LINE_H


def test_visible_text_selects_phase():
    store = ScopeStore()
    ac = _ac("AAL1")
    store.initialize([ac])
    update_datablock_text(store, {"AAL1": ac}, 0.0)
    assert visible_text(store, ["AAL1"], 0.0, 3) == {"AAL1": "AAL1\n050 25"}
    assert visible_text(store, ["AAL1"], 3.0, 3) == {"AAL1": "AAL1\nKJFK 1234"}


def test_duplicate_squawk_counts_filtered_aircraft():
    store = ScopeStore()
    low = _ac("AAL1", squawk="1200", alt=5000)
    high = _ac("HI1", squawk="1200", alt=70000)
    store.initialize([low, high])
    update_datablock_text(store, {"AAL1": low}, 0.0,
                          tracked={"AAL1": low, "HI1": high})
    assert store.states["AAL1"].datablock_text[1].endswith("1200*")
