import pytest
from hypothesis import given, strategies as st

import config
from scope.layout import (
    datablock_connect_point, ideal_offset, layout_automatic, layout_datablocks,
    leader_line_end,
)
from scope.models import Aircraft, Extent2D, ScopeState, overlaps
from scope.store import ScopeStore

PANE = (800.0, 800.0)
LOCAL = Extent2D((0.0, -20.0), (40.0, 0.0))


def _setup(positions, heading=60.0):
    """Store + visible set with fixed datablock bounds (no text pass)."""
    store = ScopeStore()
    visible = {}
    window_pos = {}
    for cs, p in positions.items():
        store.states[cs] = ScopeState(text_dirty=False, datablock_bounds=LOCAL)
        visible[cs] = Aircraft(cs, position=(40.0, -73.0), altitude_ft=5000, heading=heading)
        window_pos[cs] = p
    return store, visible, window_pos


def _padded(store, window_pos, cs):
    return store.states[cs].window_bounds(window_pos[cs]).expand(config.DATABLOCK_PADDING)


# --- anchor geometry ---------------------------------------------------------

@pytest.mark.parametrize("heading, point, corner", [
    (0.0, (0.0, 10.0), False),
    (45.0, (0.0, 20.0), True),
    (90.0, (5.0, 20.0), False),
    (150.0, (0.0, 0.0), True),
    (180.0, (0.0, 10.0), False),
    (240.0, (0.0, 20.0), True),
    (280.0, (5.0, 0.0), False),
    (330.0, (0.0, 0.0), True),
    (350.0, (0.0, 10.0), False),   # wraps back into the first slice
    (-20.0, (0.0, 0.0), True),
    (-15.000000000000002, (0.0, 10.0), False),  # rounds to just below -15
])
def test_connect_point_sectors(heading, point, corner):
    bbox = Extent2D((0.0, 0.0), (10.0, 20.0))
    p, is_corner = datablock_connect_point(bbox, heading)
    assert p == pytest.approx(point)
    assert is_corner is corner


def test_ideal_offset_corner_puts_padded_corner_on_track():
    state = ScopeState(datablock_bounds=LOCAL)
    # heading 60 -> upper-left corner of the padded box
    assert ideal_offset(state, 60.0, 0.0) == pytest.approx((5.0, -5.0))


def test_ideal_offset_edge_gets_extra_nudge():
    state = ScopeState(datablock_bounds=LOCAL)
    off = ideal_offset(state, 0.0, 0.0)
    # left-mid of the padded box is (-5, -10); nudged 3 units further out
    n = (5.0 ** 2 + 10.0 ** 2) ** 0.5
    assert off == pytest.approx((5.0 + 3.0 * 5.0 / n, 10.0 + 3.0 * 10.0 / n))


def test_missing_heading_treated_as_north():
    state = ScopeState(datablock_bounds=LOCAL)
    assert ideal_offset(state, None, 0.0) == pytest.approx(ideal_offset(state, 0.0, 0.0))


def test_rotation_is_added_to_heading():
    state = ScopeState(datablock_bounds=LOCAL)
    assert ideal_offset(state, 30.0, 30.0) == pytest.approx(ideal_offset(state, 60.0, 0.0))


# --- self-only mode ------------------------------------------------------------

def test_self_only_uses_ideal_and_ignores_neighbours():
    store, visible, window_pos = _setup({"A": (100.0, 100.0), "B": (101.0, 100.0)})
    layout_datablocks(store, visible, window_pos, PANE, 0.0, automatic=False)
    assert store.states["A"].automatic_offset == pytest.approx((5.0, -5.0))
    assert store.states["B"].automatic_offset == pytest.approx((5.0, -5.0))


def test_self_only_zeroes_automatic_when_manual_set():
    store, visible, window_pos = _setup({"A": (100.0, 100.0)})
    store.states["A"].automatic_offset = (7.0, 7.0)
    store.states["A"].manual_offset = (10.0, 10.0)
    layout_datablocks(store, visible, window_pos, PANE, 0.0, automatic=False)
    assert store.states["A"].automatic_offset == (0.0, 0.0)


# --- automatic mode ------------------------------------------------------------

def test_free_datablocks_take_their_ideal_spot():
    store, visible, window_pos = _setup({"A": (100.0, 100.0), "B": (300.0, 300.0)})
    report = layout_automatic(store, visible, window_pos, PANE, 0.0)
    assert report.placed == ["A", "B"]
    assert report.settled
    for cs in ("A", "B"):
        assert store.states[cs].automatic_offset == pytest.approx((5.0, -5.0))


def test_overlapping_datablocks_are_pushed_apart():
    # padded boxes are 50 wide; 30 apart means 20 units of overlap
    store, visible, window_pos = _setup({"A": (100.0, 100.0), "B": (130.0, 100.0)})
    report = layout_automatic(store, visible, window_pos, PANE, 0.0)

    assert report.placed == ["A"]
    assert report.settled
    assert report.residual_overlaps == 0
    assert store.states["A"].automatic_offset == pytest.approx((5.0, -5.0))
    # B slid right until its box just touches A's
    assert store.states["B"].automatic_offset == pytest.approx((25.0, -5.0))
    assert not overlaps(_padded(store, window_pos, "A"), _padded(store, window_pos, "B"))


def test_layout_is_idempotent():
    positions = {
        "A": (100.0, 100.0), "B": (130.0, 100.0),
        "F": (600.0, 100.0), "G": (600.0, 125.0),
        "D": (400.0, 400.0),
    }
    store, visible, window_pos = _setup(positions)
    first_report = layout_automatic(store, visible, window_pos, PANE, 0.0)
    first = {cs: s.automatic_offset for cs, s in store.states.items()}
    assert first_report.settled
    # G was pushed up, then pulled back down until it touched F
    assert first["G"] == pytest.approx((5.0, 0.0))

    layout_automatic(store, visible, window_pos, PANE, 0.0)
    second = {cs: s.automatic_offset for cs, s in store.states.items()}
    assert second == first


def test_non_overlap_with_plenty_of_room():
    # a loose grid of tracks whose ideal spots collide pairwise
    positions = {}
    for i in range(4):
        for j in range(3):
            positions[f"AC{i}{j}"] = (100.0 + 150.0 * i, 100.0 + 150.0 * j)
            positions[f"BC{i}{j}"] = (130.0 + 150.0 * i, 100.0 + 150.0 * j)
    store, visible, window_pos = _setup(positions)
    report = layout_automatic(store, visible, window_pos, PANE, 0.0)

    assert report.settled
    ids = sorted(positions)
    for i, a in enumerate(ids):
        for b in ids[i + 1:]:
            assert not overlaps(_padded(store, window_pos, a), _padded(store, window_pos, b))


def test_manual_offset_is_pinned_regardless_of_neighbours():
    store, visible, window_pos = _setup({"A": (100.0, 100.0), "B": (102.0, 98.0)})
    store.states["A"].manual_offset = (10.0, 10.0)
    layout_automatic(store, visible, window_pos, PANE, 0.0)

    expected = LOCAL.offset((100.0, 100.0)).offset((10.0, 10.0))
    assert store.states["A"].window_bounds(window_pos["A"]) == expected


def test_coincident_tracks_split_along_x_and_report_residual():
    store, visible, window_pos = _setup({"A": (200.0, 200.0), "B": (200.0, 200.0)})
    report = layout_automatic(store, visible, window_pos, PANE, 0.0)
    # twenty steps of 2 units is not enough to clear a 50 unit wide box
    assert store.states["A"].automatic_offset == pytest.approx((5.0, -5.0))
    assert store.states["B"].automatic_offset == pytest.approx((45.0, -5.0))
    assert not report.settled
    assert report.residual_overlaps == 1


def test_far_offscreen_aircraft_are_skipped():
    store, visible, window_pos = _setup({"A": (100.0, 100.0), "Z": (-500.0, 100.0)})
    report = layout_automatic(store, visible, window_pos, PANE, 0.0)
    assert report.laid_out == ["A"]
    assert store.states["Z"].automatic_offset == (0.0, 0.0)


# --- leader line -----------------------------------------------------------------

def test_leader_line_end():
    box = Extent2D((10.0, 10.0), (30.0, 20.0))
    assert leader_line_end((0.0, 0.0), box) == (10.0, 10.0)
    assert leader_line_end((20.0, 30.0), box) == (20.0, 20.0)
    assert leader_line_end((40.0, 15.0), box) == (30.0, 15.0)
    assert leader_line_end((20.0, 15.0), box) is None


@given(
    ax=st.floats(-100, 100), ay=st.floats(-100, 100),
    bx=st.floats(-100, 100), by=st.floats(-100, 100),
)
def test_overlaps_is_symmetric(ax, ay, bx, by):
    a = LOCAL.offset((ax, ay))
    b = LOCAL.offset((bx, by))
    assert overlaps(a, b) == overlaps(b, a)


def test_touching_boxes_do_not_overlap():
    a = Extent2D((0.0, 0.0), (10.0, 10.0))
    assert not overlaps(a, a.offset((10.0, 0.0)))
    assert overlaps(a, a.offset((9.5, 0.0)))
