import math

import numpy as np
import pytest

from circlegraph.config import DESKTOP, Breakpoint
from circlegraph.geometry import GeometryEngine
from circlegraph.responsive import derive_config
from circlegraph.types import InvalidConfig, InvalidIndex


def _close(p, q, tol=1e-9):
    return math.isclose(p[0], q[0], abs_tol=tol) and math.isclose(p[1], q[1], abs_tol=tol)


def test_circle_and_anchor_positions_on_desktop():
    config = derive_config(DESKTOP, 8)
    engine = GeometryEngine(config)

    assert _close(engine.circle_position(0, 8), (550.0, 300.0))
    assert _close(engine.circle_position(2, 8), (300.0, 550.0))
    assert _close(engine.circle_position(4, 8), (50.0, 300.0))
    assert _close(engine.anchor_position(0, 8), (500.0, 250.0))


def test_every_position_lies_on_the_circle():
    config = derive_config(DESKTOP, 7)
    engine = GeometryEngine(config)

    for index in range(7):
        x, y = engine.circle_position(index, 7)
        assert math.isclose(math.hypot(x - 300.0, y - 300.0), 250.0)


@pytest.mark.parametrize("index", [-1, 8, 20])
def test_out_of_range_index_raises(index):
    engine = GeometryEngine(derive_config(DESKTOP, 8))
    with pytest.raises(InvalidIndex):
        engine.circle_position(index, 8)


def test_missing_config_raises():
    with pytest.raises(InvalidConfig):
        GeometryEngine().circle_position(0, 4)


def test_opposite_pairs_only_for_even_counts():
    assert GeometryEngine.is_opposite_pair(0, 4, 8)
    assert GeometryEngine.is_opposite_pair(7, 3, 8)
    assert not GeometryEngine.is_opposite_pair(1, 3, 8)
    assert not GeometryEngine.is_opposite_pair(0, 3, 7)
    assert not GeometryEngine.is_opposite_pair(0, 0, 0)


def test_arc_control_point_bends_toward_center():
    config = derive_config(DESKTOP, 8)
    engine = GeometryEngine(config)
    control = engine.arc_control_point((550.0, 300.0), (300.0, 550.0))

    offset = 75.0 / math.sqrt(2.0)
    assert _close(control, (425.0 - offset, 425.0 - offset), tol=1e-6)


def test_arc_control_point_collapses_on_center_midpoint():
    engine = GeometryEngine(derive_config(DESKTOP, 8))
    control = engine.arc_control_point((550.0, 300.0), (50.0, 300.0))
    assert _close(control, (300.0, 300.0))


@pytest.mark.parametrize("total, straight", [(8, 4), (6, 3), (7, 0), (2, 1)])
def test_straight_connectors_for_opposite_pairs(total, straight):
    engine = GeometryEngine(derive_config(DESKTOP, total))
    paths = [engine.edge_path(a, b, total) for a in range(total) for b in range(a + 1, total)]

    assert sum(1 for p in paths if p.is_straight) == straight
    assert all(p.kind == "quadratic" for p in paths if not p.is_straight)


def test_halved_config_scales_positions_and_controls():
    full = derive_config(DESKTOP, 8)
    half = derive_config(Breakpoint("half", 0, None, 300, 150, 125, 50, 12), 8)
    engine = GeometryEngine()

    for a, b in [(0, 1), (0, 4), (2, 7)]:
        big = engine.edge_path(a, b, 8, full)
        small = engine.edge_path(a, b, 8, half)
        assert _close(small.start, (big.start[0] / 2, big.start[1] / 2), tol=1e-6)
        assert _close(small.end, (big.end[0] / 2, big.end[1] / 2), tol=1e-6)
        if big.control is not None:
            assert _close(small.control, (big.control[0] / 2, big.control[1] / 2), tol=1e-6)


def test_cache_is_dropped_when_fingerprint_changes():
    full = derive_config(DESKTOP, 8)
    half = derive_config(Breakpoint("half", 0, None, 300, 150, 125, 50, 12), 8)
    engine = GeometryEngine(full)

    engine.circle_position(0, 8)
    engine.circle_position(1, 8)
    assert engine.cache_stats()["size"] == 2

    pos = engine.circle_position(0, 8, half)
    stats = engine.cache_stats()
    assert stats["size"] == 1
    assert stats["fingerprint"] == half.fingerprint(8)
    assert _close(pos, (275.0, 150.0))

    engine.circle_position(0, 6, half)
    assert engine.cache_stats()["fingerprint"] == half.fingerprint(6)


def test_positions_array_matches_cached_queries():
    config = derive_config(DESKTOP, 5)
    engine = GeometryEngine(config)
    array = engine.positions_array(5)

    assert array.shape == (5, 2)
    for index in range(5):
        assert np.allclose(array[index], engine.circle_position(index, 5))
    assert engine.positions_array(0).shape == (0, 2)


def test_precompute_fills_the_cache():
    engine = GeometryEngine(derive_config(DESKTOP, 6))
    assert engine.precompute_positions(6) == 6
    stats = engine.cache_stats()
    assert stats["entries"] == [0, 1, 2, 3, 4, 5]
    assert _close(engine.anchor_position(3, 6), (0.0, 250.0), tol=1e-6)
