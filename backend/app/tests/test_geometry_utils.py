import pytest
from backend.app.schemas.layout import Container, Region
from backend.app.utils import geometry_utils as gu


def _r(rid, x, y, w, h):
    return Region(id=rid, x=x, y=y, w=w, h=h)


def test_overlap_respects_min_gap():
    a = _r("a", 0, 0, 2, 2)
    touching = _r("b", 2, 0, 2, 2)
    near = _r("c", 2.5, 0, 2, 2)

    # Shared edges are not overlaps without a gap requirement
    assert gu.overlaps(a, touching) is False
    assert gu.overlaps(a, touching, min_gap=0.5) is True

    # Exactly min_gap apart is allowed
    assert gu.overlaps(a, near, min_gap=0.5) is False
    assert gu.overlaps(a, near, min_gap=0.6) is True

    # Symmetric
    assert gu.overlaps(near, a, min_gap=0.6) is True


def test_vertical_separation_is_enough():
    a = _r("a", 0, 0, 5, 2)
    b = _r("b", 0, 3, 5, 2)
    assert gu.overlaps(a, b, min_gap=1.0) is False
    assert gu.overlaps(a, b, min_gap=1.5) is True


def test_in_bounds_and_clamp():
    container = Container(width=10, height=5)
    r = _r("r", 8, -1, 4, 2)
    assert gu.in_bounds(r, container) is False

    gu.clamp_region(r, container)
    assert gu.in_bounds(r, container) is True
    assert (r.x, r.y, r.w, r.h) == (6.0, 0.0, 4.0, 2.0)

    big = _r("big", 0, 0, 20, 0.1)
    gu.clamp_region(big, container, min_w=0.5, min_h=0.3)
    assert big.w == 10.0
    assert big.h == pytest.approx(0.3)


def test_find_overlapping_pairs_and_drag_conflicts():
    regions = [_r("a", 0, 0, 3, 3), _r("b", 2, 2, 3, 3), _r("c", 10, 10, 1, 1)]
    assert gu.find_overlapping_pairs(regions) == [(0, 1)]

    dragged = _r("c", 1, 1, 1, 1)
    assert gu.drag_conflicts(dragged, regions) == ["a"]
    # The dragged region's own stale copy in the list is skipped
    assert "c" not in gu.drag_conflicts(dragged, regions, min_gap=20)


def test_grid_positions_include_far_edge():
    positions = gu.grid_positions(1.0, 0.3)
    assert positions[0] == 0.0
    assert positions[-1] == 1.0
    assert len(positions) == 5

    assert gu.grid_positions(0.0, 0.2) == [0.0]
    assert gu.grid_positions(-1.0, 0.2) == []


def test_area_helpers():
    container = Container(width=10, height=10)
    regions = [_r("a", 0, 0, 4, 4), _r("b", 2, 2, 4, 4), _r("c", 8, 8, 4, 4)]

    assert gu.total_area(regions) == pytest.approx(48.0)
    assert gu.utilization(regions, container) == pytest.approx(0.48)
    assert gu.union_area(regions) == pytest.approx(44.0)
    assert gu.overlap_area(regions) == pytest.approx(4.0)
    assert gu.boundary_violation(regions, container) == pytest.approx(12.0)
    # c only covers 2x2 inside the container
    assert gu.covered_area(regions, container) == pytest.approx(32.0)


def test_walkable_ratio():
    container = Container(width=10, height=10)
    assert gu.walkable_ratio([], container, 1.0) == pytest.approx(1.0)

    # A 0.4m strip is too narrow for a 1m aisle
    sliver = [_r("a", 0, 0, 9.6, 10)]
    assert gu.walkable_ratio(sliver, container, 1.0) == pytest.approx(0.0, abs=1e-9)

    full = [_r("a", 0, 0, 10, 10)]
    assert gu.walkable_ratio(full, container, 1.0) == 0.0
