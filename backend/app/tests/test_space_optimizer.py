import math

import pytest
from backend.app.schemas.layout import Container, Region
from backend.app.solvers.space_optimizer import OptimizerParams, SpaceUtilizationOptimizer, expand
from backend.app.utils import geometry_utils as gu


def test_single_region_grows_toward_target():
    container = Container(width=10, height=10)
    grown = expand([Region(id="r", x=0, y=0, w=5, h=5)], container, target_utilization=0.90)

    # scale = sqrt(0.9 / 0.25); nothing but the walls constrains it
    assert grown[0].w == pytest.approx(math.sqrt(90))
    assert grown[0].h == pytest.approx(math.sqrt(90))
    assert gu.in_bounds(grown[0], container)


def test_within_band_is_unchanged():
    container = Container(width=10, height=10)
    regions = [Region(id="r", x=0, y=0, w=8, h=9)]
    # 72% sits inside [0.70, 0.75]
    assert expand(regions, container, target_utilization=0.75) == regions


def test_expansion_never_shrinks_and_stays_in_container():
    container = Container(width=20, height=10)
    regions = [
        Region(id="a", category="storage", x=0, y=0, w=3, h=2),
        Region(id="b", category="electronics", x=10, y=5, w=2, h=2),
    ]
    grown = expand(regions, container, target_utilization=0.8)

    assert gu.total_area(grown) >= gu.total_area(regions)
    assert gu.total_area(grown) <= container.area
    for before, after in zip(regions, grown):
        assert after.w >= before.w and after.h >= before.h
        assert (after.x, after.y) == (before.x, before.y)
        assert gu.in_bounds(after, container)


def test_growth_stops_short_of_neighbour():
    container = Container(width=10, height=4)
    regions = [
        Region(id="a", x=0, y=0, w=2, h=2),
        Region(id="b", x=5, y=0, w=2, h=2),
    ]
    grown = expand(regions, container, target_utilization=0.8, min_gap=1.0)

    assert grown[0].w == pytest.approx(4.0)
    assert not gu.overlaps(grown[0], grown[1], min_gap=1.0)


def test_priority_is_clamped():
    container = Container(width=10, height=10)
    region = [Region(id="r", category="hot", x=0, y=0, w=5, h=5)]

    # scale = sqrt(0.36 / 0.25) = 1.2
    boosted = expand(region, container, 0.36, priority_of=lambda c: 10.0)
    assert boosted[0].w == pytest.approx(5 * 1.2 * 1.4)

    damped = expand(region, container, 0.36, priority_of=lambda c: 0.1)
    assert damped[0].w == pytest.approx(5.0)


def test_over_target_shrinks_uniformly():
    container = Container(width=10, height=10)
    shrunk = expand([Region(id="r", x=0, y=0, w=10, h=10)], container, target_utilization=0.64)
    assert (shrunk[0].w, shrunk[0].h) == (pytest.approx(8.0), pytest.approx(8.0))


def test_shrink_is_floored_at_minimum_size():
    container = Container(width=4, height=4)
    params = OptimizerParams(target_utilization=0.01, min_width=0.5, min_height=0.3)
    shrunk = SpaceUtilizationOptimizer(container, params).expand([Region(id="r", x=0, y=0, w=4, h=4)])
    assert shrunk[0].w == pytest.approx(0.5)
    assert shrunk[0].h == pytest.approx(0.4)


def test_input_is_not_mutated():
    container = Container(width=10, height=10)
    regions = [Region(id="r", x=0, y=0, w=2, h=2)]
    expand(regions, container, 0.8)
    assert (regions[0].w, regions[0].h) == (2, 2)
