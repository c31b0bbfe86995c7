import pytest
from backend.app.schemas.layout import Container, Region
from backend.app.solvers.metrics import (
    accessibility_score,
    compute_metrics,
    coverage_percent,
    efficiency_score,
    layout_report,
)

ROOM = Container(width=10, height=10)


def _messy():
    return [
        Region(id="A", x=0, y=0, w=5, h=5),
        Region(id="B", x=0, y=0, w=5, h=5),
        Region(id="C", x=8, y=8, w=4, h=4),
    ]


def test_coverage_counts_overlaps_once_and_ignores_outside():
    assert coverage_percent(_messy(), ROOM) == pytest.approx(29.0)
    assert coverage_percent([], ROOM) == 0.0


def test_efficiency_peaks_at_target():
    assert efficiency_score(50.0, 0.5) == pytest.approx(100.0)
    assert efficiency_score(29.0, 0.5) == pytest.approx(58.0)
    assert efficiency_score(200.0, 0.5) == 0.0
    assert efficiency_score(40.0, 0.0) == 0.0


def test_accessibility_bounds():
    assert accessibility_score([], ROOM) == pytest.approx(100.0)
    assert accessibility_score([Region(id="all", x=0, y=0, w=10, h=10)], ROOM) == 0.0


def test_compute_metrics_in_range():
    metrics = compute_metrics(_messy(), ROOM, target_utilization=0.5, min_gap=0.8)
    assert metrics.utilization == pytest.approx(29.0)
    assert metrics.efficiency == pytest.approx(58.0)
    assert 0 <= metrics.accessibility <= 100


def test_layout_report():
    report = layout_report(_messy(), ROOM)

    assert report.overlapping is True
    assert report.overlapping_ids == ["A", "B"]
    assert report.out_of_bounds_ids == ["C"]
    assert report.overlap_area == pytest.approx(25.0)
    assert report.boundary_violation == pytest.approx(12.0)
    assert report.unused_space == pytest.approx(71.0)


def test_layout_report_respects_gap():
    regions = [Region(id="a", x=0, y=0, w=2, h=2), Region(id="b", x=2.5, y=0, w=2, h=2)]
    assert layout_report(regions, ROOM).overlapping is False
    assert layout_report(regions, ROOM, min_gap=1.0).overlapping_ids == ["a", "b"]
