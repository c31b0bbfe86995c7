"""
Helper functions for computing layout metrics and scores.
"""
from typing import Any, Sequence
import numpy as np

from ..schemas.layout import Container, LayoutMetrics, LayoutReport, Region
from ..utils import geometry_utils as gu

# Narrowest free strip counted as walkable when the policy has no gap of its own
DEFAULT_AISLE_WIDTH = 1.0


def coverage_percent(regions: Sequence[Region], container: Container) -> float:
    """Percent of the container covered by at least one region."""
    if container.area <= 0:
        return 0.0
    covered = gu.covered_area(regions, container)
    return float(np.clip(100.0 * covered / container.area, 0.0, 100.0))


def efficiency_score(coverage: float, target_utilization: float) -> float:
    """100 at the target coverage, falling off linearly on either side."""
    target = 100.0 * target_utilization
    if target <= 0:
        return 0.0
    return float(np.clip(100.0 * (1.0 - abs(coverage - target) / target), 0.0, 100.0))


def accessibility_score(regions: Sequence[Region], container: Container, min_gap: float = 0.0) -> float:
    """Percent of the free floor that is wide enough to walk through."""
    aisle = max(min_gap, DEFAULT_AISLE_WIDTH)
    return float(np.clip(100.0 * gu.walkable_ratio(regions, container, aisle), 0.0, 100.0))


def compute_metrics(regions: Sequence[Region],
                    container: Container,
                    target_utilization: float,
                    min_gap: float = 0.0) -> LayoutMetrics:
    coverage = coverage_percent(regions, container)
    return LayoutMetrics(
        utilization=round(coverage, 2),
        efficiency=round(efficiency_score(coverage, target_utilization), 2),
        accessibility=round(accessibility_score(regions, container, min_gap), 2),
    )


def layout_report(regions: Sequence[Any], container: Container, min_gap: float = 0.0) -> LayoutReport:
    """Validity report: coverage, conflicts and boundary violations."""
    pairs = gu.find_overlapping_pairs(regions, min_gap)
    overlapping_ids = []
    for i, j in pairs:
        for idx in (i, j):
            if regions[idx].id not in overlapping_ids:
                overlapping_ids.append(regions[idx].id)
    out_of_bounds = [r.id for r in regions if not gu.in_bounds(r, container)]

    covered = gu.covered_area(regions, container)
    return LayoutReport(
        utilization=round(coverage_percent(regions, container), 2),
        overlapping=bool(pairs),
        unused_space=round(max(0.0, container.area - covered), 4),
        overlap_area=round(gu.overlap_area(regions), 4),
        boundary_violation=round(gu.boundary_violation(regions, container), 4),
        overlapping_ids=overlapping_ids,
        out_of_bounds_ids=out_of_bounds,
    )
