"""
Space utilization optimizer.

Grows (or shrinks) an already-valid region set toward a target coverage
ratio. Growth is anchored at each region's top-left corner and limited by the
nearest neighbour in the way, so a single pass rarely creates conflicts. It
can though: two regions may both claim the same freed corner, and the
pipeline always follows this stage with the final shrink pass.
"""
from dataclasses import dataclass
from typing import Callable, List, Sequence, Tuple
import logging
import math

from ..schemas.layout import Container, Region
from ..utils import geometry_utils as gu

logger = logging.getLogger(__name__)

PRIORITY_MIN = 0.8
PRIORITY_MAX = 1.4


@dataclass
class OptimizerParams:
    """Space optimizer parameters"""
    target_utilization: float = 0.80
    tolerance: float = 0.05          # [target - tolerance, target] counts as done
    min_gap: float = 0.0
    max_expansion_ratio: float = 2.0
    min_width: float = 0.5
    min_height: float = 0.3


def _clamp_priority(value: float) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 1.0
    if not math.isfinite(value):
        return 1.0
    return min(PRIORITY_MAX, max(PRIORITY_MIN, value))


class SpaceUtilizationOptimizer:
    def __init__(self, container: Container, params: OptimizerParams,
                 priority_of: Callable[[str], float] = lambda category: 1.0):
        self.container = container
        self.params = params
        self.priority_of = priority_of

    def max_extent(self, region: Region, others: Sequence[Region]) -> Tuple[float, float]:
        """Largest width and height region can grow to without reaching a neighbour.

        Only neighbours in the same horizontal band (for width) or vertical band
        (for height) obstruct; bands are widened by min_gap since closer-than-gap
        neighbours would conflict diagonally.
        """
        g = self.params.min_gap
        right = self.container.width
        bottom = self.container.height

        for o in others:
            same_row = o.y < region.y + region.h + g and o.y + o.h + g > region.y
            if same_row and o.x >= region.x + region.w - gu.EPS:
                right = min(right, o.x - g)
            same_col = o.x < region.x + region.w + g and o.x + o.w + g > region.x
            if same_col and o.y >= region.y + region.h - gu.EPS:
                bottom = min(bottom, o.y - g)

        return max(region.w, right - region.x), max(region.h, bottom - region.y)

    def expand(self, regions: Sequence[Region]) -> List[Region]:
        """Move coverage toward the target; returns the input untouched inside the tolerance band."""
        area = self.container.area
        current = gu.total_area(regions) / area if area > 0 else 0.0
        target = self.params.target_utilization

        if not regions or current <= 0:
            return list(regions)
        if target - self.params.tolerance <= current <= target:
            logger.debug(f"utilization {current:.3f} within band of target {target:.2f}, unchanged")
            return list(regions)

        if current > target:
            return self._shrink(regions, math.sqrt(target / current))
        return self._grow(regions, math.sqrt(target / current))

    def _grow(self, regions: Sequence[Region], scale: float) -> List[Region]:
        # extents come from pre-expansion positions so every region sees the same layout
        extents = [
            self.max_extent(r, [o for j, o in enumerate(regions) if j != i])
            for i, r in enumerate(regions)
        ]

        grown = []
        for r, (max_w, max_h) in zip(regions, extents):
            priority = _clamp_priority(self.priority_of(r.category))
            factor = min(scale * priority, self.params.max_expansion_ratio)
            out = r.model_copy()
            out.w = max(r.w, min(r.w * factor, max_w, self.container.width - r.x))
            out.h = max(r.h, min(r.h * factor, max_h, self.container.height - r.y))
            grown.append(out)

        logger.debug("grow: scale=%.3f, utilization %.3f -> %.3f", scale,
                     gu.utilization(regions, self.container), gu.utilization(grown, self.container))
        return grown

    def _shrink(self, regions: Sequence[Region], factor: float) -> List[Region]:
        shrunk = []
        for r in regions:
            out = r.model_copy()
            out.w = max(min(self.params.min_width, r.w), r.w * factor)
            out.h = max(min(self.params.min_height, r.h), r.h * factor)
            shrunk.append(out)
        return shrunk


def expand(regions: Sequence[Region],
           container: Container,
           target_utilization: float,
           priority_of: Callable[[str], float] = lambda category: 1.0,
           min_gap: float = 0.0) -> List[Region]:
    """Functional entry point mirroring the optimizer's contract."""
    params = OptimizerParams(target_utilization=target_utilization, min_gap=min_gap)
    return SpaceUtilizationOptimizer(container, params, priority_of).expand(regions)
