"""
Deterministic layout strategies.

Each strategy rearranges an existing region set without resizing it. Output
keeps one region per input, with the same id, in the same order; positions
are clamped so nothing starts outside the container, but the result is not
necessarily overlap-free. The pipeline runs every strategy output through
the placement validator and the optimizer afterwards.
"""
from dataclasses import dataclass
from typing import Callable, Dict, List, Sequence
import logging
import math
import re

import numpy as np

from ..schemas.layout import Container, Region
from ..schemas.policy import EXIT_PATTERN, HIGH_DRAW_PATTERN

logger = logging.getLogger(__name__)

PriorityFn = Callable[[str], float]


def _matches(pattern: str, region: Region) -> bool:
    return bool(re.search(pattern, f"{region.category} {region.label}", re.IGNORECASE))


def _place(region: Region, x: float, y: float, container: Container) -> Region:
    """Copy of region at (x, y), clamped to [0, W - w] x [0, H - h]."""
    out = region.model_copy()
    out.x = float(np.clip(x, 0.0, max(0.0, container.width - region.w)))
    out.y = float(np.clip(y, 0.0, max(0.0, container.height - region.h)))
    return out


# ============================================================================
# FLOW
# ============================================================================

def flow_layout(regions: Sequence[Region],
                container: Container,
                priority_of: PriorityFn = lambda category: 1.0,
                exit_pattern: str = EXIT_PATTERN,
                high_draw_pattern: str = HIGH_DRAW_PATTERN) -> List[Region]:
    """Customer-flow arrangement.

    Checkout-like regions stack up from the far (exit) corner, high-draw
    regions line up from the entrance corner, everything else is tiled on a
    grid sized from the median region.
    """
    if not regions:
        return []

    typical_w = float(np.median([r.w for r in regions]))
    typical_h = float(np.median([r.h for r in regions]))
    cols = max(1, int(math.floor(container.width / typical_w)))
    cell_w = container.width / cols

    out: List[Region] = [None] * len(regions)  # type: ignore[list-item]
    exit_y = container.height
    draw_x = 0.0
    draw_row_h = 0.0
    rest = []

    for i, r in enumerate(regions):
        if _matches(exit_pattern, r):
            exit_y -= r.h
            out[i] = _place(r, container.width - r.w, exit_y, container)
        elif _matches(high_draw_pattern, r):
            out[i] = _place(r, draw_x, 0.0, container)
            draw_x += r.w
            draw_row_h = max(draw_row_h, r.h)
        else:
            rest.append(i)

    for k, i in enumerate(rest):
        row, col = divmod(k, cols)
        out[i] = _place(regions[i], col * cell_w, draw_row_h + row * typical_h, container)

    return out


# ============================================================================
# PRIORITY
# ============================================================================

def priority_layout(regions: Sequence[Region],
                    container: Container,
                    priority_of: PriorityFn = lambda category: 1.0,
                    premium_fraction: float = 0.35) -> List[Region]:
    """Revenue arrangement: the top-priority category gets the right-hand
    premium strip, the rest alternate between two columns on the left."""
    if not regions:
        return []

    # first category with the highest priority wins ties
    top_category = regions[0].category
    top_priority = priority_of(top_category)
    for r in regions[1:]:
        p = priority_of(r.category)
        if p > top_priority:
            top_category, top_priority = r.category, p

    premium_x = container.width * (1.0 - premium_fraction)
    column_w = premium_x / 2
    premium_y = 0.0
    column_y = [0.0, 0.0]
    k = 0

    out = []
    for r in regions:
        if r.category == top_category:
            out.append(_place(r, premium_x, premium_y, container))
            premium_y += r.h
        else:
            col = k % 2
            out.append(_place(r, col * column_w, column_y[col], container))
            column_y[col] += r.h
            k += 1

    logger.debug("priority layout: premium category %s (%.2f)", top_category, top_priority)
    return out


# ============================================================================
# GRID
# ============================================================================

def grid_layout(regions: Sequence[Region],
                container: Container,
                priority_of: PriorityFn = lambda category: 1.0) -> List[Region]:
    """Operational arrangement: one region per equal grid cell, input order."""
    n = len(regions)
    if n == 0:
        return []
    cols = int(math.ceil(math.sqrt(n)))
    rows = int(math.ceil(n / cols))
    cell_w = container.width / cols
    cell_h = container.height / rows

    out = []
    for i, r in enumerate(regions):
        row, col = divmod(i, cols)
        out.append(_place(r, col * cell_w, row * cell_h, container))
    return out


@dataclass(frozen=True)
class Strategy:
    key: str
    name: str
    description: str
    fn: Callable[..., List[Region]]


STRATEGIES: List[Strategy] = [
    Strategy(
        key="flow",
        name="Customer Flow Optimized Layout",
        description="Strategic positioning to guide customers through high-value areas with natural flow patterns",
        fn=flow_layout,
    ),
    Strategy(
        key="priority",
        name="Revenue Maximized Layout",
        description="High-margin categories in prime locations along the power wall",
        fn=priority_layout,
    ),
    Strategy(
        key="grid",
        name="Operational Efficiency Layout",
        description="Regular grid that minimizes staff movement and simplifies restocking",
        fn=grid_layout,
    ),
]

STRATEGY_BY_KEY: Dict[str, Strategy] = {s.key: s for s in STRATEGIES}
