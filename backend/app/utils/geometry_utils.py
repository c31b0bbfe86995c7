"""
Geometry utility helpers for axis-aligned rectangle operations used by solvers.

Provides:
- boxes_overlap(...) / overlaps(a, b, min_gap)
- in_bounds(region, container)
- find_overlapping_pairs(regions, min_gap)
- drag_conflicts(dragged, others, min_gap)
- clamp_region(region, container, min_w, min_h)
- grid_positions(limit, step)
- total_area / utilization
- union_area / covered_area / overlap_area / boundary_violation / walkable_ratio (shapely)

The overlap and bounds checks run in the hot loops of the grid search and the
interactive drag path, so they take plain floats and allocate nothing.
"""
from typing import Any, List, Sequence, Tuple
import numpy as np
from shapely.geometry import box
from shapely.ops import unary_union

EPS = 1e-9


def boxes_overlap(ax: float, ay: float, aw: float, ah: float,
                  bx: float, by: float, bw: float, bh: float,
                  min_gap: float = 0.0) -> bool:
    """True unless the boxes are at least min_gap apart along x or y."""
    return not (
        ax + aw + min_gap <= bx + EPS or
        bx + bw + min_gap <= ax + EPS or
        ay + ah + min_gap <= by + EPS or
        by + bh + min_gap <= ay + EPS
    )


def overlaps(a: Any, b: Any, min_gap: float = 0.0) -> bool:
    """Separating-axis test for two objects exposing x, y, w, h."""
    return boxes_overlap(a.x, a.y, a.w, a.h, b.x, b.y, b.w, b.h, min_gap)


def box_in_bounds(x: float, y: float, w: float, h: float, width: float, height: float) -> bool:
    return x >= -EPS and y >= -EPS and x + w <= width + EPS and y + h <= height + EPS


def in_bounds(region: Any, container: Any) -> bool:
    return box_in_bounds(region.x, region.y, region.w, region.h, container.width, container.height)


def find_overlapping_pairs(regions: Sequence[Any], min_gap: float = 0.0) -> List[Tuple[int, int]]:
    """Index pairs (i, j), i < j, of regions closer than min_gap."""
    pairs = []
    n = len(regions)
    for i in range(n):
        for j in range(i + 1, n):
            if overlaps(regions[i], regions[j], min_gap):
                pairs.append((i, j))
    return pairs


def drag_conflicts(dragged: Any, others: Sequence[Any], min_gap: float = 0.0) -> List[str]:
    """Ids of regions the dragged region currently conflicts with.

    Called once per pointer-move tick; the dragged region itself is skipped by id.
    """
    conflicts = []
    for other in others:
        if other.id == dragged.id:
            continue
        if overlaps(dragged, other, min_gap):
            conflicts.append(other.id)
    return conflicts


def clamp_region(region: Any, container: Any, min_w: float = 0.0, min_h: float = 0.0) -> None:
    """Clamp size into [min, container] and position into the container, in place."""
    min_w = min(min_w, container.width)
    min_h = min(min_h, container.height)
    region.w = float(np.clip(region.w, max(min_w, EPS), container.width))
    region.h = float(np.clip(region.h, max(min_h, EPS), container.height))
    region.x = float(np.clip(region.x, 0.0, container.width - region.w))
    region.y = float(np.clip(region.y, 0.0, container.height - region.h))


def grid_positions(limit: float, step: float) -> List[float]:
    """Row-major search coordinates 0, step, 2*step, ... <= limit, plus limit itself."""
    if limit < -EPS:
        return []
    limit = max(0.0, limit)
    count = int(np.floor(limit / step + EPS))
    # multiply instead of accumulating so positions don't drift
    positions = [i * step for i in range(count + 1)]
    if limit - positions[-1] > EPS:
        positions.append(limit)
    return positions


def total_area(regions: Sequence[Any]) -> float:
    return float(sum(r.w * r.h for r in regions))


def utilization(regions: Sequence[Any], container: Any) -> float:
    """Fraction (not percent) of container area claimed by the regions."""
    area = container.width * container.height
    if area <= 0:
        return 0.0
    return total_area(regions) / area


def _to_box(region: Any):
    return box(region.x, region.y, region.x + region.w, region.y + region.h)


def union_area(regions: Sequence[Any]) -> float:
    """Area covered by at least one region (overlaps counted once)."""
    if not regions:
        return 0.0
    return float(unary_union([_to_box(r) for r in regions]).area)


def overlap_area(regions: Sequence[Any]) -> float:
    """Total pairwise intersection area between regions."""
    boxes = [_to_box(r) for r in regions]
    total = 0.0
    for i, b1 in enumerate(boxes):
        for b2 in boxes[i + 1:]:
            if b1.intersects(b2):
                total += b1.intersection(b2).area
    return float(total)


def boundary_violation(regions: Sequence[Any], container: Any) -> float:
    """Total region area lying outside the container."""
    bounds = box(0, 0, container.width, container.height)
    total = 0.0
    for r in regions:
        b = _to_box(r)
        if not bounds.contains(b):
            total += b.difference(bounds).area
    return float(total)


def walkable_ratio(regions: Sequence[Any], container: Any, aisle_width: float) -> float:
    """Share of free floor that is at least aisle_width wide.

    Free space is the container minus the regions; a morphological opening
    (erode then dilate by half the aisle) drops slivers nobody can walk through.
    """
    floor = box(0, 0, container.width, container.height)
    if regions:
        free = floor.difference(unary_union([_to_box(r) for r in regions]))
    else:
        free = floor
    if free.is_empty or free.area <= EPS:
        return 0.0
    if aisle_width <= 0:
        return 1.0
    walkable = free.buffer(-aisle_width / 2, join_style=2).buffer(aisle_width / 2, join_style=2)
    walkable = walkable.intersection(free)
    return float(np.clip(walkable.area / free.area, 0.0, 1.0))


def covered_area(regions: Sequence[Any], container: Any) -> float:
    """Container area covered by at least one region; parts outside don't count."""
    if not regions:
        return 0.0
    floor = box(0, 0, container.width, container.height)
    return float(unary_union([_to_box(r) for r in regions]).intersection(floor).area)
