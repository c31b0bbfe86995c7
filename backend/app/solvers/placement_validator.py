"""
Greedy placement validator and final overlap-resolution pass.

resolve() turns an arbitrary rectangle set (overlapping, out of bounds,
oversized) into one of the same cardinality that fits the container with no
two regions closer than min_gap. Largest regions are placed first, which keeps
fragmentation down; anything that can't keep its position gets the first free
spot of a row-major grid search.

shrink_to_fit() is the last stage of the pipeline. It runs after the space
optimizer, which can make independently-grown regions collide again, and
trims instead of relocating. Regions are processed in stable input order, so
when two regions grew into the same free space the earlier one keeps it.
"""
from typing import List, Optional, Sequence, Set, Tuple
import logging
import math

from ..schemas.layout import Container, Region
from ..utils import geometry_utils as gu

logger = logging.getLogger(__name__)

MIN_SEARCH_STEP = 0.2          # meters
SEARCH_STEP_FRACTION = 0.01    # of the shorter container side
RELOCATION_SCALES = (1.0, 0.8, 0.6, 0.4, 0.2)


def search_step(container: Container) -> float:
    return max(MIN_SEARCH_STEP, SEARCH_STEP_FRACTION * min(container.width, container.height))


class PlacementValidator:
    """Bounds/overlap repair for one container.

    One instance serves one candidate: resolve() records which regions found no
    free spot (unplaced_ids) so that shrink_to_fit() can deal with them.
    """

    def __init__(self,
                 container: Container,
                 min_gap: float = 0.0,
                 min_width: float = 0.5,
                 min_height: float = 0.3,
                 step: Optional[float] = None):
        self.container = container
        self.min_gap = max(0.0, min_gap)
        self.min_width = min(min_width, container.width)
        self.min_height = min(min_height, container.height)
        self.step = step if step and step > 0 else search_step(container)
        self.unplaced_ids: Set[str] = set()
        self.warnings: List[str] = []

    # ========================================================================
    # SEARCH PRIMITIVES
    # ========================================================================

    def _fits(self, x: float, y: float, w: float, h: float, placed: Sequence[Region]) -> bool:
        if not gu.box_in_bounds(x, y, w, h, self.container.width, self.container.height):
            return False
        for p in placed:
            if gu.boxes_overlap(x, y, w, h, p.x, p.y, p.w, p.h, self.min_gap):
                return False
        return True

    def find_position(self, w: float, h: float, placed: Sequence[Region]) -> Optional[Tuple[float, float]]:
        """First row-major grid position where a w x h box clears every placed region."""
        xs = gu.grid_positions(self.container.width - w, self.step)
        for y in gu.grid_positions(self.container.height - h, self.step):
            for x in xs:
                if self._fits(x, y, w, h, placed):
                    return (x, y)
        return None

    def _sanitize(self, region: Region) -> None:
        """Replace non-finite numbers and clamp oversize dimensions to the container."""
        if not math.isfinite(region.x):
            region.x = 0.0
        if not math.isfinite(region.y):
            region.y = 0.0
        if not math.isfinite(region.w) or region.w <= 0:
            region.w = self.min_width
        if not math.isfinite(region.h) or region.h <= 0:
            region.h = self.min_height
        if region.w > self.container.width + gu.EPS or region.h > self.container.height + gu.EPS:
            msg = (f"Region '{region.label or region.id}' ({region.w:.2f}x{region.h:.2f}) exceeds the "
                   f"{self.container.width:g}x{self.container.height:g} container; clamped")
            logger.warning(msg)
            self.warnings.append(msg)
            region.w = min(region.w, self.container.width)
            region.h = min(region.h, self.container.height)

    # ========================================================================
    # RESOLVE (relocate mode)
    # ========================================================================

    def resolve(self, regions: Sequence[Region]) -> List[Region]:
        """Bounds-valid, non-overlapping copy of regions, in input order."""
        self.unplaced_ids = set()
        working = [r.model_copy() for r in regions]
        for r in working:
            self._sanitize(r)

        # Largest first; sorted() is stable so equal areas keep input order
        order = sorted(range(len(working)), key=lambda i: -working[i].area)
        placed: List[Region] = []

        for i in order:
            r = working[i]
            if not self._fits(r.x, r.y, r.w, r.h, placed):
                pos = self.find_position(r.w, r.h, placed)
                if pos is None:
                    logger.warning(f"No free position for region {r.id}, placing at origin")
                    r.x, r.y = 0.0, 0.0
                    self.unplaced_ids.add(r.id)
                else:
                    r.x, r.y = pos
            placed.append(r)

        logger.debug("resolve: %d regions, %d unplaced", len(working), len(self.unplaced_ids))
        return working

    # ========================================================================
    # FINAL PASS (shrink mode)
    # ========================================================================

    def _trim_against(self, r: Region, f: Region) -> bool:
        """Trim r on the side facing f until min_gap holds. Picks the trim losing least area."""
        g = self.min_gap
        options = []

        new_w = f.x - g - r.x                      # pull right edge back
        if self.min_width - gu.EPS <= new_w < r.w:
            options.append((r.x, r.y, new_w, r.h))
        new_x = f.x + f.w + g                      # push left edge forward
        new_w = r.x + r.w - new_x
        if self.min_width - gu.EPS <= new_w and new_x > r.x:
            options.append((new_x, r.y, new_w, r.h))
        new_h = f.y - g - r.y                      # pull bottom edge up
        if self.min_height - gu.EPS <= new_h < r.h:
            options.append((r.x, r.y, r.w, new_h))
        new_y = f.y + f.h + g                      # push top edge down
        new_h = r.y + r.h - new_y
        if self.min_height - gu.EPS <= new_h and new_y > r.y:
            options.append((r.x, new_y, r.w, new_h))

        if not options:
            return False
        r.x, r.y, r.w, r.h = max(options, key=lambda o: o[2] * o[3])
        return True

    def _relocate(self, r: Region, finalized: Sequence[Region]) -> bool:
        """Grid-search a spot for r at progressively smaller sizes."""
        base_w, base_h = r.w, r.h
        sizes = [(max(self.min_width, base_w * s), max(self.min_height, base_h * s)) for s in RELOCATION_SCALES]
        sizes.append((self.min_width, self.min_height))
        for w, h in sizes:
            pos = self.find_position(w, h, finalized)
            if pos is not None:
                r.x, r.y = pos
                r.w, r.h = w, h
                return True
        r.w, r.h = self.min_width, self.min_height
        gu.clamp_region(r, self.container, self.min_width, self.min_height)
        return False

    def shrink_to_fit(self, regions: Sequence[Region]) -> List[Region]:
        """Final pass: trim each region against the ones before it in input order.

        Regions resolve() could not place go last, so they are the ones that
        give way.
        """
        working = [r.model_copy() for r in regions]
        finalized: List[Region] = []
        order = sorted(working, key=lambda r: r.id in self.unplaced_ids)

        for r in order:
            self._sanitize(r)
            gu.clamp_region(r, self.container, self.min_width, self.min_height)

            needs_relocation = False
            for f in finalized:
                # trimming only ever shrinks r, so conflicts cleared earlier stay cleared
                if gu.overlaps(r, f, self.min_gap) and not self._trim_against(r, f):
                    needs_relocation = True
                    break

            if needs_relocation and not self._relocate(r, finalized):
                msg = f"Region '{r.label or r.id}' could not be fitted even at minimum size"
                logger.warning(msg)
                self.warnings.append(msg)
            finalized.append(r)

        return working


# ============================================================================
# CONVENIENCE FUNCTIONS
# ============================================================================

def resolve_placements(regions: Sequence[Region], container: Container, min_gap: float = 0.0) -> List[Region]:
    return PlacementValidator(container, min_gap).resolve(regions)


def finalize_placements(regions: Sequence[Region], container: Container, min_gap: float = 0.0,
                        min_width: float = 0.5, min_height: float = 0.3) -> List[Region]:
    return PlacementValidator(container, min_gap, min_width, min_height).shrink_to_fit(regions)
