from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field
from typing import List, Optional
import logging

from backend.app.schemas.layout import Container, Granularity, LayoutReport, Region
from backend.app.schemas.policy import policy_for
from backend.app.solvers.metrics import layout_report
from backend.app.utils import geometry_utils as gu

router = APIRouter()
logger = logging.getLogger(__name__)


class ValidationRequest(BaseModel):
    container: Container
    regions: List[Region]
    granularity: Granularity = Granularity.ZONE
    min_gap: Optional[float] = Field(None, ge=0)


class ValidationResponse(BaseModel):
    is_valid: bool
    issues: List[str] = []
    report: LayoutReport


class DragCheckRequest(BaseModel):
    dragged: Region
    others: List[Region] = []
    container: Optional[Container] = None
    min_gap: float = Field(0.0, ge=0)


class DragCheckResponse(BaseModel):
    valid: bool
    conflicts: List[str] = []
    in_bounds: bool = True


@router.post("/validate", response_model=ValidationResponse)
async def validate_layout(request: ValidationRequest):
    """
    Check a region set for overlaps, gap violations and boundary violations
    """
    try:
        min_gap = request.min_gap if request.min_gap is not None else policy_for(request.granularity).min_gap
        issues = []

        names = {r.id: r.label or r.id for r in request.regions}
        for i, j in gu.find_overlapping_pairs(request.regions, min_gap):
            a, b = request.regions[i], request.regions[j]
            if gu.overlaps(a, b, 0.0):
                issues.append(f"'{names[a.id]}' overlaps with '{names[b.id]}'")
            else:
                issues.append(f"'{names[a.id]}' is closer than {min_gap:g}m to '{names[b.id]}'")

        for r in request.regions:
            if not gu.in_bounds(r, request.container):
                issues.append(f"'{names[r.id]}' extends outside the {request.container.width:g}m x "
                              f"{request.container.height:g}m boundary")

        report = layout_report(request.regions, request.container, min_gap)
        return ValidationResponse(is_valid=len(issues) == 0, issues=issues, report=report)
    except Exception as e:
        logger.exception("[validate] error: %s", str(e))
        raise HTTPException(status_code=500, detail=f"Validation error: {str(e)}")


@router.post("/drag-check", response_model=DragCheckResponse)
async def drag_check(request: DragCheckRequest):
    """Conflicts for a region being dragged; cheap enough to call every pointer move."""
    conflicts = gu.drag_conflicts(request.dragged, request.others, request.min_gap)
    inside = request.container is None or gu.in_bounds(request.dragged, request.container)
    return DragCheckResponse(valid=not conflicts and inside, conflicts=conflicts, in_bounds=inside)
