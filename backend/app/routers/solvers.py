from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from typing import List, Optional
from dataclasses import replace
from functools import lru_cache
import logging
import time

# Absolute package imports keep the package context intact when uvicorn loads
# this module via the package path.
from backend.app.schemas.layout import CandidateSource, Container, Granularity, LayoutCandidate, LayoutMetrics, Region
from backend.app.schemas.policy import LayoutPolicy, policy_for
from backend.app.solvers.metrics import compute_metrics
from backend.app.solvers.oracle import TextCompletionOracle, oracle_from_settings
from backend.app.solvers.pipeline import ConstraintPipeline

router = APIRouter()
logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_oracle() -> Optional[TextCompletionOracle]:
    """Oracle built from environment settings; None when no key is configured."""
    return oracle_from_settings()


class PolicyOverrides(BaseModel):
    min_gap: Optional[float] = Field(None, ge=0)
    target_utilization: Optional[float] = Field(None, gt=0, le=1)

    def apply_to(self, policy: LayoutPolicy) -> LayoutPolicy:
        changes = {}
        if self.min_gap is not None:
            changes["min_gap"] = self.min_gap
        if self.target_utilization is not None:
            changes["target_utilization"] = self.target_utilization
        return replace(policy, **changes) if changes else policy


class GenerationRequest(PolicyOverrides):
    container: Container
    regions: List[Region] = []
    granularity: Granularity = Granularity.ZONE
    context_name: str = ""


class GenerationResponse(BaseModel):
    candidates: List[LayoutCandidate]
    success: bool
    message: str
    request_id: int
    used_oracle: bool = False


class ResolveRequest(PolicyOverrides):
    container: Container
    regions: List[Region]
    granularity: Granularity = Granularity.ZONE


class ResolveResponse(BaseModel):
    regions: List[Region]
    metrics: LayoutMetrics
    warnings: List[str] = []


@router.post("/generate", response_model=GenerationResponse)
async def generate_layouts(request: GenerationRequest,
                           oracle: Optional[TextCompletionOracle] = Depends(get_oracle)):
    """Candidate layouts for one container (oracle first, built-in strategies as fallback)."""
    try:
        t0 = time.time()
        logger.info(
            "[generate] request received: regions=%d, container=(%s, %s), granularity=%s, oracle=%s",
            len(request.regions), request.container.width, request.container.height,
            request.granularity.value, oracle is not None,
        )
        policy = request.apply_to(policy_for(request.granularity))
        pipeline = ConstraintPipeline(policy, oracle)
        candidates = await pipeline.generate_candidates(request.container, request.regions, request.context_name)

        resp = GenerationResponse(
            candidates=candidates,
            success=True,
            message=f"Generated {len(candidates)} layout candidate(s)",
            request_id=pipeline.latest_request_id,
            used_oracle=any(c.source == CandidateSource.ORACLE for c in candidates),
        )
        logger.info(
            "[generate] success: candidates=%d, time=%.2fs, oracle=%s",
            len(candidates), time.time() - t0, resp.used_oracle,
        )
        return resp
    except Exception as e:
        logger.exception("[generate] error: %s", str(e))
        raise HTTPException(status_code=500, detail=f"Generation error: {str(e)}")


@router.post("/resolve", response_model=ResolveResponse)
async def resolve_layout(request: ResolveRequest):
    """Repair and optimize one region set without asking the oracle."""
    try:
        logger.info(
            "[resolve] request received: regions=%d, container=(%s, %s), granularity=%s",
            len(request.regions), request.container.width, request.container.height, request.granularity.value,
        )
        policy = request.apply_to(policy_for(request.granularity))
        pipeline = ConstraintPipeline(policy)
        warnings: List[str] = []
        regions = pipeline.resolve_and_optimize(request.regions, request.container, warnings)
        metrics = compute_metrics(regions, request.container, policy.target_utilization, policy.min_gap)
        logger.info("[resolve] success: utilization=%.1f%%, warnings=%d", metrics.utilization, len(warnings))
        return ResolveResponse(regions=regions, metrics=metrics, warnings=warnings)
    except Exception as e:
        logger.exception("[resolve] error: %s", str(e))
        raise HTTPException(status_code=500, detail=f"Resolve error: {str(e)}")
