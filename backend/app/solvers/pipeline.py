"""
Constraint pipeline: oracle suggestions (or built-in strategies) in, valid
layout candidates out.

    IDLE -> REQUESTING_ORACLE -> PARSING_RESPONSE -> VALIDATING_CARDINALITY
         -> RESOLVING -> PRESENTING -> APPLYING | DISCARDED

Any oracle failure moves to FALLBACK_GENERATION instead of raising, so
generate_candidates() always returns at least one candidate. Every candidate
goes through the same three geometry stages: placement validation, space
optimization and the final shrink pass.
"""
from dataclasses import replace
from enum import Enum
from typing import Callable, Dict, List, Optional, Protocol, Sequence, Union
import logging

from ..prompts.layout_prompts import build_layout_prompt
from ..schemas.layout import CandidateSource, Container, Granularity, LayoutCandidate, Region
from ..schemas.policy import SHELF_POLICY, ZONE_POLICY, LayoutPolicy
from .errors import CardinalityMismatch, OracleResponseError, OracleUnavailable
from .metrics import compute_metrics
from .oracle import TextCompletionOracle
from .placement_validator import PlacementValidator
from .space_optimizer import OptimizerParams, SpaceUtilizationOptimizer
from .strategies import STRATEGIES, Strategy
from .suggestion_ingestor import SuggestionIngestor, parse_response

logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    IDLE = "idle"
    REQUESTING_ORACLE = "requesting_oracle"
    PARSING_RESPONSE = "parsing_response"
    VALIDATING_CARDINALITY = "validating_cardinality"
    RESOLVING = "resolving"
    PRESENTING = "presenting"
    APPLYING = "applying"
    DISCARDED = "discarded"
    FALLBACK_GENERATION = "fallback_generation"


class LayoutStore(Protocol):
    def replace_regions(self, container_id: str, regions: List[Region]) -> None:
        ...


class InMemoryLayoutStore:
    """Dict-backed store: container id -> region list."""

    def __init__(self):
        self.regions: Dict[str, List[Region]] = {}

    def replace_regions(self, container_id: str, regions: List[Region]) -> None:
        self.regions[container_id] = [r.model_copy() for r in regions]

    def get_regions(self, container_id: str) -> List[Region]:
        return [r.model_copy() for r in self.regions.get(container_id, [])]


class ConstraintPipeline:
    def __init__(self, policy: LayoutPolicy, oracle: Optional[TextCompletionOracle] = None):
        self.policy = policy
        self.oracle = oracle
        self.state = PipelineState.IDLE
        self.history: List[PipelineState] = [PipelineState.IDLE]
        self.latest_request_id = 0

    def _transition(self, state: PipelineState) -> None:
        logger.debug("pipeline %s -> %s", self.state.value, state.value)
        self.state = state
        self.history.append(state)

    # ========================================================================
    # GEOMETRY
    # ========================================================================

    def resolve_and_optimize(self,
                             raw_regions: Sequence[Region],
                             container: Container,
                             warnings: Optional[List[str]] = None) -> List[Region]:
        """Validator -> optimizer -> final pass. Deterministic for identical input."""
        p = self.policy
        validator = PlacementValidator(container, p.min_gap, p.min_width, p.min_height)
        placed = validator.resolve(raw_regions)

        params = OptimizerParams(
            target_utilization=p.target_utilization,
            tolerance=p.tolerance,
            min_gap=p.min_gap,
            max_expansion_ratio=p.max_expansion_ratio,
            min_width=p.min_width,
            min_height=p.min_height,
        )
        expanded = SpaceUtilizationOptimizer(container, params, p.priority_of).expand(placed)
        final = validator.shrink_to_fit(expanded)

        if warnings is not None:
            for msg in validator.warnings:
                if msg not in warnings:
                    warnings.append(msg)
        return final

    def _finish(self, candidate: LayoutCandidate, container: Container) -> LayoutCandidate:
        warnings = list(candidate.warnings)
        regions = self.resolve_and_optimize(candidate.rectangles, container, warnings)
        metrics = compute_metrics(regions, container, self.policy.target_utilization, self.policy.min_gap)
        return candidate.model_copy(update={"rectangles": regions, "metrics": metrics, "warnings": warnings})

    def _run_strategy(self, strategy: Strategy, regions: Sequence[Region], container: Container) -> List[Region]:
        p = self.policy
        if strategy.key == "flow":
            return strategy.fn(regions, container, p.priority_of,
                               exit_pattern=p.exit_pattern, high_draw_pattern=p.high_draw_pattern)
        if strategy.key == "priority":
            return strategy.fn(regions, container, p.priority_of, premium_fraction=p.premium_fraction)
        return strategy.fn(regions, container, p.priority_of)

    def strategy_candidates(self,
                            container: Container,
                            regions: Sequence[Region],
                            request_id: int = 0) -> List[LayoutCandidate]:
        """One finished candidate per built-in strategy."""
        candidates = []
        for strategy in STRATEGIES:
            raw = LayoutCandidate(
                name=strategy.name,
                description=strategy.description,
                rectangles=self._run_strategy(strategy, regions, container),
                source=CandidateSource.STRATEGY,
                strategy=strategy.key,
                request_id=request_id,
            )
            candidates.append(self._finish(raw, container))
        return candidates

    # ========================================================================
    # ORACLE PATH
    # ========================================================================

    async def _oracle_candidates(self,
                                 container: Container,
                                 existing: Sequence[Region],
                                 context_name: str,
                                 request_id: int) -> List[LayoutCandidate]:
        if self.oracle is None:
            logger.info("No layout oracle configured, using built-in strategies")
            return []

        self._transition(PipelineState.REQUESTING_ORACLE)
        prompt = build_layout_prompt(container, existing, self.policy, context_name)
        try:
            text = await self.oracle.complete(prompt)
        except OracleUnavailable as e:
            logger.warning("Layout oracle unavailable: %s", e)
            return []
        except Exception as e:
            logger.warning("Layout oracle call failed: %s", e)
            return []

        self._transition(PipelineState.PARSING_RESPONSE)
        ingestor = SuggestionIngestor(container, self.policy)
        try:
            payload = parse_response(text)
            self._transition(PipelineState.VALIDATING_CARDINALITY)
            raw = ingestor.candidates_from(payload, existing, request_id)
        except CardinalityMismatch as e:
            logger.warning("Oracle suggestions rejected, wrong %s count: %s", self.policy.region_noun, e)
            return []
        except OracleResponseError as e:
            logger.warning("Oracle response unusable: %s", e)
            return []
        except Exception:
            logger.exception("Failed to ingest oracle response")
            return []

        self._transition(PipelineState.RESOLVING)
        finished = []
        for candidate in raw:
            try:
                finished.append(self._finish(candidate, container))
            except Exception:
                logger.exception("Failed to resolve oracle candidate '%s'", candidate.name)
        return finished

    async def generate_candidates(self,
                                  container: Container,
                                  existing_regions: Sequence[Region],
                                  context_name: str = "") -> List[LayoutCandidate]:
        """Candidates for one container; never raises for oracle problems, never empty."""
        self.latest_request_id += 1
        request_id = self.latest_request_id
        self.state = PipelineState.IDLE
        self.history = [PipelineState.IDLE]

        existing = [r.model_copy() for r in existing_regions]
        if not existing:
            if self.policy.reposition:
                self._transition(PipelineState.PRESENTING)
                return [LayoutCandidate(
                    name=f"No {self.policy.payload_key.capitalize()} to Optimize",
                    description=f"Add some {self.policy.payload_key} first, then ask for layout suggestions",
                    rectangles=[],
                    source=CandidateSource.STRATEGY,
                    request_id=request_id,
                )]
            existing = self.policy.seed_regions(container, context_name)
            logger.info("No existing %s, seeded %d", self.policy.payload_key, len(existing))

        candidates = await self._oracle_candidates(container, existing, context_name, request_id)
        if not candidates:
            self._transition(PipelineState.FALLBACK_GENERATION)
            self._transition(PipelineState.RESOLVING)
            candidates = self.strategy_candidates(container, existing, request_id)

        self._transition(PipelineState.PRESENTING)
        return candidates

    # ========================================================================
    # PRESENTATION
    # ========================================================================

    def is_stale(self, candidates: Union[int, Sequence[LayoutCandidate]]) -> bool:
        """True when the candidates (or request id) predate the latest request."""
        if isinstance(candidates, int):
            return candidates != self.latest_request_id
        return any(c.request_id != self.latest_request_id for c in candidates)

    def apply(self, candidate: LayoutCandidate, store: LayoutStore, container_id: str) -> List[Region]:
        """Overwrite the container's region set with the candidate's regions."""
        self._transition(PipelineState.APPLYING)
        regions = [r.model_copy() for r in candidate.rectangles]
        store.replace_regions(container_id, regions)
        logger.info("Applied '%s' to %s (%d %s)", candidate.name, container_id,
                    len(regions), self.policy.payload_key)
        return regions

    def discard(self) -> None:
        self._transition(PipelineState.DISCARDED)


# ============================================================================
# CONVENIENCE FUNCTIONS
# ============================================================================

def policy_with(granularity: Granularity,
                min_gap: float,
                target_utilization: float,
                priority_of: Optional[Callable[[str], float]] = None) -> LayoutPolicy:
    base = SHELF_POLICY if granularity == Granularity.SHELF else ZONE_POLICY
    return replace(base, min_gap=min_gap, target_utilization=target_utilization, priority_fn=priority_of)


async def generate_candidates(container: Container,
                              existing_regions: Sequence[Region],
                              priority_of: Optional[Callable[[str], float]] = None,
                              min_gap: float = 0.0,
                              target_utilization: float = 0.75,
                              oracle: Optional[TextCompletionOracle] = None,
                              reposition: bool = False) -> List[LayoutCandidate]:
    granularity = Granularity.SHELF if reposition else Granularity.ZONE
    policy = policy_with(granularity, min_gap, target_utilization, priority_of)
    return await ConstraintPipeline(policy, oracle).generate_candidates(container, existing_regions)


def resolve_and_optimize(raw_regions: Sequence[Region],
                         container: Container,
                         min_gap: float = 0.0,
                         target_utilization: float = 0.75,
                         priority_of: Optional[Callable[[str], float]] = None) -> List[Region]:
    policy = LayoutPolicy(
        granularity=Granularity.ZONE,
        min_gap=min_gap,
        target_utilization=target_utilization,
        priority_fn=priority_of,
    )
    return ConstraintPipeline(policy).resolve_and_optimize(raw_regions, container)
