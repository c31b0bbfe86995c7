"""
Benchmark harness for evaluating and comparing layout strategies.
Collects metrics on layout quality, validity and runtime.
"""
from typing import Dict, List, Optional
import time
import logging
from dataclasses import dataclass

from ...utils import geometry_utils as gu
from ..pipeline import ConstraintPipeline
from ..strategies import STRATEGIES, Strategy
from .cases import BenchmarkCase, BENCHMARK_CASES

logger = logging.getLogger(__name__)


@dataclass
class BenchmarkResult:
    """Results from a single strategy run."""
    case_name: str
    strategy: str
    runtime_seconds: float
    region_count: int
    utilization: float        # percent of container covered
    efficiency: float
    accessibility: float
    overlap_area: float
    boundary_violation: float
    gap_violations: int
    warnings: int


class BenchmarkRunner:
    def __init__(self, cases: Optional[List[BenchmarkCase]] = None):
        """Initialize with optional specific test cases."""
        self.cases = cases or BENCHMARK_CASES

    def run_benchmark(self,
                      strategies: Optional[List[Strategy]] = None,
                      runs_per_case: int = 1) -> List[BenchmarkResult]:
        """Run every case through every strategy.

        Args:
            strategies: Strategies to test (all built-in ones by default)
            runs_per_case: Repetitions per case, for timing stability

        Returns:
            List of BenchmarkResults for all runs
        """
        strategies = strategies or STRATEGIES
        results = []

        for case in self.cases:
            logger.info(f"Running benchmark case: {case.name}")
            for strategy in strategies:
                for _ in range(runs_per_case):
                    try:
                        results.append(self._run_single_case(case, strategy))
                    except Exception:
                        # Log full traceback to help diagnose failures during benchmarks
                        logger.exception(f"Error in {case.name} with {strategy.key}")
                        continue

        return results

    def _run_single_case(self, case: BenchmarkCase, strategy: Strategy) -> BenchmarkResult:
        """Run one case through one strategy and the full resolve pipeline."""
        pipeline = ConstraintPipeline(case.policy)
        start_time = time.time()
        candidates = pipeline.strategy_candidates(case.container, case.regions)
        candidate = next(c for c in candidates if c.strategy == strategy.key)
        runtime = time.time() - start_time

        regions = candidate.rectangles
        return BenchmarkResult(
            case_name=case.name,
            strategy=strategy.key,
            runtime_seconds=runtime,
            region_count=len(regions),
            utilization=candidate.metrics.utilization,
            efficiency=candidate.metrics.efficiency,
            accessibility=candidate.metrics.accessibility,
            overlap_area=gu.overlap_area(regions),
            boundary_violation=gu.boundary_violation(regions, case.container),
            gap_violations=len(gu.find_overlapping_pairs(regions, case.policy.min_gap)),
            warnings=len(candidate.warnings),
        )

    @staticmethod
    def summarize(results: List[BenchmarkResult]) -> Dict[str, Dict[str, float]]:
        """Mean utilization/efficiency/accessibility per strategy."""
        summary: Dict[str, Dict[str, float]] = {}
        for key in sorted({r.strategy for r in results}):
            rows = [r for r in results if r.strategy == key]
            summary[key] = {
                "utilization": sum(r.utilization for r in rows) / len(rows),
                "efficiency": sum(r.efficiency for r in rows) / len(rows),
                "accessibility": sum(r.accessibility for r in rows) / len(rows),
            }
        return summary
