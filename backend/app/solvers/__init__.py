"""
Solvers package.
"""
from .errors import LayoutEngineError, OracleUnavailable, OracleResponseError, OracleMalformed, CardinalityMismatch
from .placement_validator import PlacementValidator, resolve_placements, finalize_placements
from .space_optimizer import SpaceUtilizationOptimizer, OptimizerParams, expand
from .strategies import STRATEGIES, flow_layout, priority_layout, grid_layout
from .suggestion_ingestor import SuggestionIngestor, extract_payload, parse_response
from .oracle import TextCompletionOracle, OpenAICompatibleOracle
from .pipeline import (
    ConstraintPipeline,
    PipelineState,
    LayoutStore,
    InMemoryLayoutStore,
    generate_candidates,
    resolve_and_optimize,
)

__all__ = [
    'LayoutEngineError',
    'OracleUnavailable',
    'OracleResponseError',
    'OracleMalformed',
    'CardinalityMismatch',
    'PlacementValidator',
    'resolve_placements',
    'finalize_placements',
    'SpaceUtilizationOptimizer',
    'OptimizerParams',
    'expand',
    'STRATEGIES',
    'flow_layout',
    'priority_layout',
    'grid_layout',
    'SuggestionIngestor',
    'extract_payload',
    'parse_response',
    'TextCompletionOracle',
    'OpenAICompatibleOracle',
    'ConstraintPipeline',
    'PipelineState',
    'LayoutStore',
    'InMemoryLayoutStore',
    'generate_candidates',
    'resolve_and_optimize',
]
