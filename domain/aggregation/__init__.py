"""
Weighted aggregation over taxonomy forests.

Provides:
- Weight configuration with explicit override -> level default -> fallback resolution
- Post-order rollup (weighted mean or max) keyed by stable node id
- Rollup tables for reporting

Most functions are pure (depend only on numpy, pandas); *_and_save helpers write outputs to disk.
"""

from domain.aggregation.rollup import AggregationMode, aggregate, weighted_mean
from domain.aggregation.tables import compute_rollup_table, compute_rollup_table_and_save
from domain.aggregation.weights import (
    DEFAULT_LEVEL_WEIGHTS,
    MAX_LEVEL,
    WeightConfig,
    clamp_weight,
    parse_weight_config,
    prune_orphan_overrides,
    resolve_effective_weight,
    validate_weight_config,
)

__all__ = [
    "aggregate",
    "AggregationMode",
    "weighted_mean",
    "WeightConfig",
    "DEFAULT_LEVEL_WEIGHTS",
    "MAX_LEVEL",
    "resolve_effective_weight",
    "validate_weight_config",
    "parse_weight_config",
    "clamp_weight",
    "prune_orphan_overrides",
    "compute_rollup_table",
    "compute_rollup_table_and_save",
]
