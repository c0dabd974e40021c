"""
Infrastructure layer: External dependencies and I/O boundaries.

Contains adapters for:
- Configuration loading (YAML/JSON engine config, weights, taxonomies)
- Leaf-score tables (CSV/Excel via pandas)
- Observability (logging)

This is the only layer that performs I/O operations.
"""

# Most commonly used - exposed at top level for convenience
from infrastructure.config import (
    EngineConfig,
    load_engine_config,
    load_forest,
    load_leaf_scores,
    load_weight_config,
)

__all__ = [
    "load_engine_config",
    "EngineConfig",
    "load_forest",
    "load_weight_config",
    "load_leaf_scores",
]
