"""
Configuration management: models, loading, and validation.

Handles:
- EngineConfig: Main engine configuration (aggregation mode, weights, audit retention)
- Weight configuration files (YAML/JSON)
- Taxonomy forests and leaf-score files

The loader module performs file I/O; models are pure Pydantic classes.
"""

from infrastructure.config.loader import (
    load_engine_config,
    load_forest,
    load_leaf_scores,
    load_weight_config,
)
from infrastructure.config.models import (
    AuditConfig,
    # Main config
    EngineConfig,
    # Column mapping
    ScoreColumnsConfig,
)

__all__ = [
    # Main config (most commonly used)
    "EngineConfig",
    "load_engine_config",
    # Sub-configs
    "AuditConfig",
    "ScoreColumnsConfig",
    # Loaders
    "load_weight_config",
    "load_forest",
    "load_leaf_scores",
]
