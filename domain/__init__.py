"""
Domain layer: Business logic with minimal external dependencies.

Contains:
- taxonomy: Tree model and position-derived hierarchical identifiers
- aggregation: Weight configuration and weighted score rollups
- audit: Field-level audit diffs
- errors: Configuration / invariant / data-quality errors
"""

from domain.errors import ConfigurationError, InvariantViolation, NonFiniteScoreError, TaxonomyEngineError
from domain.taxonomy import TreeNode, assign_identifiers

__all__ = [
    "TreeNode",
    "assign_identifiers",
    "TaxonomyEngineError",
    "ConfigurationError",
    "InvariantViolation",
    "NonFiniteScoreError",
]
