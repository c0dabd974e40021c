"""Weighted rollup of node scores through a taxonomy forest."""

import logging
import math
from collections.abc import Callable
from enum import Enum

import numpy as np

from domain.aggregation.weights import WeightConfig, resolve_effective_weight, validate_weight_config
from domain.errors import InvariantViolation, NonFiniteScoreError
from domain.taxonomy.tree import Forest, TreeNode

logger = logging.getLogger(__name__)

LeafScore = Callable[[TreeNode], float]


class AggregationMode(str, Enum):
    """How an internal node combines its children's values."""

    WEIGHTED = "weighted"
    MAX = "max"


def aggregate(
    forest: Forest,
    weights: WeightConfig,
    leaf_score: LeafScore,
    *,
    mode: AggregationMode = AggregationMode.WEIGHTED,
    strict: bool = False,
) -> dict[str, float]:
    """
    Roll leaf scores up to every node of the forest (post-order).

    A leaf (no children, or an empty child list) takes ``leaf_score(node)``.
    An internal node takes the weighted mean of its children's values, each
    child weighted by its effective weight at its own depth and normalized
    against the sum over its siblings. When that sum is zero the plain
    arithmetic mean is used instead. In MAX mode the largest child value wins.

    Non-finite leaf scores are never coerced: they propagate into the parent
    values (logged as a warning), or raise NonFiniteScoreError when strict.

    Args:
        forest: Root nodes; depth for weight lookup is 1 at the roots
        weights: Weight configuration (validated before traversal)
        leaf_score: Scoring function for leaf nodes
        mode: Weighted mean (default) or max
        strict: Raise on non-finite leaf scores instead of propagating them

    Returns:
        Mapping of node id -> aggregated value

    Raises:
        ConfigurationError: If the weight configuration is invalid
        InvariantViolation: If two nodes share an id
        NonFiniteScoreError: If strict and a leaf score is NaN or infinite
    """
    validate_weight_config(weights)
    mode = AggregationMode(mode)

    values: dict[str, float] = {}
    seen: set[str] = set()

    def visit(node: TreeNode, depth: int) -> float:
        # Ids are unique across the whole forest, ancestors included
        if node.id in seen:
            raise InvariantViolation(f"Duplicate node id in forest: {node.id!r}")
        seen.add(node.id)

        if not node.children:
            value = float(leaf_score(node))
            if not math.isfinite(value):
                if strict:
                    raise NonFiniteScoreError(node.id, value)
                logger.warning("Non-finite leaf score %r for node %s (%s)", value, node.id, node.hierarchical_id)
        else:
            child_values = [visit(child, depth + 1) for child in node.children]
            if mode is AggregationMode.MAX:
                value = float(np.max(child_values))
            else:
                child_weights = [resolve_effective_weight(weights, child.id, depth + 1) for child in node.children]
                value = weighted_mean(child_values, child_weights)

        values[node.id] = value
        return value

    for root in forest:
        visit(root, 1)

    logger.debug("Aggregated %d nodes (mode=%s)", len(values), mode.value)
    return values


def weighted_mean(values: list[float], weights: list[float]) -> float:
    """Weighted mean that falls back to the unweighted mean when all weights are zero."""
    if not values:
        raise ValueError("weighted_mean() needs at least one value")
    if sum(weights) == 0:
        return float(np.mean(values))
    return float(np.average(values, weights=weights))
