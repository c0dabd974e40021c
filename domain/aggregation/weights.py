"""Weight configuration and effective-weight resolution."""

import math
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from domain.errors import ConfigurationError
from domain.taxonomy.tree import Forest, collect_node_ids

MAX_LEVEL = 5
DEFAULT_FALLBACK_WEIGHT = 1.0
DEFAULT_LEVEL_WEIGHTS: dict[int, float] = {level: 1.0 for level in range(1, MAX_LEVEL + 1)}

# Bounds applied to weights entered by users
MIN_USER_WEIGHT = 0.1
MAX_USER_WEIGHT = 5.0

_LEVEL_KEY = re.compile(r"^[lL]?(\d+)$")


class WeightConfig(BaseModel):
    """Per-level default weights plus per-node overrides for one taxonomy."""

    model_config = ConfigDict(populate_by_name=True)

    level_defaults: dict[int, float] = Field(
        default_factory=lambda: dict(DEFAULT_LEVEL_WEIGHTS),
        alias="levelDefaults",
        description="Depth level (1-5) -> default weight.",
    )
    node_overrides: dict[str, float] = Field(
        default_factory=dict,
        alias="nodeOverrides",
        description="Node id -> explicit weight, takes precedence over the level default.",
    )
    fallback_weight: float = Field(
        default=DEFAULT_FALLBACK_WEIGHT,
        alias="fallbackWeight",
        description="Used when neither an override nor a level default applies.",
    )

    @field_validator("level_defaults", mode="before")
    @classmethod
    def _normalize_level_keys(cls, value: Any) -> Any:
        # Accept both {1: w} and the stored {"l1": w} shape
        if not isinstance(value, dict):
            return value
        normalized: dict[int, Any] = {}
        for key, weight in value.items():
            match = _LEVEL_KEY.match(str(key).strip())
            if match is None:
                raise ValueError(f"Invalid level key {key!r}; expected 1-{MAX_LEVEL} or l1-l{MAX_LEVEL}")
            normalized[int(match.group(1))] = weight
        return normalized


def parse_weight_config(data: dict[str, Any] | None) -> WeightConfig:
    """
    Parse a pre-loaded YAML/JSON dict into a validated WeightConfig.

    This is a pure function - it does NOT perform file I/O.

    Args:
        data: Mapping with levelDefaults / nodeOverrides / fallbackWeight
            (snake_case keys are accepted too); None means all defaults

    Returns:
        WeightConfig that passed validate_weight_config()

    Raises:
        ConfigurationError: If the mapping is malformed or any weight is invalid
    """
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"weights must be a mapping, got {type(data).__name__}")
    try:
        weights = WeightConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid weight configuration: {e}") from e
    return validate_weight_config(weights)


def validate_weight_config(weights: WeightConfig) -> WeightConfig:
    """
    Enforce the non-negativity invariant before any aggregation runs.

    Raises:
        ConfigurationError: On negative or non-finite weights, or levels outside 1..MAX_LEVEL
    """
    for level, weight in weights.level_defaults.items():
        if not 1 <= level <= MAX_LEVEL:
            raise ConfigurationError(f"Level {level} is outside 1..{MAX_LEVEL}")
        _check_weight(f"level {level} default", weight)
    for node_id, weight in weights.node_overrides.items():
        _check_weight(f"override for node '{node_id}'", weight)
    _check_weight("fallback", weights.fallback_weight)
    return weights


def _check_weight(what: str, weight: float) -> None:
    if not math.isfinite(weight):
        raise ConfigurationError(f"Weight {what} must be finite, got {weight!r}")
    if weight < 0:
        raise ConfigurationError(f"Weight {what} must be non-negative, got {weight!r}")


def resolve_effective_weight(weights: WeightConfig, node_id: str, level: int) -> float:
    """
    Resolve the weight actually used for a node.

    Order: node override -> level default -> fallback weight.

    Args:
        weights: Weight configuration
        node_id: Stable node id
        level: 1-based depth of the node

    Returns:
        The effective weight
    """
    if node_id in weights.node_overrides:
        return weights.node_overrides[node_id]
    if level in weights.level_defaults:
        return weights.level_defaults[level]
    return weights.fallback_weight


def clamp_weight(weight: float) -> float:
    """
    Clamp a user-entered weight to [0.1, 5.0] with one decimal of precision.

    Halves round up (0.25 -> 0.3), not to even.

    Raises:
        ConfigurationError: If the weight is NaN or infinite
    """
    if not math.isfinite(weight):
        raise ConfigurationError(f"Weight must be finite, got {weight!r}")
    clamped = max(MIN_USER_WEIGHT, min(MAX_USER_WEIGHT, weight))
    return math.floor(clamped * 10 + 0.5) / 10


def prune_orphan_overrides(weights: WeightConfig, forest: Forest) -> WeightConfig:
    """Return a copy of `weights` without overrides for nodes missing from `forest`."""
    valid_ids = set(collect_node_ids(forest))
    kept = {node_id: w for node_id, w in weights.node_overrides.items() if node_id in valid_ids}
    return weights.model_copy(update={"node_overrides": kept})
