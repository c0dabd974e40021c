"""Configuration, taxonomy and score loading from YAML/JSON/tabular files."""

import logging
import math
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from domain.aggregation.weights import WeightConfig, parse_weight_config, validate_weight_config
from domain.errors import ConfigurationError
from domain.taxonomy.loader import parse_forest
from domain.taxonomy.tree import TreeNode
from infrastructure.config.models import EngineConfig, ScoreColumnsConfig
from infrastructure.io import read_table

logger = logging.getLogger(__name__)

TABULAR_SUFFIXES = {".csv", ".xlsx", ".xls"}


def _read_yaml(path: Path) -> Any:
    """Load a YAML (or JSON, which YAML accepts) file."""
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def _load_yaml(path: Path) -> dict[str, Any]:
    """Load YAML file and return as dict."""
    data = _read_yaml(path)

    if not isinstance(data, dict):
        raise ValueError(f"Expected YAML dict in {path}, got {type(data)}")

    return data


def load_weight_config(path: Path) -> WeightConfig:
    """
    Load weights from YAML/JSON file.

    This function handles file I/O, then delegates parsing to domain layer.
    """
    return parse_weight_config(_load_yaml(path))


def load_forest(path: Path) -> list[TreeNode]:
    """
    Load a taxonomy forest from YAML/JSON.

    The file holds either a top-level list of nodes or a mapping with a
    ``nodes`` list. Hierarchical ids in the file are kept as-is; callers
    re-identify before trusting them.
    """
    data = _read_yaml(path)
    if isinstance(data, dict):
        if "nodes" not in data:
            raise ValueError(f"Taxonomy mapping in {path} missing required key 'nodes'")
        data = data["nodes"]

    forest = parse_forest(data)
    logger.debug("Loaded %d root nodes from %s", len(forest), path)
    return forest


def load_leaf_scores(path: Path, columns: ScoreColumnsConfig | None = None) -> dict[str, float]:
    """
    Load leaf scores keyed by node id.

    Supported formats:
    - Tabular (.csv, .xlsx, .xls): one row per node, id/score columns from `columns`
    - YAML/JSON: mapping of node id -> score

    Missing scores (empty cells, null values) load as NaN so they stay visible
    in the rollup instead of silently becoming zero.

    Raises:
        KeyError: If configured columns are missing from a tabular file
        ValueError: If a YAML/JSON file is not a mapping or a score is not numeric
    """
    columns = columns or ScoreColumnsConfig()

    if path.suffix.lower() in TABULAR_SUFFIXES:
        df = read_table(path)
        for col in (columns.id_col, columns.score_col):
            if col not in df.columns:
                raise KeyError(f"Configured score column '{col}' not found in {path}: {list(df.columns)}")
        raw = dict(zip(df[columns.id_col].astype(str).str.strip(), df[columns.score_col], strict=False))
    else:
        raw = _load_yaml(path)

    scores: dict[str, float] = {}
    for node_id, value in raw.items():
        try:
            scores[str(node_id)] = math.nan if value is None else float(value)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Score for node '{node_id}' in {path} is not numeric: {value!r}") from e

    logger.debug("Loaded %d leaf scores from %s", len(scores), path)
    return scores


def load_engine_config(path: Path) -> EngineConfig:
    """
    Load engine.yaml and construct a fully-resolved EngineConfig.

    Conventions:
    - ``weights`` may be given inline, or ``weights_file`` may point to a
      separate YAML/JSON file (relative paths resolve against engine.yaml's directory).
    - Weights are validated for non-negativity here, before any aggregation runs.

    Raises:
        FileNotFoundError: If engine.yaml or the weights file is missing
        ValueError: If engine.yaml is not a mapping
        ConfigurationError: If any value fails validation
    """
    data = _load_yaml(path)

    weights_file = data.pop("weights_file", None)
    if weights_file is not None:
        if "weights" in data:
            raise ConfigurationError(f"{path}: set either 'weights' or 'weights_file', not both")
        weights_path = Path(weights_file)
        if not weights_path.is_absolute():
            weights_path = path.parent / weights_path
        data["weights"] = _load_yaml(weights_path)

    try:
        cfg = EngineConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid engine configuration in {path}: {e}") from e

    validate_weight_config(cfg.weights)
    return cfg
