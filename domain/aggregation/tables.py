"""Rollup table generation."""

from collections.abc import Mapping
from pathlib import Path

import pandas as pd

from domain.aggregation.weights import WeightConfig, resolve_effective_weight
from domain.taxonomy.tree import Forest, iter_nodes

ROLLUP_COLUMNS = ["hierarchical_id", "id", "name", "depth", "effective_weight", "value"]


def compute_rollup_table(
    forest: Forest,
    weights: WeightConfig,
    values: Mapping[str, float],
    decimals: int | None = 1,
) -> pd.DataFrame:
    """
    Build a flat table of aggregated values, one row per node.

    Columns in the result:
      - hierarchical_id: display path ("1", "1.2", ...)
      - id: stable node id
      - name: node name
      - depth: 1-based depth from the roots
      - effective_weight: weight resolved for the node at its depth
      - value: aggregated value (NaN when the node has no value)

    Rows follow depth-first sibling order, which is also hierarchical_id order.

    Args:
        forest: Identified forest
        weights: Weight configuration used for the rollup
        values: Output of aggregate()
        decimals: Round values to this many decimals (None keeps full precision)

    Returns:
        DataFrame with the columns above
    """
    rows: list[dict[str, object]] = [
        {
            "hierarchical_id": node.hierarchical_id,
            "id": node.id,
            "name": node.name,
            "depth": depth,
            "effective_weight": resolve_effective_weight(weights, node.id, depth),
            "value": values.get(node.id, float("nan")),
        }
        for depth, node in iter_nodes(forest)
    ]

    if not rows:
        return pd.DataFrame(columns=ROLLUP_COLUMNS)

    result = pd.DataFrame(rows, columns=ROLLUP_COLUMNS)
    result["value"] = result["value"].astype(float)
    if decimals is not None:
        result["value"] = result["value"].round(decimals)
    return result


def compute_rollup_table_and_save(
    forest: Forest,
    weights: WeightConfig,
    values: Mapping[str, float],
    output_dir: Path,
    filename: str,
    decimals: int | None = 1,
) -> Path:
    """
    Convenience wrapper: compute the rollup table and save it as CSV.

    Returns:
        Path to the saved CSV file
    """
    table_df = compute_rollup_table(forest=forest, weights=weights, values=values, decimals=decimals)
    output_dir.mkdir(parents=True, exist_ok=True)
    out_path = output_dir / filename
    table_df.to_csv(out_path, index=False)
    del table_df
    return out_path
