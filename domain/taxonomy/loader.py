"""Parse taxonomy forests from pre-loaded YAML/JSON data and dump them back."""

from typing import Any

from pydantic import ValidationError

from domain.taxonomy.tree import Forest, TreeNode


def parse_forest(data: Any) -> list[TreeNode]:
    """
    Parse a pre-loaded list of node dicts into TreeNode objects.

    This is a pure function - it does NOT perform file I/O.
    The YAML/JSON loading happens in infrastructure.config.loader.

    Args:
        data: List of node mappings (``id``, ``name``, ``description``,
            ``children``, optional ``hierarchicalId``); ``None`` means empty

    Returns:
        List of root TreeNode objects

    Raises:
        ValueError: If data is not a list or a node is malformed
    """
    if data is None:
        return []
    if not isinstance(data, list):
        raise ValueError(f"taxonomy must be a list of nodes, got {type(data).__name__}")

    try:
        return [TreeNode.model_validate(item) for item in data]
    except ValidationError as e:
        raise ValueError(f"Invalid taxonomy node: {e}") from e


def dump_node(node: TreeNode) -> dict[str, Any]:
    """Serialize one node with camelCase keys, omitting `children` when absent."""
    out = node.model_dump(by_alias=True, exclude={"children"})
    if node.children is not None:
        out["children"] = [dump_node(child) for child in node.children]
    return out


def dump_forest(forest: Forest) -> list[dict[str, Any]]:
    return [dump_node(node) for node in forest]
