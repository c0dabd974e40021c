"""
Taxonomy trees: node model, traversal and hierarchical identifiers.

Risk and process taxonomies share the same forest shape.
All functions in this module are pure (no file I/O).
"""

from domain.taxonomy.identifiers import assign_identifiers
from domain.taxonomy.loader import dump_forest, dump_node, parse_forest
from domain.taxonomy.tree import Forest, TreeNode, build_node_map, collect_node_ids, iter_nodes

__all__ = [
    "TreeNode",
    "Forest",
    "assign_identifiers",
    "iter_nodes",
    "build_node_map",
    "collect_node_ids",
    "parse_forest",
    "dump_forest",
    "dump_node",
]
