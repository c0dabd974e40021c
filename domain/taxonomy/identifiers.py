"""Materialized-path identifiers derived from sibling position."""

from domain.taxonomy.tree import Forest, TreeNode


def assign_identifiers(forest: Forest, parent_path: str | None = None) -> list[TreeNode]:
    """
    Recompute the hierarchical id of every node from its position.

    Positions are 1-based and joined with dots from the root down:
    roots get "1", "2", ...; their children "1.1", "1.2", ...; and so on.

    This is a pure function and must be re-run over the whole forest after
    ANY structural change (add, delete, move, reorder). Inputs are not
    mutated; every returned node is a copy with all other fields unchanged.

    Examples:
        >>> forest = assign_identifiers([TreeNode(name="A"), TreeNode(name="B", children=[TreeNode(name="C")])])
        >>> [forest[0].hierarchical_id, forest[1].hierarchical_id, forest[1].children[0].hierarchical_id]
        ['1', '2', '2.1']

    Args:
        forest: Sibling sequence to (re)number
        parent_path: Hierarchical id of the parent (used in recursion)

    Returns:
        New list of nodes carrying updated hierarchical ids
    """
    result: list[TreeNode] = []
    for index, node in enumerate(forest):
        position = index + 1
        hierarchical_id = f"{parent_path}.{position}" if parent_path else str(position)

        update: dict[str, object] = {"hierarchical_id": hierarchical_id}
        # An explicitly empty child list stays a (new) empty list; an absent one stays absent.
        if node.children is not None:
            update["children"] = assign_identifiers(node.children, hierarchical_id)

        result.append(node.model_copy(update=update))
    return result
