"""Taxonomy tree model and traversal helpers."""

import uuid
from collections.abc import Iterator, Sequence

from pydantic import BaseModel, ConfigDict, Field

from domain.errors import InvariantViolation


class TreeNode(BaseModel):
    """
    One node of a risk or process taxonomy.

    `children` distinguishes an absent child list (None) from an explicitly
    empty one ([]); both forms survive identifier assignment and serialization.
    Extra payload fields are kept as-is.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    hierarchical_id: str = Field(default="", alias="hierarchicalId")
    name: str = ""
    description: str = ""
    children: list["TreeNode"] | None = None


Forest = Sequence[TreeNode]


def iter_nodes(forest: Forest, depth: int = 1) -> Iterator[tuple[int, TreeNode]]:
    """Yield (depth, node) pairs depth-first in sibling order. Roots are depth 1."""
    for node in forest:
        yield depth, node
        if node.children:
            yield from iter_nodes(node.children, depth + 1)


def build_node_map(forest: Forest) -> dict[str, TreeNode]:
    """
    Index every node in the forest by its stable id.

    Raises:
        InvariantViolation: If two nodes share an id
    """
    nodes: dict[str, TreeNode] = {}
    for _, node in iter_nodes(forest):
        if node.id in nodes:
            raise InvariantViolation(f"Duplicate node id in forest: {node.id!r}")
        nodes[node.id] = node
    return nodes


def collect_node_ids(forest: Forest) -> list[str]:
    return [node.id for _, node in iter_nodes(forest)]
