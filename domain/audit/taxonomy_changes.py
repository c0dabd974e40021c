"""Audit entries for structural and naming changes between two taxonomy forests."""

from datetime import datetime, timezone

from domain.audit.recorder import diff, record_bulk
from domain.audit.schemas import AuditEntry, EntityType
from domain.taxonomy.tree import Forest, TreeNode, build_node_map

TRACKED_NODE_FIELDS = ("name", "description")


def node_label(node: TreeNode) -> str:
    """Display label captured into audit entries, e.g. "1.2 Credit risk"."""
    return f"{node.hierarchical_id} {node.name}".strip()


def diff_forests(
    entity_type: EntityType | str,
    before: Forest,
    after: Forest,
    actor: str,
) -> list[AuditEntry]:
    """
    Compare two identified forests and describe what changed.

    Nodes are matched by stable id:
      - new ids produce a create entry (name, hierarchicalId)
      - a single removed id produces a delete entry (name); several removed
        ids collapse into one bulk summary entry
      - surviving ids whose name or description changed produce an update entry

    Moves and reorders only change hierarchical ids and are not logged here.
    All entries share one timestamp.

    Args:
        entity_type: Taxonomy kind (risk or process)
        before: Forest before the mutation
        after: Forest after the mutation (already re-identified)
        actor: User id or role making the change

    Returns:
        Audit entries in create, delete, update order
    """
    old_nodes = build_node_map(before)
    new_nodes = build_node_map(after)
    timestamp = datetime.now(timezone.utc)
    entries: list[AuditEntry] = []

    for node_id, node in new_nodes.items():
        if node_id not in old_nodes:
            entries.append(
                diff(
                    None,
                    {"name": node.name, "hierarchicalId": node.hierarchical_id},
                    entity_type,
                    actor,
                    node_id,
                    node_label(node),
                    timestamp=timestamp,
                )
            )

    deleted = [node for node_id, node in old_nodes.items() if node_id not in new_nodes]
    if len(deleted) > 1:
        kind = EntityType(entity_type).value
        plural = f"{kind}es" if kind.endswith("s") else f"{kind}s"
        entries.append(
            record_bulk(
                f"Deleted {len(deleted)} {plural} including '{deleted[0].hierarchical_id}'",
                entity_type,
                actor,
                timestamp=timestamp,
            )
        )
    elif deleted:
        node = deleted[0]
        entries.append(
            diff({"name": node.name}, None, entity_type, actor, node.id, node_label(node), timestamp=timestamp)
        )

    for node_id, new_node in new_nodes.items():
        old_node = old_nodes.get(node_id)
        if old_node is None:
            continue
        entry = diff(
            {field: getattr(old_node, field) for field in TRACKED_NODE_FIELDS},
            {field: getattr(new_node, field) for field in TRACKED_NODE_FIELDS},
            entity_type,
            actor,
            node_id,
            node_label(new_node),
            timestamp=timestamp,
        )
        if entry.field_changes:
            entries.append(entry)

    return entries
