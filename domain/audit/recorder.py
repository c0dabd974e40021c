"""Field-level audit diffs between two entity snapshots."""

import copy
import logging
import math
from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime
from typing import Any

from pydantic import BaseModel

from domain.audit.schemas import AuditEntry, ChangeType, EntityType, FieldChange
from domain.errors import InvariantViolation

logger = logging.getLogger(__name__)

# Computed fields that change as a side effect of other edits
DERIVED_FIELDS: tuple[str, ...] = (
    "grossScore",
    "netScore",
    "withinAppetite",
    "hasControls",
)

Snapshot = Mapping[str, Any] | BaseModel


def diff(
    before: Snapshot | None,
    after: Snapshot | None,
    entity_type: EntityType | str,
    actor: str,
    entity_id: str,
    entity_name: str | None = None,
    *,
    summary: str | None = None,
    exclude_fields: Iterable[str] = (),
    timestamp: datetime | None = None,
) -> AuditEntry:
    """
    Build an audit entry describing how an entity changed.

    - before is None -> create; every field of `after` with old_value None
    - after is None -> delete; every field of `before` with new_value None
    - both present -> update; one change per differing leaf, addressed by
      path ("owner.email", "controls[0].netScore") so one element of a
      collection changing does not report the whole collection

    Pydantic models are compared through their camelCase dump. Values are
    deep-copied into the entry so later edits to the snapshots do not leak in.

    Args:
        before: Snapshot before the change, or None for a create
        after: Snapshot after the change, or None for a delete
        entity_type: Kind of entity
        actor: User id or role making the change
        entity_id: Stable id of the entity (for tree nodes, `id`, never `hierarchical_id`)
        entity_name: Display label captured now
        summary: Optional free-text note
        exclude_fields: Top-level fields to leave out of the diff
        timestamp: Override the recording time (defaults to now, UTC)

    Returns:
        Immutable AuditEntry (not persisted; that is the caller's job)

    Raises:
        InvariantViolation: If both snapshots are None
    """
    if before is None and after is None:
        raise InvariantViolation("diff() needs at least one of before/after")

    excluded = set(exclude_fields)

    if before is None:
        change_type = ChangeType.CREATE
        changes = [
            FieldChange(field=key, old_value=None, new_value=copy.deepcopy(value))
            for key, value in _as_mapping(after).items()
            if key not in excluded
        ]
    elif after is None:
        change_type = ChangeType.DELETE
        changes = [
            FieldChange(field=key, old_value=copy.deepcopy(value), new_value=None)
            for key, value in _as_mapping(before).items()
            if key not in excluded
        ]
    else:
        change_type = ChangeType.UPDATE
        old = {k: v for k, v in _as_mapping(before).items() if k not in excluded}
        new = {k: v for k, v in _as_mapping(after).items() if k not in excluded}
        changes = []
        _diff_values("", old, new, changes)

    entry_kwargs: dict[str, Any] = {
        "entity_type": EntityType(entity_type),
        "entity_id": entity_id,
        "entity_name": entity_name,
        "change_type": change_type,
        "field_changes": tuple(changes),
        "user": actor,
        "summary": summary,
    }
    if timestamp is not None:
        entry_kwargs["timestamp"] = timestamp

    entry = AuditEntry(**entry_kwargs)
    logger.debug(
        "Recorded %s %s %s (%d field changes)",
        entry.change_type.value,
        entry.entity_type.value,
        entity_id,
        len(entry.field_changes),
    )
    return entry


def record_bulk(
    summary: str,
    entity_type: EntityType | str,
    actor: str,
    *,
    timestamp: datetime | None = None,
) -> AuditEntry:
    """Summary-only entry for bulk operations (e.g. "Deleted 5 risks including '1.1'")."""
    entry_kwargs: dict[str, Any] = {}
    if timestamp is not None:
        entry_kwargs["timestamp"] = timestamp
    return AuditEntry(
        entity_type=EntityType(entity_type),
        entity_id="",
        change_type=ChangeType.DELETE,
        field_changes=(),
        user=actor,
        summary=summary,
        **entry_kwargs,
    )


def has_significant_changes(entry: AuditEntry) -> bool:
    return len(entry.field_changes) > 0 or entry.summary is not None


def _as_mapping(snapshot: Snapshot | None) -> dict[str, Any]:
    if isinstance(snapshot, BaseModel):
        return snapshot.model_dump(by_alias=True)
    if isinstance(snapshot, Mapping):
        return dict(snapshot)
    raise TypeError(f"Snapshot must be a mapping or pydantic model, got {type(snapshot).__name__}")


def _diff_values(path: str, old: Any, new: Any, out: list[FieldChange]) -> None:
    if isinstance(old, Mapping) and isinstance(new, Mapping):
        keys = list(old.keys()) + [k for k in new.keys() if k not in old]
        for key in keys:
            sub_path = f"{path}.{key}" if path else str(key)
            if key not in new:
                out.append(FieldChange(field=sub_path, old_value=copy.deepcopy(old[key]), new_value=None))
            elif key not in old:
                out.append(FieldChange(field=sub_path, old_value=None, new_value=copy.deepcopy(new[key])))
            else:
                _diff_values(sub_path, old[key], new[key], out)
        return

    if _is_sequence(old) and _is_sequence(new):
        for index in range(max(len(old), len(new))):
            sub_path = f"{path}[{index}]"
            if index >= len(new):
                out.append(FieldChange(field=sub_path, old_value=copy.deepcopy(old[index]), new_value=None))
            elif index >= len(old):
                out.append(FieldChange(field=sub_path, old_value=None, new_value=copy.deepcopy(new[index])))
            else:
                _diff_values(sub_path, old[index], new[index], out)
        return

    if _differs(old, new):
        out.append(FieldChange(field=path, old_value=copy.deepcopy(old), new_value=copy.deepcopy(new)))


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def _differs(old: Any, new: Any) -> bool:
    # True == 1 in Python; an audit trail must still see bool <-> number flips
    if isinstance(old, bool) != isinstance(new, bool):
        return True
    if isinstance(old, float) and isinstance(new, float) and math.isnan(old) and math.isnan(new):
        return False
    return old != new
