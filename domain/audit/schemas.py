"""Pydantic models for audit entries."""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class EntityType(str, Enum):
    """Kinds of entity whose changes are audited."""

    RISK = "risk"
    PROCESS = "process"
    CONTROL = "control"
    CONTROL_LINK = "controlLink"
    RCT_ROW = "rctRow"
    CUSTOM_COLUMN = "customColumn"
    CONTROL_TEST = "controlTest"
    REMEDIATION_PLAN = "remediationPlan"
    WEIGHT = "weight"
    TICKET = "ticket"
    TICKET_CONTROL_LINK = "ticketControlLink"
    PENDING_CHANGE = "pendingChange"


class ChangeType(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class _AuditModel(BaseModel):
    # Immutable, serialized with camelCase keys (entityType, oldValue, ...)
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class FieldChange(_AuditModel):
    """A single field delta."""

    field: str = Field(
        ...,
        description="Field path, e.g. 'name', 'owner.email' or 'controls[0].netScore'.",
    )
    old_value: Any = Field(default=None, description="Value before the change (None for creates).")
    new_value: Any = Field(default=None, description="Value after the change (None for deletes).")


class AuditEntry(_AuditModel):
    """Append-only record of one change to one entity."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    entity_type: EntityType
    entity_id: str = Field(..., description="Stable id of the changed entity ('' for bulk summaries).")
    entity_name: str | None = Field(
        default=None,
        description="Display label captured at change time, kept even if the entity is renamed or deleted.",
    )
    change_type: ChangeType
    field_changes: tuple[FieldChange, ...] = ()
    user: str = Field(..., description="Actor identifier or role; opaque to the engine.")
    summary: str | None = Field(
        default=None,
        description="Free-text note for bulk operations that do not map to field-level diffs.",
    )
