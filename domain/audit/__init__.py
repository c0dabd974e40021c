"""
Audit diff model: field-level change records for taxonomy nodes and related entities.

All functions in this module are pure; persisting entries is the caller's job.
"""

from domain.audit.recorder import DERIVED_FIELDS, diff, has_significant_changes, record_bulk
from domain.audit.schemas import AuditEntry, ChangeType, EntityType, FieldChange
from domain.audit.taxonomy_changes import diff_forests, node_label

__all__ = [
    "AuditEntry",
    "FieldChange",
    "EntityType",
    "ChangeType",
    "diff",
    "record_bulk",
    "has_significant_changes",
    "DERIVED_FIELDS",
    "diff_forests",
    "node_label",
]
