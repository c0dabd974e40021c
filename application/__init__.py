"""
Application layer: Use cases and workflow orchestration.

This layer coordinates the pure domain components (identifiers, aggregation,
audit diffs) and keeps the state they deliberately do not own: the current
forest, its weights and the append-only audit log.
"""

from application.audit_log import MAX_AUDIT_ENTRIES, PRUNE_AMOUNT, AuditLog
from application.workspace import TaxonomyWorkspace

__all__ = [
    "TaxonomyWorkspace",
    "AuditLog",
    "MAX_AUDIT_ENTRIES",
    "PRUNE_AMOUNT",
]
