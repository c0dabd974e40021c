"""In-memory append-only audit log with retention and query helpers."""

import logging
from collections.abc import Iterable
from datetime import datetime

from domain.audit.schemas import AuditEntry, EntityType
from domain.errors import InvariantViolation

logger = logging.getLogger(__name__)

# Maximum number of audit entries to retain
MAX_AUDIT_ENTRIES = 10_000
# Number of oldest entries to drop when the limit is exceeded
PRUNE_AMOUNT = 1_000


class AuditLog:
    """
    Append-only sequence of audit entries.

    Entries are never edited or removed individually; once the log grows past
    `max_entries` the oldest `prune_amount` entries are dropped (retention).
    Query methods return entries newest first.
    """

    def __init__(self, max_entries: int = MAX_AUDIT_ENTRIES, prune_amount: int = PRUNE_AMOUNT) -> None:
        if max_entries <= 0 or prune_amount <= 0:
            raise ValueError("max_entries and prune_amount must be positive")
        if prune_amount > max_entries:
            raise ValueError("prune_amount cannot exceed max_entries")
        self.max_entries = max_entries
        self.prune_amount = prune_amount
        self._entries: list[AuditEntry] = []
        self._latest_by_entity: dict[str, datetime] = {}

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> tuple[AuditEntry, ...]:
        """All retained entries, oldest first."""
        return tuple(self._entries)

    def append(self, entry: AuditEntry) -> AuditEntry:
        """
        Append one entry.

        Raises:
            InvariantViolation: If the entry is older than the latest entry
                already recorded for the same entity
        """
        if entry.entity_id:
            latest = self._latest_by_entity.get(entry.entity_id)
            if latest is not None and entry.timestamp < latest:
                raise InvariantViolation(
                    f"Audit entry for '{entry.entity_id}' at {entry.timestamp.isoformat()} "
                    f"predates the latest recorded change at {latest.isoformat()}"
                )
            self._latest_by_entity[entry.entity_id] = entry.timestamp

        self._entries.append(entry)

        if len(self._entries) > self.max_entries:
            self._entries = self._entries[self.prune_amount :]
            self._latest_by_entity = {}
            for kept in self._entries:
                if kept.entity_id:
                    previous = self._latest_by_entity.get(kept.entity_id)
                    if previous is None or kept.timestamp > previous:
                        self._latest_by_entity[kept.entity_id] = kept.timestamp
            logger.info("Audit log exceeded %d entries; pruned oldest %d", self.max_entries, self.prune_amount)

        return entry

    def extend(self, entries: Iterable[AuditEntry]) -> None:
        for entry in entries:
            self.append(entry)

    def for_entity(self, entity_id: str) -> list[AuditEntry]:
        return _newest_first(e for e in self._entries if e.entity_id == entity_id)

    def by_type(self, entity_type: EntityType | str) -> list[AuditEntry]:
        kind = EntityType(entity_type)
        return _newest_first(e for e in self._entries if e.entity_type is kind)

    def by_date_range(self, start: datetime, end: datetime) -> list[AuditEntry]:
        """Entries with start <= timestamp <= end (timezone-aware datetimes)."""
        return _newest_first(e for e in self._entries if start <= e.timestamp <= end)

    def recent(self, limit: int) -> list[AuditEntry]:
        return _newest_first(self._entries)[:limit]


def _newest_first(entries: Iterable[AuditEntry]) -> list[AuditEntry]:
    return sorted(entries, key=lambda e: e.timestamp, reverse=True)
