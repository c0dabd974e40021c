"""Taxonomy workspace: sequences tree mutations, identifiers, weights and audit."""

import logging
from collections.abc import Sequence

from application.audit_log import AuditLog
from domain.aggregation.rollup import AggregationMode, LeafScore, aggregate
from domain.aggregation.weights import (
    MAX_LEVEL,
    WeightConfig,
    clamp_weight,
    prune_orphan_overrides,
    resolve_effective_weight,
    validate_weight_config,
)
from domain.audit.recorder import diff
from domain.audit.schemas import AuditEntry, EntityType
from domain.audit.taxonomy_changes import diff_forests, node_label
from domain.errors import ConfigurationError
from domain.taxonomy.identifiers import assign_identifiers
from domain.taxonomy.tree import TreeNode, build_node_map

logger = logging.getLogger(__name__)

TAXONOMY_KINDS = (EntityType.RISK, EntityType.PROCESS)


class TaxonomyWorkspace:
    """
    State holder for one taxonomy (risk or process) and its weights.

    Every structural change goes through replace_forest(), which re-identifies
    the whole forest, drops weight overrides for nodes that no longer exist and
    appends the resulting audit entries, so callers never observe a
    half-updated tree. Not thread-safe: use one workspace per logical flow.
    """

    def __init__(
        self,
        kind: EntityType | str,
        *,
        weights: WeightConfig | None = None,
        audit_log: AuditLog | None = None,
    ) -> None:
        self.kind = EntityType(kind)
        if self.kind not in TAXONOMY_KINDS:
            raise ValueError(f"Workspace kind must be 'risk' or 'process', got '{self.kind.value}'")
        self._forest: list[TreeNode] = []
        self._weights = validate_weight_config(weights or WeightConfig())
        self.audit_log = audit_log if audit_log is not None else AuditLog()

    @property
    def forest(self) -> list[TreeNode]:
        return list(self._forest)

    @property
    def weights(self) -> WeightConfig:
        return self._weights

    @property
    def _label(self) -> str:
        return self.kind.value.capitalize()

    def replace_forest(self, items: Sequence[TreeNode], actor: str) -> list[AuditEntry]:
        """
        Replace the whole tree after an insert, delete, move or reorder.

        Returns:
            Audit entries recorded for the change (already appended to the log)
        """
        new_forest = assign_identifiers(items)
        entries = diff_forests(self.kind, self._forest, new_forest, actor)

        pruned = prune_orphan_overrides(self._weights, new_forest)
        dropped = set(self._weights.node_overrides) - set(pruned.node_overrides)
        if dropped:
            logger.info("Dropped %d orphaned %s weight overrides", len(dropped), self.kind.value)

        self._forest = new_forest
        self._weights = pruned
        self.audit_log.extend(entries)
        logger.debug("Replaced %s forest (%d audit entries)", self.kind.value, len(entries))
        return entries

    def set_level_weight(self, level: int, weight: float, actor: str) -> AuditEntry | None:
        """Set the default weight for a level (clamped to 0.1-5.0). Returns the audit entry, if any."""
        if not 1 <= level <= MAX_LEVEL:
            raise ConfigurationError(f"Level {level} is outside 1..{MAX_LEVEL}")

        new_weight = clamp_weight(weight)
        old_weight = self._weights.level_defaults.get(level)
        if old_weight == new_weight:
            return None

        level_defaults = {**self._weights.level_defaults, level: new_weight}
        self._weights = self._weights.model_copy(update={"level_defaults": level_defaults})

        return self._record(
            diff(
                {"weight": old_weight},
                {"weight": new_weight},
                EntityType.WEIGHT,
                actor,
                f"{self.kind.value}-level-{level}",
                f"{self._label} Level {level} Weight",
            )
        )

    def set_node_weight(self, node_id: str, weight: float | None, actor: str) -> AuditEntry | None:
        """
        Set (or, with None, remove) a per-node weight override.

        Raises:
            KeyError: If setting an override for a node not in the forest
        """
        nodes = build_node_map(self._forest)
        if weight is not None and node_id not in nodes:
            raise KeyError(f"Node '{node_id}' not found in {self.kind.value} taxonomy")

        old_weight = self._weights.node_overrides.get(node_id)
        new_weight = None if weight is None else clamp_weight(weight)
        if old_weight == new_weight:
            return None

        overrides = dict(self._weights.node_overrides)
        if new_weight is None:
            overrides.pop(node_id, None)
        else:
            overrides[node_id] = new_weight
        self._weights = self._weights.model_copy(update={"node_overrides": overrides})

        entity_name = f"{self._label} Node Override"
        if node_id in nodes:
            entity_name = f"{entity_name} ({node_label(nodes[node_id])})"

        return self._record(
            diff(
                None if old_weight is None else {"weight": old_weight},
                None if new_weight is None else {"weight": new_weight},
                EntityType.WEIGHT,
                actor,
                node_id,
                entity_name,
            )
        )

    def effective_weight(self, node_id: str, level: int) -> float:
        return resolve_effective_weight(self._weights, node_id, level)

    def rollup(
        self,
        leaf_score: LeafScore,
        *,
        mode: AggregationMode = AggregationMode.WEIGHTED,
        strict: bool = False,
    ) -> dict[str, float]:
        return aggregate(self._forest, self._weights, leaf_score, mode=mode, strict=strict)

    def _record(self, entry: AuditEntry) -> AuditEntry:
        return self.audit_log.append(entry)
