"""Configuration models (Pydantic classes)."""

from pathlib import Path

from pydantic import BaseModel, Field, model_validator

from domain.aggregation.rollup import AggregationMode
from domain.aggregation.weights import WeightConfig
from infrastructure.constants import OUTPUT_ROOT


class AuditConfig(BaseModel):
    """
    Audit log retention and default actor.

    Defaults match application.audit_log (10,000 entries, pruned 1,000 at a time).
    """

    max_entries: int = Field(default=10_000, gt=0)
    prune_amount: int = Field(default=1_000, gt=0)
    actor: str = Field(default="system", description="Actor recorded when none is supplied.")

    @model_validator(mode="after")
    def _validate(self) -> "AuditConfig":
        if self.prune_amount > self.max_entries:
            raise ValueError("audit.prune_amount cannot exceed audit.max_entries")
        return self


class ScoreColumnsConfig(BaseModel):
    """Column name mapping for tabular leaf-score files (CSV/Excel)."""

    id_col: str = "id"
    score_col: str = "score"


class EngineConfig(BaseModel):
    """
    Runtime configuration.
    - Loaded from engine.yaml
    - Weights may come inline or from a separate weights file (resolved by loader)
    - Consumed by the CLI and the taxonomy workspace
    """

    aggregation_mode: AggregationMode = Field(
        default=AggregationMode.WEIGHTED,
        description="How internal nodes combine child values: 'weighted' or 'max'.",
    )
    strict_scores: bool = Field(
        default=False,
        description="If true, abort on NaN/inf leaf scores instead of propagating them.",
    )
    weights: WeightConfig = Field(default_factory=WeightConfig)
    audit: AuditConfig = Field(default_factory=AuditConfig)
    scores: ScoreColumnsConfig = Field(default_factory=ScoreColumnsConfig)

    output_dir: Path = Field(default_factory=lambda: OUTPUT_ROOT)
    log_file: Path | None = Field(
        default=None,
        description="Optional rotating log file; console-only logging when unset.",
    )
