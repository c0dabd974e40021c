"""Error taxonomy shared by the tree, aggregation and audit components."""


class TaxonomyEngineError(Exception):
    """Base class for all engine errors."""


class ConfigurationError(TaxonomyEngineError, ValueError):
    """Invalid weight or engine configuration. The caller must fix the input."""


class InvariantViolation(TaxonomyEngineError, RuntimeError):
    """A caller broke a contract (e.g. audit diff with both snapshots missing)."""


class NonFiniteScoreError(TaxonomyEngineError, ValueError):
    """A leaf score was NaN or infinite while aggregating in strict mode."""

    def __init__(self, node_id: str, value: float) -> None:
        super().__init__(f"Non-finite leaf score {value!r} for node '{node_id}'")
        self.node_id = node_id
        self.value = value
