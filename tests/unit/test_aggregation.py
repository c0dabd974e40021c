import math

import pytest

from domain.aggregation import AggregationMode, WeightConfig, aggregate, weighted_mean
from domain.errors import ConfigurationError, InvariantViolation, NonFiniteScoreError
from domain.taxonomy import TreeNode, assign_identifiers, parse_forest


def _pair_forest() -> list[TreeNode]:
    return assign_identifiers(
        parse_forest(
            [
                {
                    "id": "p",
                    "name": "Parent",
                    "children": [{"id": "x", "name": "X"}, {"id": "y", "name": "Y"}],
                }
            ]
        )
    )


def _scores(mapping: dict[str, float]):
    return lambda node: mapping[node.id]


def test_weighted_parent_value() -> None:
    weights = WeightConfig(node_overrides={"x": 3, "y": 1})

    values = aggregate(_pair_forest(), weights, _scores({"x": 10, "y": 2}))

    assert values["p"] == pytest.approx(8.0)
    assert values["x"] == 10
    assert values["y"] == 2


def test_zero_weight_fallback_to_plain_mean() -> None:
    weights = WeightConfig(node_overrides={"x": 0, "y": 0})

    values = aggregate(_pair_forest(), weights, _scores({"x": 10, "y": 2}))

    assert values["p"] == pytest.approx(6.0)


def test_level_defaults_apply_by_depth() -> None:
    forest = assign_identifiers(
        parse_forest(
            [
                {
                    "id": "root",
                    "children": [
                        {"id": "mid", "children": [{"id": "leaf1"}, {"id": "leaf2"}]},
                        {"id": "leaf3"},
                    ],
                }
            ]
        )
    )
    # Level 2 nodes (mid, leaf3) weigh 1; level 3 leaves weigh 2 but are equal to each other
    weights = WeightConfig(level_defaults={1: 1, 2: 1, 3: 2})

    values = aggregate(forest, weights, _scores({"leaf1": 4, "leaf2": 8, "leaf3": 0}))

    assert values["mid"] == pytest.approx(6.0)
    assert values["root"] == pytest.approx(3.0)


def test_override_beats_level_default() -> None:
    weights = WeightConfig(level_defaults={2: 5}, node_overrides={"y": 15})

    values = aggregate(_pair_forest(), weights, _scores({"x": 0, "y": 4}))

    # x: 5 (level default), y: 15 (override)
    assert values["p"] == pytest.approx(3.0)


def test_fallback_weight_used_beyond_configured_levels() -> None:
    weights = WeightConfig(level_defaults={}, node_overrides={"x": 3}, fallback_weight=1)

    values = aggregate(_pair_forest(), weights, _scores({"x": 10, "y": 2}))

    assert values["p"] == pytest.approx(8.0)


def test_multiple_roots_each_aggregate_independently() -> None:
    forest = assign_identifiers(
        parse_forest([{"id": "r1", "children": [{"id": "a"}]}, {"id": "r2", "children": [{"id": "b"}]}])
    )

    values = aggregate(forest, WeightConfig(), _scores({"a": 1, "b": 9}))

    assert values == {"a": 1, "r1": 1, "b": 9, "r2": 9}


def test_empty_children_list_is_scored_as_leaf() -> None:
    forest = assign_identifiers(parse_forest([{"id": "e", "children": []}]))

    assert aggregate(forest, WeightConfig(), _scores({"e": 7})) == {"e": 7}


def test_max_mode() -> None:
    values = aggregate(
        _pair_forest(),
        WeightConfig(node_overrides={"x": 100}),
        _scores({"x": 1, "y": 20}),
        mode=AggregationMode.MAX,
    )

    assert values["p"] == 20


def test_negative_weight_is_a_configuration_error() -> None:
    weights = WeightConfig(node_overrides={"x": -1})

    with pytest.raises(ConfigurationError):
        aggregate(_pair_forest(), weights, _scores({"x": 1, "y": 1}))


def test_negative_weight_rejected_before_scoring() -> None:
    calls: list[str] = []

    def leaf_score(node: TreeNode) -> float:
        calls.append(node.id)
        return 1.0

    with pytest.raises(ConfigurationError):
        aggregate(_pair_forest(), WeightConfig(level_defaults={1: -0.5}), leaf_score)

    assert calls == []


def test_non_finite_score_propagates() -> None:
    values = aggregate(_pair_forest(), WeightConfig(), _scores({"x": math.nan, "y": 2}))

    assert math.isnan(values["x"])
    assert math.isnan(values["p"])
    assert values["y"] == 2


def test_non_finite_score_raises_when_strict() -> None:
    with pytest.raises(NonFiniteScoreError) as exc_info:
        aggregate(_pair_forest(), WeightConfig(), _scores({"x": 1, "y": math.inf}), strict=True)

    assert exc_info.value.node_id == "y"


def test_duplicate_ids_are_rejected() -> None:
    forest = parse_forest([{"id": "dup"}, {"id": "dup"}])

    with pytest.raises(InvariantViolation):
        aggregate(forest, WeightConfig(), _scores({"dup": 1}))


def test_duplicate_id_between_ancestor_and_descendant_is_rejected() -> None:
    forest = parse_forest([{"id": "dup", "children": [{"id": "dup"}]}])

    with pytest.raises(InvariantViolation):
        aggregate(forest, WeightConfig(), lambda node: 5.0)


def test_inputs_are_not_mutated() -> None:
    forest = _pair_forest()
    weights = WeightConfig(node_overrides={"x": 2})
    before = (forest[0].model_dump(), weights.model_dump())

    aggregate(forest, weights, _scores({"x": 1, "y": 2}))

    assert (forest[0].model_dump(), weights.model_dump()) == before


def test_weighted_mean_helper() -> None:
    assert weighted_mean([10, 2], [3, 1]) == pytest.approx(8.0)
    assert weighted_mean([10, 2], [0, 0]) == pytest.approx(6.0)
    with pytest.raises(ValueError):
        weighted_mean([], [])
