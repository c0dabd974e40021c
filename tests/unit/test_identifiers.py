from domain.taxonomy import TreeNode, assign_identifiers, dump_forest, iter_nodes, parse_forest


def _forest() -> list[TreeNode]:
    return parse_forest(
        [
            {"id": "a", "name": "A"},
            {
                "id": "b",
                "name": "B",
                "children": [
                    {"id": "b1", "name": "B1", "children": [{"id": "b1x", "name": "B1x"}]},
                    {"id": "b2", "name": "B2"},
                    {"id": "b3", "name": "B3"},
                ],
            },
            {"id": "c", "name": "C", "children": [{"id": "c1", "name": "C1"}]},
        ]
    )


def _ids(forest: list[TreeNode]) -> dict[str, str]:
    return {node.id: node.hierarchical_id for _, node in iter_nodes(forest)}


def test_path_correctness() -> None:
    forest = assign_identifiers(parse_forest([{"name": "A"}, {"name": "B", "children": [{"name": "C"}]}]))

    assert forest[0].hierarchical_id == "1"
    assert forest[1].hierarchical_id == "2"
    assert forest[1].children[0].hierarchical_id == "2.1"


def test_deep_paths_follow_sibling_positions() -> None:
    ids = _ids(assign_identifiers(_forest()))

    assert ids == {
        "a": "1",
        "b": "2",
        "b1": "2.1",
        "b1x": "2.1.1",
        "b2": "2.2",
        "b3": "2.3",
        "c": "3",
        "c1": "3.1",
    }


def test_empty_forest() -> None:
    assert assign_identifiers([]) == []


def test_idempotent() -> None:
    once = assign_identifiers(_forest())
    twice = assign_identifiers(once)

    assert twice == once
    assert dump_forest(twice) == dump_forest(once)


def test_stale_identifiers_are_overwritten() -> None:
    forest = parse_forest([{"id": "x", "name": "X", "hierarchicalId": "9.9"}])

    assert assign_identifiers(forest)[0].hierarchical_id == "1"


def test_reordering_siblings_only_touches_that_subtree() -> None:
    before = assign_identifiers(_forest())

    b = before[1]
    reordered_b = b.model_copy(update={"children": [b.children[2], b.children[0], b.children[1]]})
    after = assign_identifiers([before[0], reordered_b, before[2]])

    ids = _ids(after)
    assert ids["b3"] == "2.1"
    assert ids["b1"] == "2.2"
    assert ids["b1x"] == "2.2.1"
    assert ids["b2"] == "2.3"

    # Unrelated branches are byte-for-byte unchanged
    assert dump_forest([after[0]]) == dump_forest([before[0]])
    assert dump_forest([after[2]]) == dump_forest([before[2]])
    assert after[1].hierarchical_id == before[1].hierarchical_id


def test_absent_and_empty_children_are_preserved() -> None:
    forest = assign_identifiers(parse_forest([{"id": "leaf", "name": "Leaf"}, {"id": "empty", "children": []}]))

    assert forest[0].children is None
    assert forest[1].children == []

    dumped = dump_forest(forest)
    assert "children" not in dumped[0]
    assert dumped[1]["children"] == []


def test_inputs_are_not_mutated() -> None:
    original = _forest()
    snapshot = dump_forest(original)

    result = assign_identifiers(original)

    assert dump_forest(original) == snapshot
    assert result[1] is not original[1]
    assert result[1].children is not original[1].children


def test_other_fields_and_payload_pass_through() -> None:
    forest = parse_forest([{"id": "r1", "name": "Credit", "description": "Lending", "owner": "cro"}])

    node = assign_identifiers(forest)[0]

    assert node.id == "r1"
    assert node.name == "Credit"
    assert node.description == "Lending"
    assert dump_forest([node])[0]["owner"] == "cro"


def test_ids_are_generated_once_when_missing() -> None:
    node = TreeNode(name="New")

    assert node.id
    assert assign_identifiers([node])[0].id == node.id
