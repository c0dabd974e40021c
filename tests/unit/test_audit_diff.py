from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from domain.audit import (
    DERIVED_FIELDS,
    AuditEntry,
    ChangeType,
    EntityType,
    FieldChange,
    diff,
    has_significant_changes,
    record_bulk,
)
from domain.errors import InvariantViolation
from domain.taxonomy import TreeNode


def _changes(entry: AuditEntry) -> list[tuple[str, object, object]]:
    return [(c.field, c.old_value, c.new_value) for c in entry.field_changes]


def test_update_reports_only_changed_fields() -> None:
    entry = diff({"score": 5, "name": "X"}, {"score": 5, "name": "Y"}, EntityType.RISK, "risk-manager", "r1", "1 X")

    assert entry.change_type is ChangeType.UPDATE
    assert list(entry.field_changes) == [FieldChange(field="name", old_value="X", new_value="Y")]


def test_create_and_delete_are_mirror_images() -> None:
    snapshot = {"name": "Credit", "score": 12, "tags": ["a"]}

    created = diff(None, snapshot, "risk", "u", "r1", "1 Credit")
    deleted = diff(snapshot, None, "risk", "u", "r1", "1 Credit")

    assert created.change_type is ChangeType.CREATE
    assert deleted.change_type is ChangeType.DELETE
    assert _changes(created) == [("name", None, "Credit"), ("score", None, 12), ("tags", None, ["a"])]
    assert [(f, new, old) for f, old, new in _changes(deleted)] == _changes(created)


def test_both_snapshots_missing_is_an_invariant_violation() -> None:
    with pytest.raises(InvariantViolation):
        diff(None, None, EntityType.RISK, "u", "r1")


def test_nested_paths_address_single_elements() -> None:
    before = {
        "controls": [{"id": "c1", "netScore": 4}, {"id": "c2", "netScore": 6}],
        "owner": {"email": "a@x.io", "team": "ops"},
    }
    after = {
        "controls": [{"id": "c1", "netScore": 3}, {"id": "c2", "netScore": 6}],
        "owner": {"email": "b@x.io", "team": "ops"},
    }

    entry = diff(before, after, EntityType.RCT_ROW, "u", "row-1")

    assert _changes(entry) == [
        ("controls[0].netScore", 4, 3),
        ("owner.email", "a@x.io", "b@x.io"),
    ]


def test_added_and_removed_keys_and_elements() -> None:
    before = {"a": 1, "steps": ["s1", "s2"]}
    after = {"steps": ["s1"], "b": 2}

    entry = diff(before, after, EntityType.CONTROL, "u", "c1")

    assert _changes(entry) == [
        ("a", 1, None),
        ("steps[1]", "s2", None),
        ("b", None, 2),
    ]


def test_bool_and_number_are_distinct_but_nan_equals_nan() -> None:
    entry = diff(
        {"flag": 1, "ratio": float("nan"), "count": 2},
        {"flag": True, "ratio": float("nan"), "count": 2.0},
        EntityType.CONTROL_TEST,
        "u",
        "t1",
    )

    assert _changes(entry) == [("flag", 1, True)]


def test_excluded_fields_are_skipped() -> None:
    entry = diff(
        {"grossScore": 4, "netScore": 2, "name": "A"},
        {"grossScore": 9, "netScore": 1, "name": "A"},
        EntityType.RCT_ROW,
        "u",
        "row-1",
        exclude_fields=DERIVED_FIELDS,
    )

    assert entry.field_changes == ()
    assert not has_significant_changes(entry)


def test_pydantic_snapshots_are_compared_by_camel_case_dump() -> None:
    before = TreeNode(id="n1", hierarchical_id="1", name="Old")
    after = TreeNode(id="n1", hierarchical_id="2", name="Old")

    entry = diff(before, after, EntityType.PROCESS, "u", before.id, "2 Old")

    assert _changes(entry) == [("hierarchicalId", "1", "2")]


def test_entry_metadata_and_name_snapshot() -> None:
    ts = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    after = {"name": "Renamed"}

    entry = diff({"name": "Original"}, after, "risk", "control-owner", "r9", "1.2 Original", timestamp=ts)
    after["name"] = "Mutated later"

    assert entry.entity_type is EntityType.RISK
    assert entry.entity_id == "r9"
    assert entry.entity_name == "1.2 Original"
    assert entry.user == "control-owner"
    assert entry.timestamp == ts
    assert entry.field_changes[0].new_value == "Renamed"
    assert entry.id


def test_entries_are_immutable() -> None:
    entry = diff(None, {"name": "A"}, "risk", "u", "r1")

    with pytest.raises(ValidationError):
        entry.user = "someone-else"  # ty: ignore


def test_entry_serializes_with_camel_case_keys() -> None:
    entry = diff(None, {"name": "A"}, "controlLink", "u", "l1", "Link")

    data = entry.model_dump(mode="json", by_alias=True)

    assert data["entityType"] == "controlLink"
    assert data["changeType"] == "create"
    assert data["fieldChanges"] == [{"field": "name", "oldValue": None, "newValue": "A"}]
    assert AuditEntry.model_validate(data) == entry


def test_bulk_entry() -> None:
    entry = record_bulk("Deleted 3 risks including '1.1'", EntityType.RISK, "risk-manager")

    assert entry.entity_id == ""
    assert entry.change_type is ChangeType.DELETE
    assert entry.field_changes == ()
    assert entry.summary == "Deleted 3 risks including '1.1'"
    assert has_significant_changes(entry)


def test_invalid_entity_type() -> None:
    with pytest.raises(ValueError):
        diff(None, {"name": "A"}, "spreadsheet", "u", "x")
