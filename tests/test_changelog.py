from __future__ import annotations

from datetime import UTC, datetime

from pyhotaru.models.changelog import ChangeKind, Changelog, UserChange


def _change(kind: ChangeKind, field: str, value: object, change_id: str) -> UserChange:
    return UserChange(id=change_id, kind=kind, field=field, value=value)


def test_set_coalesces_earlier_sets_for_same_field() -> None:
    log = Changelog()
    log.append(UserChange.create(ChangeKind.SET, "name", "v1"))
    log.append(UserChange.create(ChangeKind.SET, "name", "v2"))

    entries = list(log)
    assert len(entries) == 1
    assert entries[0].field == "name"
    assert entries[0].value == "v2"


def test_set_does_not_touch_other_fields_or_kinds() -> None:
    log = Changelog()
    log.append(_change(ChangeKind.INCREMENT, "score", 1, "a"))
    log.append(_change(ChangeKind.SET, "other", 1, "b"))
    log.append(_change(ChangeKind.SET, "score", 10, "c"))

    assert log.ids == ["a", "b", "c"]


def test_non_set_changes_keep_order_and_are_never_coalesced() -> None:
    log = Changelog()
    log.append(_change(ChangeKind.INCREMENT, "score", 1, "a"))
    log.append(_change(ChangeKind.INCREMENT, "score", 2, "b"))
    log.append(_change(ChangeKind.APPEND, "tags", "x", "c"))
    log.append(_change(ChangeKind.APPEND, "tags", "x", "d"))

    assert log.ids == ["a", "b", "c", "d"]


def test_prune_removes_processed_ids_and_preserves_order() -> None:
    log = Changelog(
        [
            _change(ChangeKind.INCREMENT, "n", 1, "a"),
            _change(ChangeKind.INCREMENT, "n", 1, "b"),
            _change(ChangeKind.INCREMENT, "n", 1, "c"),
        ]
    )

    removed = log.prune({"a", "c", "unknown"})

    assert removed == 2
    assert log.ids == ["b"]


def test_fresh_ids_are_unique() -> None:
    ids = {UserChange.create(ChangeKind.SET, "f", i).id for i in range(200)}
    assert len(ids) == 200


def test_wire_format_uses_server_keys() -> None:
    when = datetime(2026, 1, 1, 12, 30, tzinfo=UTC)
    change = UserChange(id="abc", kind=ChangeKind.APPEND, field="tags", value="x", date=when)

    assert change.to_wire() == {"_id": "abc", "type": "append", "field": "tags", "value": "x", "date": when}


def test_from_wire_restores_changes() -> None:
    when = datetime(2026, 1, 1, tzinfo=UTC)
    log = Changelog.from_wire(
        [
            {"_id": "a", "type": "set", "field": "name", "value": "Ada", "date": when},
            {"_id": "b", "type": "increment", "field": "n", "value": 2, "date": when},
        ]
    )

    entries = list(log)
    assert [e.kind for e in entries] == [ChangeKind.SET, ChangeKind.INCREMENT]
    assert entries[0].value == "Ada"
    assert entries[1].date == when
