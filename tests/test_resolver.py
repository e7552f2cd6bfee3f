"""Unit tests for the audit field resolution policy."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

import pytest

from model_tracker.application.resolver import AuditFieldResolver
from model_tracker.domain.entities import AuditContext, AuditRecord, TrackingColumnSet, TrackingFlags
from model_tracker.domain.exceptions import QuietWriteError
from model_tracker.infrastructure.schema_inspector import DeclaredSchemaInspector

T0 = datetime(2024, 1, 1, 9, 0, 0)
T1 = T0 + timedelta(minutes=5)
ALL_COLUMNS = ["id", "name", "created_at", "updated_at", "created_by", "updated_by", "deleted_by"]
COLUMNS = TrackingColumnSet()


class QuietPersister:
    def __init__(self) -> None:
        self.calls: list[tuple[AuditRecord, list[str]]] = []

    def save(self, record):  # pragma: no cover - the quiet path is preferred
        raise AssertionError("save() must not be used when save_quietly() exists")

    def save_quietly(self, record, columns):
        self.calls.append((record, list(columns)))


class TimestampPersister:
    """Persister without a quiet path; records the timestamps flag on save."""

    def __init__(self, *, fail: bool = False) -> None:
        self.timestamps = True
        self.fail = fail
        self.seen: list[bool] = []

    def save(self, record):
        self.seen.append(self.timestamps)
        if self.fail:
            raise RuntimeError("disk full")


class PlainPersister:
    def __init__(self) -> None:
        self.saved: list[AuditRecord] = []

    def save(self, record):
        self.saved.append(record)


class ExplodingInspector:
    def has_column(self, table: str, column: str) -> bool:
        raise RuntimeError("catalog unreachable")


def _resolver(**tables) -> AuditFieldResolver:
    tables = tables or {"posts": ALL_COLUMNS}
    return AuditFieldResolver(DeclaredSchemaInspector(tables))


def _context(user_id: int | None = 7, timestamp: datetime = T0, **flags) -> AuditContext:
    return AuditContext(acting_user_id=user_id, timestamp=timestamp, flags=TrackingFlags(**flags))


def test_create_with_user_sets_timestamps_and_users() -> None:
    record = AuditRecord("posts", {"name": "Post A"})

    mutations = _resolver().on_create(record, COLUMNS, _context(7))

    assert record.values == {
        "name": "Post A",
        "created_at": T0,
        "updated_at": T0,
        "created_by": 7,
        "updated_by": 7,
    }
    assert mutations == {"created_at": T0, "updated_at": T0, "created_by": 7, "updated_by": 7}


def test_create_without_user_only_sets_timestamps() -> None:
    record = AuditRecord("posts", {"name": "Anonymous"})

    _resolver().on_create(record, COLUMNS, _context(None))

    assert record.values["created_at"] == T0
    assert record.values["updated_at"] == T0
    assert "created_by" not in record.values
    assert "updated_by" not in record.values


def test_create_keeps_preset_creation_values() -> None:
    preset = T0 - timedelta(days=3)
    record = AuditRecord("posts", {"created_at": preset, "created_by": 3, "updated_by": 3})

    _resolver().on_create(record, COLUMNS, _context(7))

    assert record.values["created_at"] == preset
    assert record.values["created_by"] == 3
    assert record.values["updated_at"] == T0
    assert record.values["updated_by"] == 7


def test_create_treats_empty_strings_as_blank() -> None:
    record = AuditRecord("posts", {"created_at": "", "created_by": None})

    _resolver().on_create(record, COLUMNS, _context(7))

    assert record.values["created_at"] == T0
    assert record.values["created_by"] == 7


def test_disabled_flags_skip_their_columns() -> None:
    no_timestamps = AuditRecord("posts")
    _resolver().on_create(no_timestamps, COLUMNS, _context(7, timestamps=False))
    assert no_timestamps.values == {"created_by": 7, "updated_by": 7}

    no_users = AuditRecord("posts")
    _resolver().on_create(no_users, COLUMNS, _context(7, user_tracking=False))
    assert no_users.values == {"created_at": T0, "updated_at": T0}


def test_absent_columns_are_skipped_silently() -> None:
    resolver = _resolver(memos=["id", "description", "created_at", "updated_at"])
    record = AuditRecord("memos", {"description": "only timestamps"})

    resolver.on_create(record, COLUMNS, _context(7))
    resolver.on_update(record, COLUMNS, _context(9, T1))

    assert record.values == {
        "description": "only timestamps",
        "created_at": T0,
        "updated_at": T1,
    }


def test_inspector_failure_is_treated_as_absent_column(caplog: pytest.LogCaptureFixture) -> None:
    resolver = AuditFieldResolver(ExplodingInspector())
    record = AuditRecord("posts", {"name": "Post A"})

    with caplog.at_level(logging.WARNING, logger="model_tracker.application.resolver"):
        mutations = resolver.on_create(record, COLUMNS, _context(7))

    assert mutations == {}
    assert record.values == {"name": "Post A"}
    assert "catalog unreachable" in caplog.text
    assert all(entry.levelno == logging.WARNING for entry in caplog.records)


def test_inspector_failure_is_not_logged_when_logging_is_disabled(
    caplog: pytest.LogCaptureFixture,
) -> None:
    resolver = AuditFieldResolver(ExplodingInspector(), logging_enabled=False)

    with caplog.at_level(logging.WARNING):
        assert resolver.has_column("posts", "created_by") is False

    assert caplog.records == []


def test_update_overwrites_updated_columns_only() -> None:
    resolver = _resolver()
    record = AuditRecord("posts", {"name": "Post A"})
    resolver.on_create(record, COLUMNS, _context(7, T0))

    mutations = resolver.on_update(record, COLUMNS, _context(9, T1))

    assert mutations == {"updated_at": T1, "updated_by": 9}
    assert record.values["created_at"] == T0
    assert record.values["created_by"] == 7


def test_repeated_updates_never_move_creation_or_time_backwards() -> None:
    resolver = _resolver()
    record = AuditRecord("posts")
    resolver.on_create(record, COLUMNS, _context(7, T0))

    resolver.on_update(record, COLUMNS, _context(7, T1))
    first = record.values["updated_at"]
    resolver.on_update(record, COLUMNS, _context(7, T1))

    assert record.values["updated_at"] >= first
    assert record.values["created_at"] == T0
    assert record.values["created_by"] == 7


def test_update_without_user_keeps_previous_updater() -> None:
    resolver = _resolver()
    record = AuditRecord("posts", {"updated_by": 7})

    resolver.on_update(record, COLUMNS, _context(None, T1))

    assert record.values["updated_by"] == 7
    assert record.values["updated_at"] == T1


def test_soft_delete_uses_the_quiet_write_path() -> None:
    persister = QuietPersister()
    record = AuditRecord("posts", {"name": "Post A", "updated_by": 7, "updated_at": T0})

    mutations = _resolver().on_soft_delete(record, COLUMNS, _context(9, T1), persister)

    assert mutations == {"deleted_by": 9}
    assert persister.calls == [(record, ["deleted_by"])]
    assert record.values == {"name": "Post A", "updated_by": 7, "updated_at": T0, "deleted_by": 9}


@pytest.mark.parametrize(
    "context",
    [
        _context(None),
        _context(9, soft_deletes=False),
        _context(9, user_tracking=False),
    ],
)
def test_soft_delete_is_skipped_without_user_or_integration(context: AuditContext) -> None:
    persister = QuietPersister()
    record = AuditRecord("posts")

    assert _resolver().on_soft_delete(record, COLUMNS, context, persister) == {}
    assert persister.calls == []
    assert "deleted_by" not in record.values


def test_soft_delete_without_deleted_by_column_does_nothing() -> None:
    persister = QuietPersister()
    resolver = _resolver(notes=["id", "title", "created_by", "updated_by"])

    assert resolver.on_soft_delete(AuditRecord("notes"), COLUMNS, _context(9), persister) == {}
    assert persister.calls == []


def test_soft_delete_fallback_disables_timestamps_for_one_save() -> None:
    persister = TimestampPersister()
    record = AuditRecord("posts")

    _resolver().on_soft_delete(record, COLUMNS, _context(9), persister)

    assert persister.seen == [False]
    assert persister.timestamps is True
    assert record.values == {"deleted_by": 9}


def test_soft_delete_fallback_without_timestamps_attribute_saves_once() -> None:
    persister = PlainPersister()
    record = AuditRecord("posts")

    _resolver().on_soft_delete(record, COLUMNS, _context(9), persister)

    assert persister.saved == [record]


def test_quiet_write_failures_propagate() -> None:
    persister = TimestampPersister(fail=True)

    with pytest.raises(QuietWriteError, match="deleted_by") as exc_info:
        _resolver().on_soft_delete(AuditRecord("posts"), COLUMNS, _context(9), persister)

    assert isinstance(exc_info.value.__cause__, RuntimeError)
    assert persister.timestamps is True


def test_restore_clears_deleted_by_without_a_context() -> None:
    record = AuditRecord("posts", {"deleted_by": 9, "created_by": 7, "updated_by": 7})

    mutations = _resolver().on_restore(record, COLUMNS)

    assert mutations == {"deleted_by": None}
    assert record.values == {"deleted_by": None, "created_by": 7, "updated_by": 7}


def test_restore_without_deleted_by_column_does_nothing() -> None:
    resolver = _resolver(memos=["id", "created_at", "updated_at"])

    assert resolver.on_restore(AuditRecord("memos"), COLUMNS) == {}


def test_custom_column_names_are_honoured() -> None:
    columns = TrackingColumnSet(created_by="author_id", updated_by="editor_id")
    resolver = _resolver(articles=["id", "created_at", "updated_at", "author_id", "editor_id"])
    record = AuditRecord("articles")

    resolver.on_create(record, columns, _context(7))

    assert record.values == {
        "created_at": T0,
        "updated_at": T0,
        "author_id": 7,
        "editor_id": 7,
    }


def test_post_lifecycle_scenario() -> None:
    resolver = _resolver()
    persister = QuietPersister()
    record = AuditRecord("posts", {"name": "Post A"})

    resolver.on_create(record, COLUMNS, _context(7, T0))
    assert record.values == {
        "name": "Post A",
        "created_by": 7,
        "updated_by": 7,
        "created_at": T0,
        "updated_at": T0,
    }

    resolver.on_update(record, COLUMNS, _context(9, T1))
    after_update = dict(record.values)
    assert after_update == {
        "name": "Post A",
        "created_by": 7,
        "updated_by": 9,
        "created_at": T0,
        "updated_at": T1,
    }

    resolver.on_soft_delete(record, COLUMNS, _context(9, T1), persister)
    assert record.values == {**after_update, "deleted_by": 9}

    resolver.on_restore(record, COLUMNS)
    assert record.values["deleted_by"] is None
    assert record.values["created_by"] == 7
    assert record.values["updated_by"] == 9
