"""Audit field resolution policy.

The resolver decides which audit columns a lifecycle operation sets and with
which values. It reads and writes the record it is handed, asks the schema
inspector which columns exist and never talks to storage itself, with one
exception: the soft-delete follow-up write, which it delegates to the
persister supplied by the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from model_tracker.domain.entities import AuditContext, TrackingColumnSet
from model_tracker.domain.exceptions import QuietWriteError
from model_tracker.domain.providers import RecordPersister, SchemaInspector, TrackedRecord

logger = logging.getLogger(__name__)


def _is_blank(value: Any) -> bool:
    return value is None or value == ""


class AuditFieldResolver:
    """Compute and apply audit column mutations for lifecycle operations."""

    def __init__(self, schema_inspector: SchemaInspector, *, logging_enabled: bool = True) -> None:
        self.schema_inspector = schema_inspector
        self.logging_enabled = logging_enabled

    def has_column(self, table: str, column: str) -> bool:
        """Return ``True`` when ``table`` declares ``column``.

        Inspector failures are treated as an absent column.
        """

        try:
            return bool(self.schema_inspector.has_column(table, column))
        except Exception as exc:  # noqa: BLE001
            if self.logging_enabled:
                logger.warning(
                    "ModelTracker: Column check failed for %s.%s - %s", table, column, exc
                )
            return False

    def on_create(
        self, record: TrackedRecord, columns: TrackingColumnSet, ctx: AuditContext
    ) -> dict[str, Any]:
        mutations: dict[str, Any] = {}
        table = record.table_name

        if ctx.flags.timestamps:
            if self.has_column(table, columns.created_at) and _is_blank(
                record.get_field(columns.created_at)
            ):
                mutations[columns.created_at] = ctx.timestamp
            if self.has_column(table, columns.updated_at):
                mutations[columns.updated_at] = ctx.timestamp

        if ctx.flags.user_tracking and ctx.acting_user_id is not None:
            if self.has_column(table, columns.created_by) and _is_blank(
                record.get_field(columns.created_by)
            ):
                mutations[columns.created_by] = ctx.acting_user_id
            if self.has_column(table, columns.updated_by):
                mutations[columns.updated_by] = ctx.acting_user_id

        return self._apply(record, mutations)

    def on_update(
        self, record: TrackedRecord, columns: TrackingColumnSet, ctx: AuditContext
    ) -> dict[str, Any]:
        mutations: dict[str, Any] = {}
        table = record.table_name

        if ctx.flags.timestamps and self.has_column(table, columns.updated_at):
            mutations[columns.updated_at] = ctx.timestamp

        if (
            ctx.flags.user_tracking
            and ctx.acting_user_id is not None
            and self.has_column(table, columns.updated_by)
        ):
            mutations[columns.updated_by] = ctx.acting_user_id

        return self._apply(record, mutations)

    def on_soft_delete(
        self,
        record: TrackedRecord,
        columns: TrackingColumnSet,
        ctx: AuditContext,
        persister: RecordPersister,
    ) -> dict[str, Any]:
        """Stamp ``deleted_by`` and store it without re-entering the update path.

        Raises :class:`QuietWriteError` when the follow-up write fails.
        """

        if not ctx.flags.soft_deletes or not ctx.flags.user_tracking:
            return {}
        if ctx.acting_user_id is None:
            return {}
        if not self.has_column(record.table_name, columns.deleted_by):
            return {}

        mutations = self._apply(record, {columns.deleted_by: ctx.acting_user_id})
        self._save_quietly(record, persister, [columns.deleted_by])
        return mutations

    def on_restore(
        self,
        record: TrackedRecord,
        columns: TrackingColumnSet,
        ctx: AuditContext | None = None,
    ) -> dict[str, Any]:
        """Clear ``deleted_by``; no acting user is needed."""

        if not self.has_column(record.table_name, columns.deleted_by):
            return {}
        return self._apply(record, {columns.deleted_by: None})

    @staticmethod
    def _apply(record: TrackedRecord, mutations: dict[str, Any]) -> dict[str, Any]:
        for column, value in mutations.items():
            record.set_field(column, value)
        return mutations

    @staticmethod
    def _save_quietly(
        record: TrackedRecord, persister: RecordPersister, columns: Sequence[str]
    ) -> None:
        save_quietly = getattr(persister, "save_quietly", None)
        try:
            if callable(save_quietly):
                save_quietly(record, list(columns))
                return

            if not hasattr(persister, "timestamps"):
                persister.save(record)
                return

            original_timestamps = persister.timestamps
            persister.timestamps = False
            try:
                persister.save(record)
            finally:
                persister.timestamps = original_timestamps
        except Exception as exc:
            msg = f"Failed to store {', '.join(columns)} on {record.table_name}"
            raise QuietWriteError(msg) from exc


__all__ = ["AuditFieldResolver"]
