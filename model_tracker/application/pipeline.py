"""Explicit tracking stages invoked by persistence call sites."""

from __future__ import annotations

from typing import Any

from model_tracker.application.resolver import AuditFieldResolver
from model_tracker.application.tracker import ModelTracker
from model_tracker.domain.entities import TrackingColumnSet
from model_tracker.domain.providers import RecordPersister, SchemaInspector, TrackedRecord


class AuditPipeline:
    """Run the audit field resolver for each stage of a record's lifecycle.

    Stages are called deliberately by the persistence layer, so
    :meth:`before_soft_delete` never re-enters :meth:`before_update`.
    """

    def __init__(
        self,
        tracker: ModelTracker,
        schema_inspector: SchemaInspector,
        *,
        columns: TrackingColumnSet | None = None,
    ) -> None:
        self.tracker = tracker
        self.columns = columns or tracker.tracking_columns()
        self.resolver = AuditFieldResolver(
            schema_inspector, logging_enabled=tracker.is_logging_enabled()
        )

    def before_create(self, record: TrackedRecord) -> dict[str, Any]:
        return self.resolver.on_create(record, self.columns, self.tracker.build_context())

    def before_update(self, record: TrackedRecord) -> dict[str, Any]:
        return self.resolver.on_update(record, self.columns, self.tracker.build_context())

    def before_soft_delete(
        self, record: TrackedRecord, persister: RecordPersister
    ) -> dict[str, Any]:
        return self.resolver.on_soft_delete(
            record, self.columns, self.tracker.build_context(), persister
        )

    def before_restore(self, record: TrackedRecord) -> dict[str, Any]:
        return self.resolver.on_restore(record, self.columns)

    def has_column(self, table: str, role: str) -> bool:
        """Return ``True`` when ``table`` declares the column mapped to ``role``."""

        column = self.columns.column_for(role)
        if column is None:
            return False
        return self.resolver.has_column(table, column)


__all__ = ["AuditPipeline"]
