"""Persistence layer that keeps audit columns current for mapped models."""

from __future__ import annotations

import operator
from collections.abc import Callable, Mapping, Sequence
from datetime import datetime
from typing import Any, Generic, TypeVar

from sqlalchemy import Select, and_, false, inspect, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import set_committed_value

from model_tracker.application.pipeline import AuditPipeline
from model_tracker.application.tracker import ModelTracker, get_tracker
from model_tracker.domain.entities import (
    CREATED_AT,
    CREATED_BY,
    DELETED_BY,
    UPDATED_AT,
    UPDATED_BY,
    RecordState,
    TrackingColumnSet,
    TrackingOperation,
    can_transition,
    transition,
)
from model_tracker.domain.providers import SchemaInspector
from model_tracker.infrastructure.records import OrmRecord
from model_tracker.infrastructure.schema_inspector import DeclaredSchemaInspector
from model_tracker.utils import DEFAULT_TIMESTAMP_FORMAT, format_timestamp

ModelT = TypeVar("ModelT")


def _resolve_columns(
    columns: TrackingColumnSet | Mapping[str, str] | None,
    model: type,
    tracker: ModelTracker,
) -> TrackingColumnSet:
    candidate = columns if columns is not None else getattr(model, "__tracking_columns__", None)
    if candidate is None:
        return tracker.tracking_columns()
    if isinstance(candidate, TrackingColumnSet):
        return candidate
    return TrackingColumnSet.from_mapping(candidate)


def _unwrap(record: Any) -> Any:
    return record.instance if isinstance(record, OrmRecord) else record


class _SoftDeleteWriter:
    """Persister handed to the soft delete stage.

    It folds the deletion marker into the ``deleted_by`` write, so the row
    is trashed and attributed by one ``UPDATE``.
    """

    def __init__(self, repository: TrackedRepository[Any], marker: str) -> None:
        self.repository = repository
        self.marker = marker
        self.written = False

    def save(self, record: Any) -> None:
        self.save_quietly(record, [])

    def save_quietly(self, record: Any, columns: Sequence[str]) -> None:
        self.repository.save_quietly(record, [*columns, self.marker])
        self.written = True


class TrackedRepository(Generic[ModelT]):
    """Create, update, soft delete and restore ``model`` rows with tracking.

    Audit columns are resolved per model: ``columns`` wins, then the model's
    ``__tracking_columns__`` attribute, then the configured settings. Column
    presence is answered by ``schema_inspector`` or, by default, by the
    columns declared on the mapped table.
    """

    def __init__(
        self,
        session: Session,
        model: type[ModelT],
        *,
        tracker: ModelTracker | None = None,
        columns: TrackingColumnSet | Mapping[str, str] | None = None,
        schema_inspector: SchemaInspector | None = None,
        user_model: type | None = None,
    ) -> None:
        self.session = session
        self.model = model
        self.tracker = tracker or get_tracker()
        self.columns = _resolve_columns(columns, model, self.tracker)
        self.schema_inspector = schema_inspector or DeclaredSchemaInspector.from_models(model)
        self.pipeline = AuditPipeline(self.tracker, self.schema_inspector, columns=self.columns)
        self.user_model = user_model
        self.mapper = inspect(model)
        self.table = self.mapper.local_table
        self.soft_delete_column = self.tracker.settings.soft_delete_column

    # ---- Lifecycle ----

    def supports_soft_deletes(self) -> bool:
        return self.soft_delete_column in self.table.c

    def state_of(self, instance: ModelT) -> RecordState:
        """Return the lifecycle state of ``instance``."""

        state = inspect(instance)
        if state.transient or state.pending:
            return RecordState.NEW
        if (
            self.supports_soft_deletes()
            and OrmRecord(instance).get_field(self.soft_delete_column) is not None
        ):
            return RecordState.TRASHED
        return RecordState.PERSISTED

    def create(self, instance: ModelT) -> ModelT:
        transition(self.state_of(instance), TrackingOperation.CREATE)
        self.pipeline.before_create(OrmRecord(instance))
        return self.save(instance)

    def update(self, instance: ModelT) -> ModelT:
        transition(self.state_of(instance), TrackingOperation.UPDATE)
        self.pipeline.before_update(OrmRecord(instance))
        return self.save(instance)

    def touch(self, instance: ModelT) -> ModelT:
        """Refresh ``updated_at`` and ``updated_by`` even without other changes."""

        return self.update(instance)

    def delete(self, instance: ModelT) -> None:
        """Soft delete ``instance`` when its table supports it, else remove it.

        The deletion marker and ``deleted_by`` are stored together by a single
        quiet write, so ``updated_at`` and ``updated_by`` keep their values.
        Deleting a record that is already trashed does nothing.
        """

        if not self.supports_soft_deletes():
            self.force_delete(instance)
            return
        if not can_transition(self.state_of(instance), TrackingOperation.SOFT_DELETE):
            return

        record = OrmRecord(instance)
        record.set_field(self.soft_delete_column, self.tracker.get_current_timestamp())
        writer = _SoftDeleteWriter(self, self.soft_delete_column)
        self.pipeline.before_soft_delete(record, writer)
        if not writer.written:
            self.save_quietly(record, [self.soft_delete_column])

    def force_delete(self, instance: ModelT) -> None:
        self.session.delete(instance)
        self.session.commit()

    def restore(self, instance: ModelT) -> ModelT:
        """Bring a trashed record back and clear ``deleted_by``.

        Only the marker and ``deleted_by`` are written.
        """

        if not self.supports_soft_deletes():
            return instance
        if not can_transition(self.state_of(instance), TrackingOperation.RESTORE):
            return instance

        record = OrmRecord(instance)
        cleared = self.pipeline.before_restore(record)
        record.set_field(self.soft_delete_column, None)
        self.save_quietly(record, [*cleared, self.soft_delete_column])
        return instance

    # ---- Persistence ----

    def get(self, record_id: Any, *, include_trashed: bool = False) -> ModelT | None:
        instance = self.session.get(self.model, record_id)
        if instance is None:
            return None
        if not include_trashed and self.state_of(instance) is RecordState.TRASHED:
            return None
        return instance

    def save(self, instance: ModelT) -> ModelT:
        """Persist ``instance`` without running any tracking stage."""

        self.session.add(instance)
        self.session.commit()
        self.session.refresh(instance)
        return instance

    def save_quietly(self, record: Any, columns: Sequence[str]) -> None:
        """Write only ``columns`` of a persisted row with a single ``UPDATE``.

        Columns with an ``onupdate`` default are pinned to their stored value
        so the statement changes nothing else. A failed write rolls the
        session back, leaving the row and the instance as they were stored.
        """

        instance = _unwrap(record)
        orm_record = OrmRecord(instance)
        state = inspect(instance)
        if state.identity is None:
            raise ValueError("Cannot quietly save a record that has not been persisted")

        values = {column: orm_record.get_field(column) for column in columns}
        for column in self.table.columns:
            if column.onupdate is not None and column.name not in values:
                values[column.name] = self._committed_value(instance, column.name)

        primary_key = and_(
            *[
                column == identity
                for column, identity in zip(self.mapper.primary_key, state.identity)
            ]
        )
        try:
            self.session.execute(update(self.table).where(primary_key).values(values))
            for column in columns:
                if orm_record.is_mapped(column):
                    set_committed_value(
                        instance, orm_record.attribute_key(column), values[column]
                    )
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise

    @staticmethod
    def _committed_value(instance: Any, column: str) -> Any:
        orm_record = OrmRecord(instance)
        if not orm_record.is_mapped(column):
            return None
        history = inspect(instance).attrs[orm_record.attribute_key(column)].load_history()
        if history.deleted:
            return history.deleted[0]
        if history.unchanged:
            return history.unchanged[0]
        return None

    # ---- Query scopes ----

    def select_active(self) -> Select:
        statement = select(self.model)
        if self.supports_soft_deletes():
            statement = statement.where(self.table.c[self.soft_delete_column].is_(None))
        return statement

    def select_trashed(self) -> Select:
        statement = select(self.model)
        if not self.supports_soft_deletes():
            return statement.where(false())
        return statement.where(self.table.c[self.soft_delete_column].is_not(None))

    def list(self, statement: Select | None = None) -> list[ModelT]:
        statement = statement if statement is not None else self.select_active()
        return list(self.session.scalars(statement).all())

    def filter_created_by(self, user_id: int, statement: Select | None = None) -> Select:
        return self._filter(CREATED_BY, operator.eq, user_id, statement)

    def filter_updated_by(self, user_id: int, statement: Select | None = None) -> Select:
        return self._filter(UPDATED_BY, operator.eq, user_id, statement)

    def filter_deleted_by(self, user_id: int, statement: Select | None = None) -> Select:
        return self._filter(DELETED_BY, operator.eq, user_id, statement)

    def filter_created_after(self, moment: datetime, statement: Select | None = None) -> Select:
        return self._filter(CREATED_AT, operator.ge, moment, statement)

    def filter_created_before(self, moment: datetime, statement: Select | None = None) -> Select:
        return self._filter(CREATED_AT, operator.le, moment, statement)

    def filter_updated_after(self, moment: datetime, statement: Select | None = None) -> Select:
        return self._filter(UPDATED_AT, operator.ge, moment, statement)

    def filter_updated_before(self, moment: datetime, statement: Select | None = None) -> Select:
        return self._filter(UPDATED_AT, operator.le, moment, statement)

    def _filter(
        self,
        role: str,
        comparison: Callable[[Any, Any], Any],
        value: Any,
        statement: Select | None,
    ) -> Select:
        statement = statement if statement is not None else self.select_active()
        if not self.pipeline.has_column(self.table.name, role):
            return statement
        column = self.table.c.get(self.columns.column_for(role))
        if column is None:
            return statement
        return statement.where(comparison(column, value))

    # ---- Related users ----

    def creator(self, instance: ModelT) -> Any | None:
        return self._related_user(instance, CREATED_BY)

    def updater(self, instance: ModelT) -> Any | None:
        return self._related_user(instance, UPDATED_BY)

    def deleter(self, instance: ModelT) -> Any | None:
        return self._related_user(instance, DELETED_BY)

    def was_created_by(self, instance: ModelT, user_id: int) -> bool:
        return self._tracked_value(instance, CREATED_BY) == user_id

    def was_updated_by(self, instance: ModelT, user_id: int) -> bool:
        return self._tracked_value(instance, UPDATED_BY) == user_id

    def was_deleted_by(self, instance: ModelT, user_id: int) -> bool:
        return self._tracked_value(instance, DELETED_BY) == user_id

    def _related_user(self, instance: ModelT, role: str) -> Any | None:
        if self.user_model is None:
            return None
        user_id = self._tracked_value(instance, role)
        if user_id is None:
            return None
        return self.session.get(self.user_model, user_id)

    def _tracked_value(self, instance: ModelT, role: str) -> Any | None:
        if not self.pipeline.has_column(self.table.name, role):
            return None
        return OrmRecord(instance).get_field(self.columns.column_for(role))

    # ---- Formatting ----

    def created_at_formatted(
        self, instance: ModelT, fmt: str = DEFAULT_TIMESTAMP_FORMAT
    ) -> str | None:
        return format_timestamp(self._tracked_value(instance, CREATED_AT), fmt)

    def updated_at_formatted(
        self, instance: ModelT, fmt: str = DEFAULT_TIMESTAMP_FORMAT
    ) -> str | None:
        return format_timestamp(self._tracked_value(instance, UPDATED_AT), fmt)


__all__ = ["TrackedRepository"]
