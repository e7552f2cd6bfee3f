"""Capability interfaces the host persistence and auth stack provides."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class IdentityProvider(Protocol):
    """Report the authenticated user for named guards."""

    def list_guards(self) -> Sequence[str]:
        """Return the configured guard names in declaration order."""

    def resolve_current_user_id(self, guard: str | None = None) -> int | None:
        """Return the user id for ``guard`` (``None`` selects the default guard)."""

    def resolve_current_user(self, guard: str | None = None) -> Any | None:
        """Return the user object for ``guard`` (``None`` selects the default guard)."""


@runtime_checkable
class SchemaInspector(Protocol):
    """Answer whether a table declares a column."""

    def has_column(self, table: str, column: str) -> bool:
        ...


@runtime_checkable
class Clock(Protocol):
    def now(self) -> datetime:
        ...


@runtime_checkable
class TrackedRecord(Protocol):
    """Row whose audit columns the resolver reads and mutates."""

    @property
    def table_name(self) -> str:
        ...

    def get_field(self, column: str) -> Any:
        ...

    def set_field(self, column: str, value: Any) -> None:
        ...


@runtime_checkable
class RecordPersister(Protocol):
    """Write path used for the soft-delete follow-up save.

    Persisters exposing a ``timestamps`` attribute have it switched off
    around the save so no automatic timestamp is written.
    """

    def save(self, record: Any) -> Any:
        ...


@runtime_checkable
class QuietRecordPersister(RecordPersister, Protocol):
    """Persister offering a write that bypasses lifecycle hooks."""

    def save_quietly(self, record: Any, columns: Sequence[str]) -> Any:
        """Store only ``columns`` of ``record`` without running any stage."""


__all__ = [
    "IdentityProvider",
    "SchemaInspector",
    "Clock",
    "TrackedRecord",
    "RecordPersister",
    "QuietRecordPersister",
]
