"""Schema inspectors answering which tracking columns a table declares."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from sqlalchemy import MetaData, inspect
from sqlalchemy.engine import Connection, Engine


class DeclaredSchemaInspector:
    """Answer column checks from column sets declared up front.

    Tables are described once (usually from mapped classes), so no database
    round trip happens on writes. Unknown tables have no columns.
    """

    def __init__(self, tables: Mapping[str, Iterable[str]] | None = None) -> None:
        self._tables: dict[str, frozenset[str]] = {
            table: frozenset(columns) for table, columns in (tables or {}).items()
        }

    @classmethod
    def from_models(cls, *models: type) -> "DeclaredSchemaInspector":
        """Describe the tables mapped by the given SQLAlchemy classes."""

        tables: dict[str, set[str]] = {}
        for model in models:
            mapper = inspect(model)
            for table in mapper.tables:
                tables.setdefault(table.name, set()).update(table.columns.keys())
        return cls(tables)

    @classmethod
    def from_metadata(cls, metadata: MetaData) -> "DeclaredSchemaInspector":
        return cls(
            {table.name: table.columns.keys() for table in metadata.tables.values()}
        )

    def declare(self, table: str, columns: Iterable[str]) -> None:
        self._tables[table] = frozenset(columns)

    def has_column(self, table: str, column: str) -> bool:
        return column in self._tables.get(table, frozenset())


class LiveSchemaInspector:
    """Probe the database catalog on every check.

    Errors (missing table, unreachable database) propagate; the resolver
    treats them as an absent column.
    """

    def __init__(self, bind: Engine | Connection, *, schema: str | None = None) -> None:
        self.bind = bind
        self.schema = schema

    def has_column(self, table: str, column: str) -> bool:
        columns = inspect(self.bind).get_columns(table, schema=self.schema)
        return any(entry["name"] == column for entry in columns)


__all__ = ["DeclaredSchemaInspector", "LiveSchemaInspector"]
