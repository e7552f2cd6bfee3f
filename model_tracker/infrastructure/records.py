"""Adapter exposing SQLAlchemy instances as tracked records."""

from __future__ import annotations

from typing import Any

from sqlalchemy import inspect


class OrmRecord:
    """Read and write a mapped instance by physical column name."""

    def __init__(self, instance: Any) -> None:
        self.instance = instance
        self.mapper = inspect(type(instance))
        self._attribute_keys = {
            column.name: key for key, column in self.mapper.columns.items()
        }

    @property
    def table_name(self) -> str:
        return self.mapper.local_table.name

    def attribute_key(self, column: str) -> str:
        """Return the attribute mapped to ``column`` (the column name if unmapped)."""

        return self._attribute_keys.get(column, column)

    def is_mapped(self, column: str) -> bool:
        return column in self._attribute_keys

    def get_field(self, column: str) -> Any:
        return getattr(self.instance, self.attribute_key(column), None)

    def set_field(self, column: str, value: Any) -> None:
        setattr(self.instance, self.attribute_key(column), value)


__all__ = ["OrmRecord"]
