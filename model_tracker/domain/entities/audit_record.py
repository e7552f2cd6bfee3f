"""Domain entity representing a storage-agnostic tracked record."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class AuditRecord:
    """Column values of a row together with the table it belongs to."""

    table: str
    values: dict[str, Any] = field(default_factory=dict)

    @property
    def table_name(self) -> str:
        return self.table

    def get_field(self, column: str) -> Any:
        return self.values.get(column)

    def set_field(self, column: str, value: Any) -> None:
        self.values[column] = value


__all__ = ["AuditRecord"]
