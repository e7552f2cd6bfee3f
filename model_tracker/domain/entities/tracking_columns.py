"""Domain entity describing the physical columns used for tracking."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Final

from model_tracker.domain.exceptions import InvalidTrackingColumnsError

CREATED_AT: Final[str] = "created_at"
UPDATED_AT: Final[str] = "updated_at"
CREATED_BY: Final[str] = "created_by"
UPDATED_BY: Final[str] = "updated_by"
DELETED_BY: Final[str] = "deleted_by"

TIMESTAMP_ROLES: Final[tuple[str, ...]] = (CREATED_AT, UPDATED_AT)
USER_ROLES: Final[tuple[str, ...]] = (CREATED_BY, UPDATED_BY, DELETED_BY)
TRACKING_ROLES: Final[tuple[str, ...]] = TIMESTAMP_ROLES + USER_ROLES


@dataclass(frozen=True)
class TrackingColumnSet:
    """Map each tracking role to the column that stores it."""

    created_at: str = CREATED_AT
    updated_at: str = UPDATED_AT
    created_by: str = CREATED_BY
    updated_by: str = UPDATED_BY
    deleted_by: str = DELETED_BY

    def __post_init__(self) -> None:
        seen: dict[str, str] = {}
        for role in TRACKING_ROLES:
            column = getattr(self, role)
            if not isinstance(column, str) or not column.strip():
                msg = f"Tracking role '{role}' must map to a non-empty column name"
                raise InvalidTrackingColumnsError(msg)
            if column in seen:
                msg = (
                    f"Column '{column}' is mapped to both '{seen[column]}' and '{role}'"
                )
                raise InvalidTrackingColumnsError(msg)
            seen[column] = role

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, str] | None) -> "TrackingColumnSet":
        """Build a column set from a role -> column mapping.

        Roles missing from ``mapping`` keep their default column name. Keys
        that are not tracking roles are rejected.
        """

        if not mapping:
            return cls()
        unknown = sorted(set(mapping) - set(TRACKING_ROLES))
        if unknown:
            msg = f"Unknown tracking roles: {', '.join(unknown)}"
            raise InvalidTrackingColumnsError(msg)
        return cls(**dict(mapping))

    def column_for(self, role: str) -> str | None:
        """Return the column mapped to ``role`` or ``None`` for unknown roles."""

        if role not in TRACKING_ROLES:
            return None
        return getattr(self, role)

    def as_dict(self) -> dict[str, str]:
        return asdict(self)

    def timestamp_columns(self) -> dict[str, str]:
        return {role: getattr(self, role) for role in TIMESTAMP_ROLES}

    def user_columns(self) -> dict[str, str]:
        return {role: getattr(self, role) for role in USER_ROLES}

    def is_tracking_column(self, column: str) -> bool:
        """Return ``True`` when ``column`` is one of the mapped columns."""

        return column in self.as_dict().values()


__all__ = [
    "CREATED_AT",
    "UPDATED_AT",
    "CREATED_BY",
    "UPDATED_BY",
    "DELETED_BY",
    "TIMESTAMP_ROLES",
    "USER_ROLES",
    "TRACKING_ROLES",
    "TrackingColumnSet",
]
