"""Domain entity carrying the per-operation tracking context."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class TrackingFlags:
    """Feature switches that apply to a single tracking operation."""

    timestamps: bool = True
    user_tracking: bool = True
    soft_deletes: bool = True


@dataclass(frozen=True)
class AuditContext:
    """Acting user, timestamp and flags consumed by the resolver."""

    acting_user_id: int | None
    timestamp: datetime
    flags: TrackingFlags = TrackingFlags()

    @property
    def has_acting_user(self) -> bool:
        return self.acting_user_id is not None


__all__ = ["AuditContext", "TrackingFlags"]
