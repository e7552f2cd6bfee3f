"""Domain entities exposed by the library."""

from .audit_context import AuditContext, TrackingFlags
from .audit_record import AuditRecord
from .lifecycle import RecordState, TrackingOperation, can_transition, transition
from .tracking_columns import (
    CREATED_AT,
    CREATED_BY,
    DELETED_BY,
    TIMESTAMP_ROLES,
    TRACKING_ROLES,
    UPDATED_AT,
    UPDATED_BY,
    USER_ROLES,
    TrackingColumnSet,
)

__all__ = [
    "AuditContext",
    "TrackingFlags",
    "AuditRecord",
    "RecordState",
    "TrackingOperation",
    "can_transition",
    "transition",
    "CREATED_AT",
    "CREATED_BY",
    "DELETED_BY",
    "TIMESTAMP_ROLES",
    "TRACKING_ROLES",
    "UPDATED_AT",
    "UPDATED_BY",
    "USER_ROLES",
    "TrackingColumnSet",
]
