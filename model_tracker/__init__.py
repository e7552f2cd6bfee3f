"""Automatic audit metadata (timestamps and acting users) for persisted records."""

__version__ = "1.0.0"

from model_tracker.application import (  # noqa: E402
    AuditFieldResolver,
    AuditPipeline,
    ModelTracker,
    get_tracker,
    reset_tracker,
)
from model_tracker.domain.entities import (  # noqa: E402
    AuditContext,
    AuditRecord,
    TrackingColumnSet,
    TrackingFlags,
)
from model_tracker.domain.exceptions import (  # noqa: E402
    InvalidTrackingColumnsError,
    InvalidTransitionError,
    ModelTrackerError,
    QuietWriteError,
)

__all__ = [
    "__version__",
    "AuditContext",
    "AuditFieldResolver",
    "AuditPipeline",
    "AuditRecord",
    "InvalidTrackingColumnsError",
    "InvalidTransitionError",
    "ModelTracker",
    "ModelTrackerError",
    "QuietWriteError",
    "TrackingColumnSet",
    "TrackingFlags",
    "get_tracker",
    "reset_tracker",
]
