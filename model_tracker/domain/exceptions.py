"""Exceptions raised by the tracking library."""


class ModelTrackerError(Exception):
    """Base class for tracking errors."""


class InvalidTrackingColumnsError(ModelTrackerError, ValueError):
    """Raised when a tracking column mapping is incomplete or ambiguous."""


class InvalidTransitionError(ModelTrackerError, ValueError):
    """Raised when a lifecycle operation is not valid for the record state."""


class QuietWriteError(ModelTrackerError):
    """Raised when the quiet write of the ``deleted_by`` column fails.

    Unlike identity and schema failures this error is not swallowed: the
    intended mutation did not reach storage, so the caller must know.
    """


__all__ = [
    "ModelTrackerError",
    "InvalidTrackingColumnsError",
    "InvalidTransitionError",
    "QuietWriteError",
]
