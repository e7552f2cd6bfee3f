"""Clock implementations used to stamp records."""

from datetime import datetime

from model_tracker.utils import now_in_app_timezone


class SystemClock:
    """Return the current time in the configured application timezone.

    With ``naive=True`` the offset is dropped after localizing, for columns
    declared without timezone support (SQLite, SQL Server ``DATETIME``).
    """

    def __init__(self, *, naive: bool = False) -> None:
        self.naive = naive

    def now(self) -> datetime:
        current = now_in_app_timezone()
        if self.naive:
            return current.replace(tzinfo=None)
        return current


__all__ = ["SystemClock"]
