"""Application timezone and timestamp formatting helpers."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone, tzinfo
from functools import lru_cache
from typing import Final

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from model_tracker.config import get_settings

DEFAULT_TIMESTAMP_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"
_UTC_ALIASES: Final[frozenset[str]] = frozenset({"", "UTC", "GMT", "Z"})
_OFFSET_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^(?:UTC|GMT)(?P<sign>[+-])(?P<hours>\d{1,2})(?::?(?P<minutes>\d{2}))?$",
    re.IGNORECASE,
)


@lru_cache(maxsize=1)
def get_app_timezone() -> tzinfo:
    """Return the timezone named by ``MODEL_TRACKER_APP_TIMEZONE``.

    Accepts IANA names and fixed offsets such as ``UTC-05:00``; anything
    else resolves to UTC.
    """

    name = (get_settings().app_timezone or "").strip()
    if name.upper() in _UTC_ALIASES:
        return timezone.utc
    offset = _parse_offset(name)
    if offset is not None:
        return offset
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return timezone.utc


def now_in_app_timezone() -> datetime:
    """Return the current time localized to the configured timezone."""

    return datetime.now(tz=get_app_timezone())


def format_timestamp(value: datetime | None, fmt: str | None = None) -> str | None:
    """Format ``value`` with ``fmt`` or the ``YYYY-MM-DD HH:MM:SS`` default."""

    if value is None:
        return None
    return value.strftime(fmt or DEFAULT_TIMESTAMP_FORMAT)


def _parse_offset(name: str) -> timezone | None:
    match = _OFFSET_PATTERN.match(name)
    if match is None:
        return None
    minutes = int(match["hours"]) * 60 + int(match["minutes"] or 0)
    if match["sign"] == "-":
        minutes = -minutes
    return timezone(timedelta(minutes=minutes))
