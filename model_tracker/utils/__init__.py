"""Utility helpers for reusable functionality."""

from .datetime import (
    DEFAULT_TIMESTAMP_FORMAT,
    format_timestamp,
    get_app_timezone,
    now_in_app_timezone,
)

__all__ = [
    "DEFAULT_TIMESTAMP_FORMAT",
    "format_timestamp",
    "get_app_timezone",
    "now_in_app_timezone",
]
