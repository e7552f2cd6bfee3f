"""Resolve the acting user by walking the configured authentication guards.

Every lookup here fails open: a provider error is logged as a warning and
reported as "no user", so audit tracking never blocks a business write.
"""

from __future__ import annotations

import logging
from typing import Any

from model_tracker.domain.providers import IdentityProvider

logger = logging.getLogger(__name__)


def resolve_current_user_id(
    provider: IdentityProvider,
    *,
    default_guard: str | None = None,
    logging_enabled: bool = True,
) -> int | None:
    """Return the id of the first authenticated guard, else the default guard's."""

    try:
        for guard in provider.list_guards():
            user_id = provider.resolve_current_user_id(guard)
            if user_id is not None:
                return user_id
        return provider.resolve_current_user_id(default_guard)
    except Exception as exc:  # noqa: BLE001 - identity lookups must not break writes
        if logging_enabled:
            logger.warning("ModelTracker: Failed to get current user ID - %s", exc)
        return None


def resolve_current_user(
    provider: IdentityProvider,
    *,
    default_guard: str | None = None,
    logging_enabled: bool = True,
) -> Any | None:
    """Return the user object of the first authenticated guard."""

    try:
        for guard in provider.list_guards():
            user = provider.resolve_current_user(guard)
            if user is not None:
                return user
        return provider.resolve_current_user(default_guard)
    except Exception as exc:  # noqa: BLE001
        if logging_enabled:
            logger.warning("ModelTracker: Failed to get current user - %s", exc)
        return None


def resolve_current_guard(
    provider: IdentityProvider, *, logging_enabled: bool = True
) -> str | None:
    """Return the name of the first guard holding an authenticated user."""

    try:
        for guard in provider.list_guards():
            if provider.resolve_current_user_id(guard) is not None:
                return guard
        return None
    except Exception as exc:  # noqa: BLE001
        if logging_enabled:
            logger.warning("ModelTracker: Failed to get current guard - %s", exc)
        return None


def guard_has_user(
    provider: IdentityProvider, guard: str, *, logging_enabled: bool = True
) -> bool:
    try:
        return provider.resolve_current_user_id(guard) is not None
    except Exception as exc:  # noqa: BLE001
        if logging_enabled:
            logger.warning("ModelTracker: Failed to check guard '%s' - %s", guard, exc)
        return False


def user_id_from_guard(
    provider: IdentityProvider, guard: str, *, logging_enabled: bool = True
) -> int | None:
    try:
        return provider.resolve_current_user_id(guard)
    except Exception as exc:  # noqa: BLE001
        if logging_enabled:
            logger.warning(
                "ModelTracker: Failed to get user from guard '%s' - %s", guard, exc
            )
        return None


def available_guards(
    provider: IdentityProvider, *, logging_enabled: bool = True
) -> list[str]:
    try:
        return list(provider.list_guards())
    except Exception as exc:  # noqa: BLE001
        if logging_enabled:
            logger.warning("ModelTracker: Failed to list guards - %s", exc)
        return []


__all__ = [
    "available_guards",
    "guard_has_user",
    "resolve_current_guard",
    "resolve_current_user",
    "resolve_current_user_id",
    "user_id_from_guard",
]
