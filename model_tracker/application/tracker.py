"""Service exposing tracking configuration and acting-user lookups."""

from __future__ import annotations

import logging
from datetime import datetime
from functools import lru_cache
from typing import Any

from model_tracker import __version__
from model_tracker.application import identity
from model_tracker.config import Settings, get_settings
from model_tracker.domain.entities import AuditContext, TrackingColumnSet, TrackingFlags
from model_tracker.domain.providers import Clock, IdentityProvider
from model_tracker.utils import format_timestamp

logger = logging.getLogger(__name__)


class ModelTracker:
    """Entry point for configuration and authentication lookups used by tracking."""

    def __init__(
        self,
        identity_provider: IdentityProvider,
        clock: Clock,
        settings: Settings | None = None,
    ) -> None:
        self.identity_provider = identity_provider
        self.clock = clock
        self.settings = settings or get_settings()

    # ---- Acting user ----

    def get_current_user_id(self) -> int | None:
        """Return the id of the authenticated user, checking every guard."""

        return identity.resolve_current_user_id(
            self.identity_provider,
            default_guard=self.settings.default_guard,
            logging_enabled=self.is_logging_enabled(),
        )

    def get_current_guard(self) -> str | None:
        return identity.resolve_current_guard(
            self.identity_provider, logging_enabled=self.is_logging_enabled()
        )

    def get_current_user(self) -> Any | None:
        return identity.resolve_current_user(
            self.identity_provider,
            default_guard=self.settings.default_guard,
            logging_enabled=self.is_logging_enabled(),
        )

    def is_tracking_enabled(self) -> bool:
        """Return ``True`` when the default guard has an authenticated user."""

        try:
            user_id = self.identity_provider.resolve_current_user_id(
                self.settings.default_guard
            )
        except Exception as exc:  # noqa: BLE001
            self.log(f"Failed to check the default guard - {exc}")
            return False
        return user_id is not None

    def get_available_guards(self) -> list[str]:
        return identity.available_guards(
            self.identity_provider, logging_enabled=self.is_logging_enabled()
        )

    def guard_has_user(self, guard: str) -> bool:
        return identity.guard_has_user(
            self.identity_provider, guard, logging_enabled=self.is_logging_enabled()
        )

    def get_user_id_from_guard(self, guard: str) -> int | None:
        return identity.user_id_from_guard(
            self.identity_provider, guard, logging_enabled=self.is_logging_enabled()
        )

    # ---- Configuration ----

    def is_timestamp_tracking_enabled(self) -> bool:
        return self.settings.enable_timestamps

    def is_user_tracking_enabled(self) -> bool:
        return self.settings.enable_user_tracking

    def is_soft_deletes_integration_enabled(self) -> bool:
        return self.settings.soft_deletes_integration

    def is_logging_enabled(self) -> bool:
        return self.settings.enable_logging

    def tracking_columns(self) -> TrackingColumnSet:
        return self.settings.tracking_columns()

    def get_tracking_columns(self) -> dict[str, str]:
        return self.tracking_columns().as_dict()

    def get_tracking_column_name(self, role: str) -> str | None:
        return self.tracking_columns().column_for(role)

    def is_tracking_column(self, column: str) -> bool:
        return self.tracking_columns().is_tracking_column(column)

    def get_timestamp_columns(self) -> dict[str, str]:
        return self.tracking_columns().timestamp_columns()

    def get_user_tracking_columns(self) -> dict[str, str]:
        return self.tracking_columns().user_columns()

    def get_user_model_class(self) -> str:
        return self.settings.user_model

    def get_config(self) -> dict[str, Any]:
        return self.settings.model_dump()

    def get_version(self) -> str:
        return __version__

    # ---- Time ----

    def get_current_timestamp(self) -> datetime:
        return self.clock.now()

    def format_timestamp(self, timestamp: datetime) -> str:
        """Format ``timestamp`` using the configured ``timestamp_format``."""

        return format_timestamp(timestamp, self.settings.timestamp_format)

    # ---- Context ----

    def tracking_flags(self) -> TrackingFlags:
        return TrackingFlags(
            timestamps=self.settings.enable_timestamps,
            user_tracking=self.settings.enable_user_tracking,
            soft_deletes=self.settings.soft_deletes_integration,
        )

    def build_context(self) -> AuditContext:
        """Return the :class:`AuditContext` for the operation about to run.

        The identity provider is only consulted when user tracking is enabled.
        """

        flags = self.tracking_flags()
        acting_user_id = self.get_current_user_id() if flags.user_tracking else None
        return AuditContext(
            acting_user_id=acting_user_id,
            timestamp=self.clock.now(),
            flags=flags,
        )

    # ---- Logging & testing ----

    def log(self, message: str, level: str = "warning") -> None:
        """Log ``message`` when logging is enabled; never raises."""

        if not self.is_logging_enabled():
            return
        level_value = logging.getLevelName(str(level).upper())
        if not isinstance(level_value, int):
            level_value = logging.WARNING
        logger.log(level_value, "ModelTracker: %s", message)

    def reset_for_testing(self) -> None:
        """Log every guard out; only effective in the testing environment."""

        if self.settings.environment != "testing":
            return
        logout_all = getattr(self.identity_provider, "logout_all", None)
        if callable(logout_all):
            logout_all()


@lru_cache
def get_tracker() -> ModelTracker:
    """Return the process-wide tracker built from settings."""

    from model_tracker.infrastructure.clock import SystemClock
    from model_tracker.infrastructure.identity import get_guard_registry

    return ModelTracker(get_guard_registry(), SystemClock(naive=True), get_settings())


def reset_tracker() -> None:
    """Forget the cached tracker so the next call rebuilds it from settings."""

    get_tracker.cache_clear()


__all__ = ["ModelTracker", "get_tracker", "reset_tracker"]
