"""Library configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from model_tracker.domain.entities import TrackingColumnSet

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"
ENV_PREFIX = "MODEL_TRACKER_"


class TrackingColumnsConfig(BaseModel):
    """Physical column names used for each tracking role."""

    created_at: str = "created_at"
    updated_at: str = "updated_at"
    created_by: str = "created_by"
    updated_by: str = "updated_by"
    deleted_by: str = "deleted_by"

    @model_validator(mode="after")
    def _validate_unique_columns(self) -> "TrackingColumnsConfig":
        # Raises InvalidTrackingColumnsError (a ValueError) on reuse.
        self.to_column_set()
        return self

    def to_column_set(self) -> TrackingColumnSet:
        return TrackingColumnSet.from_mapping(self.model_dump())


class Settings(BaseSettings):
    """Tracking configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=ENV_FILE,
        env_file_encoding=ENV_FILE_ENCODING,
        env_nested_delimiter="__",
        extra="ignore",
    )

    columns: TrackingColumnsConfig = Field(
        default_factory=TrackingColumnsConfig,
        description="Column names used for tracking timestamps and acting users",
    )
    enable_timestamps: bool = Field(
        default=True,
        description="Automatically maintain the created_at and updated_at columns",
    )
    enable_user_tracking: bool = Field(
        default=True,
        description="Automatically maintain the created_by, updated_by and deleted_by columns",
    )
    soft_deletes_integration: bool = Field(
        default=True,
        description="Record the acting user when a record is soft deleted",
    )
    soft_delete_column: str = Field(
        default="deleted_at",
        description="Marker column that identifies tables supporting soft deletes",
        min_length=1,
    )
    user_model: str = Field(
        default="User",
        description="Name of the user model referenced by the *_by columns",
        min_length=1,
    )
    guards: list[str] = Field(
        default_factory=lambda: ["web", "api"],
        description="Authentication guards checked, in order, for the acting user",
    )
    default_guard: str | None = Field(
        default=None,
        description="Guard consulted when no configured guard has a user",
    )
    enable_logging: bool = Field(
        default=True,
        description="Log failed authentication or schema checks as warnings",
    )
    timestamp_format: str | None = Field(
        default=None,
        description="strftime pattern used when formatting timestamps",
    )
    app_timezone: str = Field(
        default="UTC",
        description="Timezone used when stamping records (IANA name or UTC+HH:MM)",
    )
    environment: str = Field(
        default="production",
        description="Deployment environment name; 'testing' enables test helpers",
    )
    database_url: str = Field(
        default="sqlite://",
        description="Database connection URL used by SQLAlchemy",
        min_length=1,
    )
    jwt_secret_key: str | None = Field(
        default=None,
        description="Secret key used to verify bearer tokens for the api guard",
    )
    jwt_algorithm: str = Field(
        default="HS256",
        description="Algorithm used to sign and verify bearer tokens",
    )
    jwt_user_claim: str = Field(
        default="uid",
        description="Token claim holding the authenticated user id",
    )

    @model_validator(mode="after")
    def _validate_default_guard(self) -> "Settings":
        if self.default_guard is not None and not self.default_guard.strip():
            self.default_guard = None
        return self

    def tracking_columns(self) -> TrackingColumnSet:
        """Return the configured columns as a :class:`TrackingColumnSet`."""

        return self.columns.to_column_set()


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "TrackingColumnsConfig", "get_settings", "reset_settings_cache"]
