"""
Application configuration using Pydantic Settings.
"""

from datetime import timedelta
from functools import lru_cache
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SessionSettings(BaseSettings):
    """Session timeout configuration."""

    model_config = SettingsConfigDict(env_prefix="SESSION_")

    timeout_minutes: float = Field(
        default=10,
        gt=0,
        description="Idle minutes until the session expires",
    )
    warning_minutes: float = Field(
        default=2,
        gt=0,
        description="Minutes before expiry at which the warning starts",
    )
    min_activity_interval_seconds: float = Field(
        default=30,
        ge=0,
        description="Activity closer than this to the last one does not reset the timer",
    )
    show_status_threshold_minutes: float = Field(
        default=5,
        ge=0,
        description="Show the status indicator when less time than this remains",
    )
    poll_interval_seconds: float = Field(default=1.0, gt=0)

    @model_validator(mode="after")
    def validate_warning_window(self) -> "SessionSettings":
        if self.warning_minutes >= self.timeout_minutes:
            raise ValueError(
                f"warning_minutes ({self.warning_minutes}) must be less than "
                f"timeout_minutes ({self.timeout_minutes})"
            )
        return self

    @property
    def timeout_threshold(self) -> timedelta:
        return timedelta(minutes=self.timeout_minutes)

    @property
    def warning_threshold(self) -> timedelta:
        """Idle time at which the warning starts (timeout minus lead time)."""
        return timedelta(minutes=self.timeout_minutes - self.warning_minutes)

    @property
    def min_activity_interval(self) -> timedelta:
        return timedelta(seconds=self.min_activity_interval_seconds)

    @property
    def show_status_threshold(self) -> timedelta:
        return timedelta(minutes=self.show_status_threshold_minutes)


class RoutingSettings(BaseSettings):
    """Navigation guard configuration."""

    model_config = SettingsConfigDict(env_prefix="ROUTING_")

    login_path: str = Field(default="/auth/login")
    public_prefixes: list[str] = Field(
        default=["/auth"],
        description="Prefixes reachable without authentication",
    )

    # Post-login redirect
    intended_path_key: str = Field(default="intendedPath")
    intended_path_ttl_seconds: int = Field(default=3600, ge=1)

    # Store backend for the intended path
    store_backend: str = Field(default="memory", description="memory or redis")
    redis_url: str = Field(default="redis://localhost:6379/0")
    redis_prefix: str = Field(default="rolegate:")

    @field_validator("store_backend")
    @classmethod
    def validate_store_backend(cls, v: str) -> str:
        allowed = {"memory", "redis"}
        if v not in allowed:
            raise ValueError(f"store_backend must be one of {allowed}")
        return v


class Settings(BaseSettings):
    """Main settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = Field(default="rolegate")
    environment: str = Field(default="development")

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json", description="json or text")

    # Nested settings
    session: SessionSettings = Field(default_factory=SessionSettings)
    routing: RoutingSettings = Field(default_factory=RoutingSettings)

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        allowed = {"development", "staging", "production", "testing"}
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        if v not in {"json", "text"}:
            raise ValueError("log_format must be 'json' or 'text'")
        return v

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
