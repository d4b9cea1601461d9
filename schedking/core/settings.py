"""Application settings with Pydantic validation."""

from datetime import date
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SchedulerSettings(BaseSettings):
    """Application settings with validation and environment variable support."""

    # Portal
    scheduler_url: str = Field(
        ...,  # Required field
        description="Full URL of the portal scheduler page (e.g. https://host/scheduler.php)",
    )
    location_id: str = Field(default="", description="Portal location identifier (domid)")
    request_timeout: int = Field(
        default=30, ge=1, le=300, description="Total HTTP request timeout in seconds"
    )

    # Environment
    env: str = Field(
        default="production", description="Environment (production, development, testing)"
    )

    # Logging
    log_level: str = Field(
        default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_json: bool = Field(default=False, description="Write a serialized JSON log file")

    # User identity used by the command line entry point
    first_name: str = Field(default="", description="First name used for the identity lookup")
    last_name: str = Field(default="", description="Last name used for the identity lookup")
    birthdate: Optional[date] = Field(default=None, description="Birthdate (YYYY-MM-DD)")
    email: str = Field(default="", description="Email used for the identity lookup")
    phone: str = Field(default="", description="10 digit or (xxx) xxx-xxxx phone number")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra fields in .env
    )

    @field_validator("scheduler_url")
    @classmethod
    def validate_scheduler_url(cls, v: str) -> str:
        """Validate the scheduler URL scheme."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("SCHEDULER_URL must start with http:// or https://")
        return v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        """Validate email format."""
        if v and "@" not in v:
            raise ValueError("Invalid email format")
        return v

    @field_validator("env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value."""
        allowed = ["production", "development", "testing", "staging"]
        if v.lower() not in allowed:
            raise ValueError(f'ENV must be one of: {", ".join(allowed)}')
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f'LOG_LEVEL must be one of: {", ".join(allowed)}')
        return v_upper

    def has_identity(self) -> bool:
        """
        Check whether a complete lookup identity is configured.

        Returns:
            True if every identity field is set
        """
        return all(
            [self.first_name, self.last_name, self.birthdate, self.email, self.phone]
        )

    def is_development(self) -> bool:
        """
        Check if running in development mode.

        Returns:
            True if development environment
        """
        return self.env in ("development", "testing")


# Singleton instance
_settings: Optional[SchedulerSettings] = None


def get_settings() -> SchedulerSettings:
    """
    Get application settings singleton.

    Returns:
        SchedulerSettings instance

    Raises:
        ValidationError: If required settings are missing or invalid
    """
    global _settings
    if _settings is None:
        _settings = SchedulerSettings()  # type: ignore[call-arg]
    return _settings


def reset_settings() -> None:
    """Reset settings singleton (useful for testing)."""
    global _settings
    _settings = None
