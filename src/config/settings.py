"""Configuration settings for Career Compass."""

from enum import Enum
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Mode(str, Enum):
    """Where recommendations come from."""

    ONLINE = "online"
    OFFLINE = "offline"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Pipeline tuning lives in RecommendConfig (``RECOMMEND_`` prefix); these
    settings only cover how the CLI runs.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    mode: Mode = Field(
        default=Mode.ONLINE,
        description="'online' calls the AI and taxonomy services, 'offline' uses the catalog only",
    )

    output_dir: Path = Field(
        default=Path("./artifacts"),
        description="Directory for recommendation output files",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR",
    )

    @field_validator("mode", mode="before")
    @classmethod
    def validate_mode(cls, v: str | Mode) -> Mode:
        """Convert string mode to Mode enum."""
        if isinstance(v, Mode):
            return v
        if isinstance(v, str):
            try:
                return Mode(v.strip().lower())
            except ValueError:
                raise ValueError(
                    f"Invalid mode: {v}. Must be 'online' or 'offline'"
                ) from None
        raise ValueError(f"Invalid mode type: {type(v)}")

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a known level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()


# Singleton instance for easy import
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the application settings singleton."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset the settings singleton (useful for testing)."""
    global _settings
    _settings = None
