"""Configuration management for gitdrive."""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigError


class GitSettings(BaseSettings):
    """Settings for running the git executable."""

    git_binary: str = Field(default="git", alias="GITDRIVE_GIT_BINARY")
    command_timeout: Optional[float] = Field(default=None, alias="GITDRIVE_COMMAND_TIMEOUT", gt=0)
    poll_interval: float = Field(default=0.1, alias="GITDRIVE_POLL_INTERVAL", gt=0, le=5.0)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False
    )

    @field_validator('git_binary')
    @classmethod
    def validate_git_binary(cls, v):
        """Reject an empty executable name."""
        if not v or not v.strip():
            raise ConfigError("GITDRIVE_GIT_BINARY must not be empty")
        return v.strip()


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    log_level: str = Field(default="INFO", alias="GITDRIVE_LOG_LEVEL")
    log_format: str = Field(default="console", alias="GITDRIVE_LOG_FORMAT")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False
    )

    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v):
        """Only json and console renderers are supported."""
        if v.lower() not in ("json", "console"):
            raise ConfigError(f"Unsupported log format: {v}")
        return v.lower()


class Config:
    """Main configuration class."""

    def __init__(self) -> None:
        self.git = GitSettings()
        self.logging = LoggingSettings()

    @classmethod
    def load(cls) -> "Config":
        """Load configuration from environment and .env file."""
        return cls()


# Global configuration instance
config = Config.load()
