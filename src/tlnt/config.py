"""Configuration management for tlnt using Pydantic Settings."""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="TLNT_",
        extra="ignore",
    )

    # Server Settings
    host: str = Field(default="0.0.0.0", description="Server bind address")
    telnet_port: int = Field(default=2323, description="Telnet server port")

    # Line Editing
    prompt: str = Field(default="> ", description="Prompt sent on connect and after each line")
    max_line_length: int = Field(
        default=1024, gt=0, description="Edit buffer capacity in bytes"
    )
    history_limit: int | None = Field(
        default=None, description="Max committed history entries per session (None = unbounded)"
    )

    # Shutdown
    shutdown_grace_seconds: float = Field(
        default=0.0, ge=0.0, description="Delay after force-closing sessions on shutdown"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="console", description="Log format (console or json)")

    @field_validator("history_limit")
    @classmethod
    def _positive_limit(cls, value: int | None) -> int | None:
        if value is not None and value < 1:
            raise ValueError("history_limit must be at least 1")
        return value

    @property
    def prompt_bytes(self) -> bytes:
        """Prompt encoded for the wire."""
        return self.prompt.encode("ascii", errors="replace")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
