"""Configuration management for the cluster orchestrator."""

import os
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Orchestrator configuration settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Scheduler endpoint
    scheduler_url: str = Field("http://127.0.0.1:8080", description="Base URL of the scheduler API")
    http_basic_auth_user: Optional[str] = Field(None, description="Basic auth user for the scheduler")
    http_basic_auth_password: Optional[str] = Field(None, description="Basic auth password for the scheduler")
    request_timeout_seconds: float = Field(10.0, description="Timeout for a single scheduler request")

    # Convergence
    default_deployment_timeout_seconds: float = Field(
        300.0,
        description="Wait timeout used when a caller passes none, zero or a negative value",
    )
    poll_interval_seconds: float = Field(0.5, description="Fixed delay between convergence polls")

    # Status API
    host: str = Field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"), description="Server host")
    port: int = Field(default_factory=lambda: int(os.getenv("PORT", "8000")), description="Server port")

    # Observability
    log_level: str = Field("INFO", description="Log level")
    log_format: str = Field("json", description="json or console")

    @field_validator("scheduler_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalise the base URL so paths can be appended."""
        v = v.strip()
        if not v:
            raise ValueError("scheduler_url cannot be empty")
        return v.rstrip("/")

    @field_validator("request_timeout_seconds", "default_deployment_timeout_seconds", "poll_interval_seconds")
    @classmethod
    def must_be_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be greater than zero")
        return v

    @field_validator("log_format")
    @classmethod
    def check_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in ("json", "console"):
            raise ValueError("log_format must be 'json' or 'console'")
        return v

    @property
    def basic_auth(self) -> Optional[tuple[str, str]]:
        """Credentials tuple for httpx, or None when auth is not configured."""
        if self.http_basic_auth_user:
            return (self.http_basic_auth_user, self.http_basic_auth_password or "")
        return None
