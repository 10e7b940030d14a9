"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file

Delivery credentials (Resend key, inbox and sender addresses) are read at
request time through ``get_delivery_settings()`` so a missing value surfaces
as a configuration error on the request instead of a crash on import.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Map environments to their respective .env files (relative to PROJECT_ROOT)
ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Load .env file early to populate os.environ before creating nested settings
# This is necessary because Pydantic nested BaseSettings don't inherit env_file
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=False)


def _build_app_settings() -> "AppSettings":
    """Build app settings from environment."""

    return AppSettings()


def _build_log_settings() -> "LogSettings":
    """Build logging settings from environment."""

    return LogSettings()


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    rate_limit_enabled: bool = Field(
        True,
        description="Enable per-client rate limiting on lead submissions",
    )
    rate_limit_requests: int = Field(
        5,
        description="Maximum number of submissions allowed per window (per client)",
        ge=1,
    )
    rate_limit_window_seconds: int = Field(
        60,
        description="Rate limit window size in seconds",
        ge=1,
    )
    rate_limit_sweep_interval_seconds: int | None = Field(
        None,
        description="Interval between expired-record sweeps (defaults to the window size)",
        ge=1,
    )
    rate_limit_include_headers: bool = Field(
        True,
        description="Include X-RateLimit-* and Retry-After headers when throttling",
    )
    trust_forwarded_for: bool = Field(
        False,
        description="Prefer the first X-Forwarded-For entry over the socket peer address",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )

    @property
    def sweep_interval_seconds(self) -> int:
        return self.rate_limit_sweep_interval_seconds or self.rate_limit_window_seconds


class LogSettings(BaseSettings):
    """Logging configuration (formatter, destination, correlation header)."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="Log format: 'json' or 'plain'")
    output: str = Field("stdout", description="Log destination: 'stdout' or 'file'")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(
        10 * 1024 * 1024,
        description="Rotate the log file after this many bytes (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(5, description="Rotated log files to keep", ge=0)
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to accept and propagate the request id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class ResendSettings(BaseSettings):
    """Resend transactional-email provider configuration."""

    api_key: str | None = Field(
        None,
        description="Resend API key (required to deliver leads)",
    )
    base_url: str = Field(
        "https://api.resend.com",
        description="Resend API base URL",
    )
    timeout_seconds: float = Field(
        15.0,
        description="Request timeout in seconds",
    )

    model_config = SettingsConfigDict(
        env_prefix="RESEND_",
        case_sensitive=False,
    )


class LeadSettings(BaseSettings):
    """Addresses used when delivering lead notifications."""

    to_email: str | None = Field(
        None,
        description="Business inbox receiving lead notifications",
    )
    from_email: str | None = Field(
        None,
        description="Sender address for both notification and confirmation",
    )
    reply_to_email: str | None = Field(
        None,
        description="Reply-To for the confirmation (defaults to the submitter's email)",
    )

    model_config = SettingsConfigDict(
        env_prefix="LEAD_",
        case_sensitive=False,
    )


@dataclass(frozen=True)
class DeliverySettings:
    """Request-time snapshot of everything needed to deliver a lead."""

    resend: ResendSettings
    lead: LeadSettings

    def missing(self) -> list[str]:
        """Return the environment variable names that are required but unset."""

        required = {
            "RESEND_API_KEY": self.resend.api_key,
            "LEAD_TO_EMAIL": self.lead.to_email,
            "LEAD_FROM_EMAIL": self.lead.from_email,
        }
        return [name for name, value in required.items() if not value]


def get_delivery_settings() -> DeliverySettings:
    """Read delivery configuration from the environment.

    Called once per request, so credential rotation and tests that patch the
    environment take effect without restarting the process.
    """

    return DeliverySettings(resend=ResendSettings(), lead=LeadSettings())


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.

    Environments:
    - development: Local development (DEBUG=true)
    - testing: Automated tests (uses .env.testing)
    - staging: Pre-production (uses .env.staging)
    - production: Production deployment (uses .env.production)
    """

    app_env: str = APP_ENV
    app: AppSettings = Field(default_factory=_build_app_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
# Nested settings are created via default_factory so env loading works.
settings = Settings()
