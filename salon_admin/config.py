"""
Centralized configuration with environment variable overrides.

API location, credentials, and the service time zone are configurable
here. Nothing is hardcoded in the workflow or coordinator logic.
"""

import logging
import os
from dataclasses import dataclass, field
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


@dataclass(frozen=True)
class ApiConfig:
    """Remote salon API location and credentials."""

    base_url: str = os.getenv("SALON_API_BASE_URL", "https://salozy.com")
    api_prefix: str = os.getenv("SALON_API_PREFIX", "/api")
    timeout_sec: float = _safe_float("SALON_API_TIMEOUT", "30.0")
    access_token: str = os.getenv("SALON_API_TOKEN", "")

    @property
    def root_url(self) -> str:
        return self.base_url.rstrip("/") + self.api_prefix


@dataclass(frozen=True)
class BookingConfig:
    """Calendar settings shared by the working-hours policy and validators."""

    timezone: str = os.getenv("SALON_TIMEZONE", "UTC")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    api: ApiConfig = field(default_factory=ApiConfig)
    booking: BookingConfig = field(default_factory=BookingConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    client_name: str = os.getenv("CLIENT_NAME", "salon-admin")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if not config.api.base_url.startswith(("http://", "https://")):
        raise ValueError(
            f"SALON_API_BASE_URL must start with http:// or https://, got {config.api.base_url!r}"
        )
    if config.api.api_prefix and not config.api.api_prefix.startswith("/"):
        raise ValueError(
            f"SALON_API_PREFIX must start with '/', got {config.api.api_prefix!r}"
        )
    if config.api.timeout_sec <= 0:
        raise ValueError(
            f"SALON_API_TIMEOUT must be > 0, got {config.api.timeout_sec}"
        )
    try:
        ZoneInfo(config.booking.timezone)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(
            f"SALON_TIMEZONE is not a known time zone: {config.booking.timezone!r}"
        ) from None


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger.info("Configuration loaded for '%s' (%s)", config.client_name, config.api.root_url)
    return config


# Singleton instance
settings = load_config()
