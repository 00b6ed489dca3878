"""
Centralized configuration with environment variable overrides.

Sampling cadence, timeouts and display thresholds live here so the
presence and booking logic never hardcode them.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


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
class LocationConfig:
    """Location feed triggers and platform timeouts."""

    min_interval_sec: float = _safe_float("LOCATION_MIN_INTERVAL_SEC", "30")
    min_distance_m: float = _safe_float("LOCATION_MIN_DISTANCE_M", "10")
    fix_timeout_sec: float = _safe_float("LOCATION_FIX_TIMEOUT_SEC", "15")
    permission_timeout_sec: float = _safe_float("PERMISSION_TIMEOUT_SEC", "30")


@dataclass(frozen=True)
class SyncConfig:
    """Backend round-trip timeouts."""

    presence_sync_timeout_sec: float = _safe_float("PRESENCE_SYNC_TIMEOUT_SEC", "10")
    booking_response_timeout_sec: float = _safe_float("BOOKING_RESPONSE_TIMEOUT_SEC", "10")


@dataclass(frozen=True)
class DisplayConfig:
    """Thresholds used when rendering request age."""

    time_ago_recent_minutes: int = _safe_int("TIME_AGO_RECENT_MINUTES", "60")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    location: LocationConfig = field(default_factory=LocationConfig)
    sync: SyncConfig = field(default_factory=SyncConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    app_name: str = os.getenv("APP_NAME", "trainer-app")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    for name, value in [
        ("LOCATION_MIN_INTERVAL_SEC", config.location.min_interval_sec),
        ("LOCATION_FIX_TIMEOUT_SEC", config.location.fix_timeout_sec),
        ("PERMISSION_TIMEOUT_SEC", config.location.permission_timeout_sec),
        ("PRESENCE_SYNC_TIMEOUT_SEC", config.sync.presence_sync_timeout_sec),
        ("BOOKING_RESPONSE_TIMEOUT_SEC", config.sync.booking_response_timeout_sec),
    ]:
        if value <= 0:
            raise ValueError(f"{name} must be > 0, got {value}")

    if config.location.min_distance_m < 0:
        raise ValueError(
            f"LOCATION_MIN_DISTANCE_M must be >= 0, got {config.location.min_distance_m}"
        )
    if config.display.time_ago_recent_minutes < 1:
        raise ValueError(
            "TIME_AGO_RECENT_MINUTES must be >= 1, "
            f"got {config.display.time_ago_recent_minutes}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger.info("Configuration loaded for '%s'", config.app_name)
    return config


# Singleton instance
settings = load_config()
