"""
GulfNav Configuration Module.

Centralized configuration management using environment variables.
Supports .env files for local development.

Usage:
    from gulfnav.config import settings

    print(settings.sea_route_timeout_s)
    print(settings.sea_route_configured)
"""

import os
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional
import logging

from dotenv import load_dotenv

env_path = Path(__file__).parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)


def get_bool(key: str, default: bool = False) -> bool:
    """Get boolean from environment variable."""
    value = os.getenv(key, str(default)).lower()
    return value in ("true", "1", "yes", "on")


def get_float(key: str, default: float) -> float:
    """Get float from environment variable."""
    try:
        return float(os.getenv(key, str(default)))
    except (ValueError, TypeError):
        return default


def get_int(key: str, default: int) -> int:
    """Get int from environment variable."""
    try:
        return int(os.getenv(key, str(default)))
    except (ValueError, TypeError):
        return default


@dataclass
class Settings:
    """Engine settings loaded from environment."""

    # External sea-route provider
    sea_route_api_key: Optional[str] = field(default_factory=lambda: os.getenv("SEA_ROUTE_API_KEY"))
    sea_route_base_url: str = field(
        default_factory=lambda: os.getenv("SEA_ROUTE_BASE_URL", "https://api.datalastic.com/api/ext")
    )
    sea_route_timeout_s: float = field(default_factory=lambda: get_float("SEA_ROUTE_TIMEOUT_S", 10.0))
    sea_route_max_attempts: int = field(default_factory=lambda: get_int("SEA_ROUTE_MAX_ATTEMPTS", 1))
    sea_route_enabled: bool = field(default_factory=lambda: get_bool("SEA_ROUTE_ENABLED", True))

    # Route engine thresholds (nautical miles)
    short_route_threshold_nm: float = field(
        default_factory=lambda: get_float("SHORT_ROUTE_THRESHOLD_NM", 25.0)
    )
    max_network_snap_nm: float = field(default_factory=lambda: get_float("MAX_NETWORK_SNAP_NM", 30.0))
    great_circle_spacing_nm: float = field(
        default_factory=lambda: get_float("GREAT_CIRCLE_SPACING_NM", 25.0)
    )
    interpolation_spacing_nm: float = field(
        default_factory=lambda: get_float("INTERPOLATION_SPACING_NM", 30.0)
    )

    # Multi-stop optimizer
    two_opt_max_passes: int = field(default_factory=lambda: get_int("TWO_OPT_MAX_PASSES", 100))
    two_opt_time_budget_s: float = field(default_factory=lambda: get_float("TWO_OPT_TIME_BUDGET_S", 2.0))
    distance_matrix_workers: int = field(default_factory=lambda: get_int("DISTANCE_MATRIX_WORKERS", 1))

    # Logging
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_format: str = field(
        default_factory=lambda: os.getenv(
            "LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
    )

    def __post_init__(self):
        """Validate settings after initialization."""
        if self.sea_route_timeout_s <= 0:
            logging.warning(
                f"Sea route timeout {self.sea_route_timeout_s}s is not positive, using 10s"
            )
            self.sea_route_timeout_s = 10.0

        if self.sea_route_max_attempts < 1:
            logging.warning(
                f"Sea route max attempts {self.sea_route_max_attempts} below 1, using a single attempt"
            )
            self.sea_route_max_attempts = 1

        if self.two_opt_max_passes < 1:
            logging.warning(f"2-opt pass cap {self.two_opt_max_passes} below 1, using 100")
            self.two_opt_max_passes = 100

        if self.two_opt_time_budget_s <= 0:
            logging.warning(f"2-opt time budget {self.two_opt_time_budget_s}s not positive, using 2s")
            self.two_opt_time_budget_s = 2.0

        if self.distance_matrix_workers < 1:
            self.distance_matrix_workers = 1

    @property
    def sea_route_configured(self) -> bool:
        """True when the external sea-route provider can be called."""
        return self.sea_route_enabled and bool(self.sea_route_api_key)

    def configure_logging(self):
        """Configure logging based on settings."""
        level = getattr(logging, self.log_level.upper(), logging.INFO)
        logging.basicConfig(level=level, format=self.log_format)


# Singleton instance
settings = Settings()


def get_settings() -> Settings:
    """Get the settings instance (useful for dependency injection)."""
    return settings
