"""
PASSAGE Configuration Module.

Settings for the marine-weather collaborator and logging, read from
environment variables. A ``.env`` file at the project root is loaded
first when present.

Usage:
    from passage.config import settings

    print(settings.weather_sample_points)
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

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
    """Settings loaded from environment."""

    # Marine weather (Open-Meteo marine API, no key required)
    marine_api_url: str = field(
        default_factory=lambda: os.getenv(
            "MARINE_API_URL", "https://marine-api.open-meteo.com/v1/marine"
        )
    )
    weather_timeout_s: float = field(default_factory=lambda: get_float("WEATHER_TIMEOUT_S", 4.0))
    weather_sample_points: int = field(default_factory=lambda: get_int("WEATHER_SAMPLE_POINTS", 5))
    weather_max_workers: int = field(default_factory=lambda: get_int("WEATHER_MAX_WORKERS", 5))
    weather_retry_attempts: int = field(default_factory=lambda: get_int("WEATHER_RETRY_ATTEMPTS", 2))
    weather_user_agent: str = field(
        default_factory=lambda: os.getenv("WEATHER_USER_AGENT", "passage-route-optimizer/1.0")
    )

    # Logging
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_format: str = field(
        default_factory=lambda: os.getenv(
            "LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
    )
    debug: bool = field(default_factory=lambda: get_bool("DEBUG", False))

    def __post_init__(self):
        """Validate settings after initialization."""
        if not 3.0 <= self.weather_timeout_s <= 5.0:
            logging.warning(
                f"Weather timeout {self.weather_timeout_s}s outside "
                f"recommended range [3, 5], using 4.0"
            )
            self.weather_timeout_s = 4.0

        if self.weather_sample_points < 1:
            logging.warning(
                f"WEATHER_SAMPLE_POINTS={self.weather_sample_points} is invalid, using 5"
            )
            self.weather_sample_points = 5

        if self.weather_max_workers < 1:
            self.weather_max_workers = 1

    def configure_logging(self):
        """Configure logging based on settings."""
        level = logging.DEBUG if self.debug else getattr(logging, self.log_level.upper(), logging.INFO)
        logging.basicConfig(level=level, format=self.log_format)


# Singleton instance
settings = Settings()


def get_settings() -> Settings:
    """Get the settings instance (useful for dependency injection)."""
    return settings
