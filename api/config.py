"""
Configuration management for the PASSAGE API.
Loads environment variables and provides typed configuration.
"""
from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ========================================================================
    # Redis Configuration (rate-limit storage)
    # ========================================================================
    redis_url: str = "redis://localhost:6379/0"
    redis_enabled: bool = True

    # ========================================================================
    # API Configuration
    # ========================================================================
    api_key_header: str = "X-API-Key"
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # ========================================================================
    # CORS Configuration
    # ========================================================================
    cors_origins: str = "http://localhost:3000,http://localhost:3001"

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ========================================================================
    # Rate Limiting
    # ========================================================================
    rate_limit_enabled: bool = True
    optimize_rate_limit: str = "30/minute"

    # ========================================================================
    # Application Configuration
    # ========================================================================
    environment: str = "development"
    log_level: str = "info"
    debug: bool = False

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development."""
        return self.environment.lower() == "development"

    # ========================================================================
    # Hazard Data
    # ========================================================================
    # Used when a request omits hazardZones: "live" (Open-Meteo marine),
    # "mock" (seeded demo zones) or "none" (clear weather)
    weather_source: str = "none"
    mock_weather_seed: Optional[int] = None

    # ========================================================================
    # Performance Configuration
    # ========================================================================
    optimization_timeout_s: float = 30.0

    # ========================================================================
    # Pydantic Settings Configuration
    # ========================================================================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Application settings
    """
    return Settings()


# Convenience exports
settings = get_settings()

if settings.weather_source not in ("none", "live", "mock"):
    raise ValueError(
        f"WEATHER_SOURCE must be one of none, live, mock (got {settings.weather_source!r})"
    )

# Validate critical settings in production
if settings.is_production:
    if "localhost" in settings.cors_origins.lower():
        raise ValueError(
            "CORS_ORIGINS must not include localhost in production!"
        )
    if settings.weather_source == "mock":
        raise ValueError("WEATHER_SOURCE=mock is for demos only, not production!")
