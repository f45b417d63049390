# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import get_settings
#   settings = get_settings()
#   print(settings.OPENWEATHER_BASE_URL)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# Settings are passed explicitly to the components that need them
# (create_app, WeatherProxy.from_settings, SupabaseClient.create,
# build_controller) so tests can build their own instance.
# =============================================================================

import os
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from lib.utils import ApplicationError


class ConfigurationError(ApplicationError):
    """Raised when required configuration is missing."""

    def __init__(self, missing: list[str]):
        super().__init__(
            message=f"Missing required configuration: {', '.join(missing)}",
            code="CONFIGURATION_ERROR",
            suggestion="Set these variables in your environment or .env file",
            details={"missing": missing},
        )
        self.missing = missing


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses pydantic-settings to:
    - Automatically load from .env file
    - Validate types and constraints
    - Provide sensible defaults for development

    Nothing here is required at construction time: the proxy and the client
    need different subsets, and each calls require() for its own.
    """

    # -------------------------------------------------------------------------
    # OpenWeatherMap Configuration
    # -------------------------------------------------------------------------
    # The key stays on the server; browsers and terminal clients only ever
    # talk to the proxy.

    OPENWEATHER_API_KEY: str | None = Field(
        default=None,
        description="OpenWeatherMap API key (server-side only)"
    )

    OPENWEATHER_BASE_URL: str = Field(
        default="https://api.openweathermap.org/data/2.5/weather",
        description="Current weather endpoint of the upstream provider"
    )

    OPENWEATHER_TIMEOUT_SECONDS: float = Field(
        default=5.0,
        gt=0,
        le=60,
        description="Timeout for a single upstream call"
    )

    # -------------------------------------------------------------------------
    # Supabase Configuration
    # -------------------------------------------------------------------------
    # Required by the client stack (auth + search history)

    SUPABASE_URL: str | None = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_ANON_KEY: str | None = Field(
        default=None,
        description="Supabase anon/public API key"
    )

    SUPABASE_SEARCHES_TABLE: str = Field(
        default="user_searches",
        description="Table holding per-user search history"
    )

    PERSISTENCE_TIMEOUT_SECONDS: float = Field(
        default=5.0,
        gt=0,
        le=60,
        description="Timeout for a single database call"
    )

    SESSION_FILE: str = Field(
        default="~/.skycast/session.json",
        description="Where the client persists its auth session"
    )

    # -------------------------------------------------------------------------
    # Client Settings
    # -------------------------------------------------------------------------

    SKYCAST_API_URL: str = Field(
        default="http://localhost:3000",
        description="Base URL of the weather proxy used by clients"
    )

    WEATHER_CLIENT_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="Timeout for client calls to the proxy"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging)"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    API_PORT: int = Field(
        default=3000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    API_PREFIX: str = Field(
        default="/api",
        description="Path prefix for the proxy routes"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="*",
        description="Allowed CORS origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        # Treat VAR= as unset
        env_ignore_empty=True,
        case_sensitive=True,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:5173, https://skycast.app" -> ["http://localhost:5173", "https://skycast.app"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def session_file_path(self) -> str:
        """SESSION_FILE with ~ expanded."""
        return os.path.expanduser(self.SESSION_FILE)

    @property
    def weather_api_configured(self) -> bool:
        return bool(self.OPENWEATHER_API_KEY)

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"

    def require(self, *names: str) -> None:
        """
        Fail fast when any of the named settings is unset.

        Raises:
            ConfigurationError: listing every missing variable at once
        """
        missing = [name for name in names if not getattr(self, name, None)]
        if missing:
            raise ConfigurationError(missing)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.

    Returns:
        Settings: The application settings instance
    """
    return Settings()
