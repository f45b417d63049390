# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
#
# Settings and the shared HTTP client live on app.state (set up by
# create_app and the lifespan handler), so tests can swap either one through
# app.dependency_overrides.
# =============================================================================

from typing import Annotated

from fastapi import Depends, Request

from app.config import Settings
from core.services.weather_service import WeatherProxy


def get_app_settings(request: Request) -> Settings:
    """Settings the running app was created with."""
    return request.app.state.settings


def get_weather_proxy(request: Request) -> WeatherProxy:
    """
    Build the weather proxy for one request.

    Reuses the process-wide httpx client when the lifespan has opened one.
    """
    return WeatherProxy.from_settings(
        request.app.state.settings,
        http_client=getattr(request.app.state, "http_client", None),
    )


# Type aliases for dependency injection
SettingsDep = Annotated[Settings, Depends(get_app_settings)]
WeatherProxyDep = Annotated[WeatherProxy, Depends(get_weather_proxy)]
