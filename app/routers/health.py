# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Provides health check endpoints for monitoring and load balancers.
# =============================================================================

from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel

from app.dependencies import SettingsDep

router = APIRouter()

API_VERSION = "1.0.0"


# =============================================================================
# Response Models
# =============================================================================

class HealthResponse(BaseModel):
    """Basic health check response."""
    status: str
    timestamp: str
    environment: str
    version: str


class ChecksResponse(BaseModel):
    """Individual configuration checks."""
    weather_api_key: str


class ReadinessResponse(BaseModel):
    """Readiness check response."""
    status: str
    checks: ChecksResponse
    timestamp: str


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check(settings: SettingsDep):
    """
    Liveness check.

    Answers {"status": "ok"} whenever the process is serving requests.
    """
    return HealthResponse(
        status="ok",
        timestamp=_now(),
        environment=settings.ENVIRONMENT,
        version=API_VERSION,
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check(settings: SettingsDep):
    """
    Readiness check.

    Reports "degraded" while no weather API key is configured, since every
    lookup would fail with a configuration error.
    """
    configured = settings.weather_api_configured
    return ReadinessResponse(
        status="ready" if configured else "degraded",
        checks=ChecksResponse(weather_api_key="configured" if configured else "missing"),
        timestamp=_now(),
    )
