# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the SkyCast weather proxy.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
#   skycast-api                      # runs on API_HOST:API_PORT
# =============================================================================

import logging
from contextlib import asynccontextmanager

import httpx
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import Settings, get_settings
from app.exceptions import (
    SkyCastException,
    http_exception_handler,
    skycast_exception_handler,
    unhandled_exception_handler,
)
from app.routers import health, weather
from app.routers.health import API_VERSION

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.DEBUG else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Runs on startup and shutdown:
    - Startup: Validate config, open the shared upstream HTTP client
    - Shutdown: Close the HTTP client
    """
    settings: Settings = app.state.settings

    # Startup
    logger.info(f"Starting SkyCast API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    if not settings.weather_api_configured:
        logger.error(
            "OPENWEATHER_API_KEY is not set in environment variables; "
            "weather lookups will fail until it is configured"
        )

    app.state.http_client = httpx.AsyncClient(timeout=settings.OPENWEATHER_TIMEOUT_SECONDS)

    yield

    # Shutdown
    logger.info("Shutting down SkyCast API")
    await app.state.http_client.aclose()
    app.state.http_client = None


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Explicit settings (tests); defaults to get_settings()
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="SkyCast API",
        description="""
## Weather Lookup Proxy

SkyCast forwards city lookups to OpenWeatherMap so the API key never leaves
the server.

### Endpoints

| Endpoint | Purpose |
|----------|---------|
| `GET /api/weather?city=London` | Current weather (metric units) |
| `GET /api/health` | Liveness check |
| `GET /api/health/ready` | Configuration check |

### Errors

Every error body has the shape `{"error": ..., "code": ..., "message": ...}`.
""",
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
        openapi_tags=[
            {
                "name": "Weather",
                "description": "Current weather lookups",
            },
            {
                "name": "Health",
                "description": "API health and readiness checks",
            },
        ],
    )
    app.state.settings = settings

    # =========================================================================
    # Middleware
    # =========================================================================

    # CORS middleware - allows cross-origin requests from the web front end
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
        allow_credentials=settings.is_production,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    # =========================================================================
    # Exception Handlers
    # =========================================================================

    app.add_exception_handler(SkyCastException, skycast_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # =========================================================================
    # Routers
    # =========================================================================

    app.include_router(
        weather.router,
        prefix=settings.API_PREFIX,
        tags=["Weather"]
    )

    app.include_router(
        health.router,
        prefix=settings.API_PREFIX,
        tags=["Health"]
    )

    # =========================================================================
    # Root Endpoint
    # =========================================================================

    @app.get("/", tags=["Root"])
    async def root():
        """
        Root endpoint - returns API info.
        """
        return {
            "name": "SkyCast API",
            "version": API_VERSION,
            "docs": "/docs",
            "health": f"{settings.API_PREFIX}/health",
            "weather": f"{settings.API_PREFIX}/weather?city=London",
        }

    return app


def run() -> None:
    """Console entry point: serve the API with uvicorn."""
    settings = get_settings()
    configure_logging(settings)
    logger.info(f"Backend server running on http://localhost:{settings.API_PORT}")
    uvicorn.run(
        "app.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.is_development and settings.DEBUG,
    )


configure_logging(get_settings())

# Create FastAPI application
app = create_app()


if __name__ == "__main__":
    run()
