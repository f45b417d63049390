# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - weather.py: Weather proxy endpoint
#
# Each router is mounted in main.py under settings.API_PREFIX.
# =============================================================================

from . import health
from . import weather

__all__ = [
    "health",
    "weather",
]
