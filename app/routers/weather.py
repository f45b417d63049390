# =============================================================================
# app/routers/weather.py - Weather Proxy Endpoint
# =============================================================================
# GET /weather?city={CITY_NAME}
#
# Forwards the lookup to OpenWeatherMap with the server-held key and returns
# the provider's JSON untouched. Errors are raised as SkyCastException
# subclasses and rendered by the handlers registered in main.py.
# Any method other than GET answers 405.
# =============================================================================

import logging

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from app.dependencies import WeatherProxyDep

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/weather")
async def get_weather(
    proxy: WeatherProxyDep,
    city: str | None = Query(None, description="City name, e.g. London"),
):
    """
    Current weather for a city.

    Returns:
        The OpenWeatherMap payload (metric units)

    Raises:
        400: Missing or blank city
        404: City not found upstream
        429: Upstream rate limit
        500: Key not configured, network or parse failure
        other: Upstream status passed through with a generic message
    """
    payload = await proxy.fetch_current_weather(city)
    return JSONResponse(status_code=200, content=payload)
