# =============================================================================
# core/services/weather_service.py - Weather Proxy Business Logic
# =============================================================================
# Forwards one city lookup to OpenWeatherMap with the server-held key and
# normalizes the outcome:
#
#   2xx          -> upstream JSON, unmodified
#   429          -> RateLimitedError
#   404          -> CityNotFoundError
#   other non-2xx-> UpstreamError (status preserved, body only logged)
#   network/parse-> InternalError
#
# The proxy is stateless: one outbound call per request, no retries.
# =============================================================================

import logging
from typing import Any

import httpx

from app.config import Settings
from app.exceptions import (
    BadRequestError,
    CityNotFoundError,
    InternalError,
    RateLimitedError,
    ServerMisconfiguredError,
    UpstreamError,
)
from core.models.weather import WeatherQuery
from lib.utils import normalize_city

logger = logging.getLogger(__name__)

UPSTREAM_BODY_LOG_LIMIT = 500


class WeatherProxy:
    """
    Server-side proxy for the OpenWeatherMap current weather endpoint.

    A shared httpx.AsyncClient can be injected (the app creates one per
    process); without one, a short-lived client is opened per call.

    Example:
        proxy = WeatherProxy.from_settings(settings)
        payload = await proxy.fetch_current_weather("London")
    """

    def __init__(
        self,
        api_key: str | None,
        base_url: str,
        timeout: float = 5.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self._http_client = http_client

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        http_client: httpx.AsyncClient | None = None,
    ) -> "WeatherProxy":
        return cls(
            api_key=settings.OPENWEATHER_API_KEY,
            base_url=settings.OPENWEATHER_BASE_URL,
            timeout=settings.OPENWEATHER_TIMEOUT_SECONDS,
            http_client=http_client,
        )

    @staticmethod
    def parse_query(city: str | None) -> WeatherQuery:
        """
        Validate the raw city parameter.

        Raises:
            BadRequestError: If the city is missing or blank after trimming
        """
        city = normalize_city(city)
        if not city:
            raise BadRequestError()
        return WeatherQuery(city=city)

    async def fetch_current_weather(self, city: str | None) -> dict[str, Any]:
        """
        Look up current weather for a city.

        Args:
            city: Raw city value from the query string

        Returns:
            The provider's JSON body, unmodified

        Raises:
            BadRequestError: Missing or blank city (no outbound call)
            ServerMisconfiguredError: No API key configured
            RateLimitedError, CityNotFoundError, UpstreamError: Provider errors
            InternalError: Network failure, timeout, or unparsable body
        """
        query = self.parse_query(city)

        if not self.api_key:
            logger.error("OPENWEATHER_API_KEY is not set; cannot serve weather lookups")
            raise ServerMisconfiguredError()

        params = {"q": query.city, "units": "metric", "appid": self.api_key}

        try:
            response = await self._get(params)
        except httpx.TimeoutException as e:
            logger.error(f"Timed out fetching weather for {query.city!r}: {e}")
            raise InternalError("timeout")
        except httpx.HTTPError as e:
            logger.error(f"Error fetching weather data for {query.city!r}: {e}")
            raise InternalError("network")

        self._raise_for_status(response, query)

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Unparsable weather payload for {query.city!r}: {e}")
            raise InternalError("parse")

    async def _get(self, params: dict[str, Any]) -> httpx.Response:
        if self._http_client is not None:
            return await self._http_client.get(self.base_url, params=params, timeout=self.timeout)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.get(self.base_url, params=params)

    @staticmethod
    def _raise_for_status(response: httpx.Response, query: WeatherQuery) -> None:
        status = response.status_code

        if status == 429:
            logger.warning("OpenWeatherMap rate limit hit")
            raise RateLimitedError()

        if status == 404:
            logger.info(f"City not found upstream: {query.city!r}")
            raise CityNotFoundError(query.city)

        if not response.is_success:
            logger.error(
                f"OpenWeatherMap API error: {status} - "
                f"{response.text[:UPSTREAM_BODY_LOG_LIMIT]}"
            )
            raise UpstreamError(status)
