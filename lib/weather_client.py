# =============================================================================
# lib/weather_client.py - Client for the SkyCast Weather Proxy
# =============================================================================
# Used by the application controller to run a search. Talks to our own proxy
# (never to the provider directly) and turns any failure into a single
# WeatherLookupError whose message is safe to show to the user.
# =============================================================================

import logging

import httpx

from core.models.weather import WeatherResult
from lib.utils import ApplicationError

logger = logging.getLogger(__name__)

FALLBACK_MESSAGE = "Failed to fetch weather data"
UNKNOWN_ERROR_MESSAGE = "Unknown error"


class WeatherLookupError(ApplicationError):
    """A search failed; `message` is what the user sees."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(
            message,
            code="WEATHER_LOOKUP_FAILED",
            details={"status_code": status_code} if status_code else None,
        )
        self.status_code = status_code


class WeatherApiClient:
    """
    Async HTTP client for `GET {base_url}{prefix}/weather?city=...`.

    Example:
        client = WeatherApiClient("http://localhost:3000")
        result = await client.fetch("London")
    """

    def __init__(
        self,
        base_url: str,
        prefix: str = "/api",
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.url = f"{base_url.rstrip('/')}{prefix}/weather"
        self.timeout = timeout
        self._http_client = http_client

    async def fetch(self, city: str) -> WeatherResult:
        """
        Fetch current weather through the proxy.

        Raises:
            WeatherLookupError: With the proxy's message when it sent one,
                "Unknown error" for a non-JSON error body, otherwise a
                generic message
        """
        try:
            response = await self._get({"city": city})
        except httpx.HTTPError as e:
            logger.warning(f"Weather proxy unreachable: {e}")
            raise WeatherLookupError(FALLBACK_MESSAGE)

        if not response.is_success:
            raise WeatherLookupError(
                self._error_message(response),
                status_code=response.status_code,
            )

        try:
            return WeatherResult.from_payload(response.json())
        except ValueError as e:
            logger.warning(f"Unusable weather payload from proxy: {e}")
            raise WeatherLookupError(FALLBACK_MESSAGE, status_code=response.status_code)

    async def _get(self, params: dict[str, str]) -> httpx.Response:
        if self._http_client is not None:
            return await self._http_client.get(self.url, params=params, timeout=self.timeout)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.get(self.url, params=params)

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return UNKNOWN_ERROR_MESSAGE
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return f"HTTP error! status: {response.status_code}"
