# =============================================================================
# core/models/weather.py - Weather Schemas
# =============================================================================
# These models describe one weather lookup:
# - WeatherQuery: the validated city a user asked for
# - WeatherResult: the upstream payload, kept opaque but with typed accessors
#
# The proxy never reshapes the upstream body; WeatherResult is only used on
# the client side to display a result and to project it into a SearchRecord.
# =============================================================================

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

ICON_URL_TEMPLATE = "https://openweathermap.org/img/wn/{icon}@2x.png"
UNKNOWN_LABEL = "Unknown"
NOT_AVAILABLE = "N/A"


class WeatherQuery(BaseModel):
    """
    A city lookup, trimmed and non-empty.

    Example:
        {"city": "London"}
    """

    city: str = Field(
        ...,
        min_length=1,
        description="City name as typed by the user, trimmed"
    )

    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)


# =============================================================================
# Upstream Payload
# =============================================================================
# Only the fields the UI reads are declared. Everything else the provider
# sends is preserved via extra="allow".

class MainReadings(BaseModel):
    """The `main` block: temperatures in Celsius (units=metric) and humidity."""
    temp: float | None = None
    feels_like: float | None = None
    humidity: float | None = None

    model_config = ConfigDict(extra="allow")


class Condition(BaseModel):
    """One entry of the `weather` list."""
    main: str | None = None
    description: str | None = None
    icon: str | None = None

    model_config = ConfigDict(extra="allow")


class Wind(BaseModel):
    speed: float | None = None

    model_config = ConfigDict(extra="allow")


class WeatherResult(BaseModel):
    """
    Current weather for one city as returned by OpenWeatherMap.

    Replaced wholesale by each new search; never persisted directly.

    Example:
        {
            "name": "London",
            "main": {"temp": 12.3, "feels_like": 11.1, "humidity": 81},
            "weather": [{"main": "Clouds", "description": "overcast clouds", "icon": "04d"}],
            "wind": {"speed": 4.1}
        }
    """

    name: str | None = None
    main: MainReadings | None = None
    weather: list[Condition] = Field(default_factory=list)
    wind: Wind | None = None

    model_config = ConfigDict(extra="allow")

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> WeatherResult:
        return cls.model_validate(payload)

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def primary_condition(self) -> Condition | None:
        return self.weather[0] if self.weather else None

    @property
    def city_name(self) -> str | None:
        return self.name

    @property
    def temperature_celsius(self) -> float | None:
        return self.main.temp if self.main else None

    @property
    def feels_like_celsius(self) -> float | None:
        return self.main.feels_like if self.main else None

    @property
    def humidity_percent(self) -> float | None:
        return self.main.humidity if self.main else None

    @property
    def condition_main(self) -> str | None:
        return self.primary_condition.main if self.primary_condition else None

    @property
    def condition_description(self) -> str | None:
        return self.primary_condition.description if self.primary_condition else None

    @property
    def wind_speed(self) -> float | None:
        return self.wind.speed if self.wind else None

    @property
    def icon_id(self) -> str | None:
        return self.primary_condition.icon if self.primary_condition else None

    @property
    def icon_url(self) -> str | None:
        """Provider-hosted icon image, or None when the payload has no icon."""
        if not self.icon_id:
            return None
        return ICON_URL_TEMPLATE.format(icon=self.icon_id)

    @property
    def weather_label(self) -> str:
        """
        Short label stored with a search.

        Prefers the short condition ("Clouds"), then the long description
        ("overcast clouds"), then "Unknown".
        """
        return self.condition_main or self.condition_description or UNKNOWN_LABEL


# =============================================================================
# Display Helpers
# =============================================================================

def _one_decimal(value: float | None) -> str:
    return f"{value:.1f}" if value is not None else NOT_AVAILABLE


def format_result_card(result: WeatherResult) -> dict[str, str]:
    """
    Display fields for a result, with "N/A" for anything missing.

    Temperatures and wind are rendered with one decimal.

    Returns:
        Dict with keys city, temperature, feels_like, humidity, description,
        condition, wind, icon_url
    """
    humidity = result.humidity_percent
    return {
        "city": result.city_name or UNKNOWN_LABEL,
        "temperature": _one_decimal(result.temperature_celsius),
        "feels_like": _one_decimal(result.feels_like_celsius),
        "humidity": f"{humidity:g}" if humidity is not None else NOT_AVAILABLE,
        "description": result.condition_description or NOT_AVAILABLE,
        "condition": result.condition_main or NOT_AVAILABLE,
        "wind": _one_decimal(result.wind_speed),
        "icon_url": result.icon_url or "",
    }
