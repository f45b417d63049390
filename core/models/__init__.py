# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - weather.py: WeatherQuery and the opaque WeatherResult payload
# - identity.py: Identity of the signed-in user, sign-up outcomes
# - search.py: SearchRecord rows of the search history
#
# These models define the "contract" between the proxy, the client and the
# hosted database.
# =============================================================================

from .weather import (
    Condition,
    MainReadings,
    WeatherQuery,
    WeatherResult,
    Wind,
    format_result_card,
)
from .identity import Identity, RequiresConfirmation
from .search import SearchRecord, format_history_entry

__all__ = [
    # Weather
    "Condition",
    "MainReadings",
    "WeatherQuery",
    "WeatherResult",
    "Wind",
    "format_result_card",
    # Identity
    "Identity",
    "RequiresConfirmation",
    # Search history
    "SearchRecord",
    "format_history_entry",
]
