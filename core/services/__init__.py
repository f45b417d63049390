# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .weather_service import WeatherProxy
from .session_store import (
    AuthServiceError,
    AuthValidationError,
    SessionStore,
    validate_credentials,
)
from .search_recorder import SearchRecorder
from .history_reader import DEFAULT_HISTORY_LIMIT, HistoryReader

__all__ = [
    "WeatherProxy",
    "SessionStore",
    "AuthServiceError",
    "AuthValidationError",
    "validate_credentials",
    "SearchRecorder",
    "HistoryReader",
    "DEFAULT_HISTORY_LIMIT",
]
