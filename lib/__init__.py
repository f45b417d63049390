# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable client-side building blocks:
# - supabase_client.py: Typed Supabase wrapper for search history queries
# - session_storage.py: File-backed storage for the auth session
# - weather_client.py: HTTP client for the SkyCast weather proxy
# - utils.py: Shared utilities (base error, input normalization)
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.utils import ApplicationError, normalize_city
from lib.supabase_client import SupabaseClient, PersistenceError
from lib.session_storage import FileSessionStorage
from lib.weather_client import WeatherApiClient, WeatherLookupError

__all__ = [
    # Supabase
    "SupabaseClient",
    "PersistenceError",
    "FileSessionStorage",
    # Weather proxy client
    "WeatherApiClient",
    "WeatherLookupError",
    # Utils
    "ApplicationError",
    "normalize_city",
]
