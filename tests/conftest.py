# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - In-memory fakes for Supabase Auth, the search history table, and the
#   weather proxy client, so no test touches the network
# =============================================================================

import asyncio
import os
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# app.main builds a module-level app from get_settings() on import

os.environ.setdefault("OPENWEATHER_API_KEY", "test-openweather-key")
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import pytest

from app.config import Settings
from core.controller import ApplicationController
from core.models.weather import WeatherResult
from core.services.history_reader import HistoryReader
from core.services.search_recorder import SearchRecorder
from core.services.session_store import SessionStore
from lib.supabase_client import PersistenceError
from lib.weather_client import WeatherLookupError


# =============================================================================
# Fakes
# =============================================================================

class FakeAuthApiError(Exception):
    """Mimics supabase_auth errors, which carry the server text in `.message`."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def make_session(user_id: str = "user-a", email: str = "alice@example.com"):
    user = SimpleNamespace(id=user_id, email=email)
    return SimpleNamespace(user=user, access_token=f"token-{user_id}")


class FakeAuth:
    """
    Stand-in for the async Supabase auth client.

    Accounts are {email: (password, user_id)}. Every call is recorded in
    `calls` so tests can assert that validation never reached the service.
    """

    def __init__(self):
        self.session = None
        self.accounts: dict[str, tuple[str, str]] = {}
        self.listeners: list = []
        self.calls: list[tuple[str, object]] = []
        self.confirm_email = False
        self.get_session_error: Exception | None = None
        self.hang_get_session = False
        self.sign_in_error: Exception | None = None
        self.sign_up_error: Exception | None = None
        self.sign_out_error: Exception | None = None

    @property
    def current_user_id(self) -> str | None:
        return self.session.user.id if self.session else None

    def emit(self, event: str, session) -> None:
        for callback in list(self.listeners):
            callback(event, session)

    def on_auth_state_change(self, callback):
        self.listeners.append(callback)

        def unsubscribe():
            if callback in self.listeners:
                self.listeners.remove(callback)

        return SimpleNamespace(unsubscribe=unsubscribe)

    async def get_session(self):
        self.calls.append(("get_session", None))
        if self.hang_get_session:
            await asyncio.sleep(3600)
        if self.get_session_error:
            raise self.get_session_error
        return self.session

    async def sign_in_with_password(self, credentials):
        self.calls.append(("sign_in", credentials))
        if self.sign_in_error:
            raise self.sign_in_error

        account = self.accounts.get(credentials["email"])
        if account is None or account[0] != credentials["password"]:
            raise FakeAuthApiError("Invalid login credentials")

        self.session = make_session(account[1], credentials["email"])
        self.emit("SIGNED_IN", self.session)
        return SimpleNamespace(user=self.session.user, session=self.session)

    async def sign_up(self, credentials):
        self.calls.append(("sign_up", credentials))
        if self.sign_up_error:
            raise self.sign_up_error

        user_id = f"user-{len(self.accounts) + 1}"
        self.accounts[credentials["email"]] = (credentials["password"], user_id)
        user = SimpleNamespace(id=user_id, email=credentials["email"])

        if self.confirm_email:
            return SimpleNamespace(user=user, session=None)

        self.session = make_session(user_id, credentials["email"])
        self.emit("SIGNED_IN", self.session)
        return SimpleNamespace(user=user, session=self.session)

    async def sign_out(self):
        self.calls.append(("sign_out", None))
        if self.sign_out_error:
            raise self.sign_out_error
        self.session = None
        self.emit("SIGNED_OUT", None)


class InMemorySearchStore:
    """
    Replaces SupabaseClient for history tests.

    Enforces the table's Row Level Security against the fake auth session:
    inserts must be owned by the signed-in user, and selects only see the
    signed-in user's rows.
    """

    BASE_TIME = datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)

    def __init__(self, auth: FakeAuth):
        self.auth = auth
        self.rows: list[dict] = []
        self.fail_inserts = False
        self.fail_fetches = False
        self.fetch_calls: list[tuple[str, int]] = []

    def add_row(self, user_id: str, city: str, temperature=10.0, weather="Clear") -> dict:
        """Seed a row directly, bypassing RLS."""
        row = {
            "id": len(self.rows) + 1,
            "user_id": user_id,
            "city": city,
            "temperature": temperature,
            "weather": weather,
            "created_at": (self.BASE_TIME + timedelta(minutes=len(self.rows))).isoformat(),
        }
        self.rows.append(row)
        return row

    async def insert_search(self, row: dict) -> dict:
        if self.fail_inserts:
            raise PersistenceError("Failed to insert search: connection reset", code="INSERT_SEARCH_FAILED")
        if row.get("user_id") != self.auth.current_user_id:
            raise PersistenceError(
                "new row violates row-level security policy",
                code="INSERT_SEARCH_FAILED",
            )
        stored = self.add_row(row["user_id"], row["city"], row["temperature"], row["weather"])
        return dict(stored)

    async def fetch_searches(self, owner_id: str, limit: int = 5) -> list[dict]:
        self.fetch_calls.append((owner_id, limit))
        if self.fail_fetches:
            raise PersistenceError("Failed to fetch searches: timeout", code="FETCH_SEARCHES_FAILED")
        visible = [
            row for row in self.rows
            if row["user_id"] == owner_id and row["user_id"] == self.auth.current_user_id
        ]
        visible.sort(key=lambda row: row["created_at"], reverse=True)
        return [dict(row) for row in visible[:limit]]

    def rows_for(self, user_id: str) -> list[dict]:
        return [row for row in self.rows if row["user_id"] == user_id]


class FakeWeatherClient:
    """WeatherApiClient stand-in keyed by lower-cased city name."""

    def __init__(self, payloads: dict[str, dict]):
        self.payloads = payloads
        self.errors: dict[str, str] = {}
        self.gates: dict[str, asyncio.Event] = {}
        self.calls: list[str] = []

    async def fetch(self, city: str) -> WeatherResult:
        self.calls.append(city)
        key = city.lower()
        if key in self.gates:
            await self.gates[key].wait()
        if key in self.errors:
            raise WeatherLookupError(self.errors[key], status_code=500)
        if key not in self.payloads:
            raise WeatherLookupError(
                f'Could not find weather data for "{city}". '
                "Please check the city name and try again.",
                status_code=404,
            )
        return WeatherResult.from_payload(self.payloads[key])


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def settings():
    """Explicit settings, independent of any local .env file."""
    return Settings(
        _env_file=None,
        OPENWEATHER_API_KEY="test-openweather-key",
        OPENWEATHER_BASE_URL="https://api.openweathermap.org/data/2.5/weather",
        SUPABASE_URL="https://test-project.supabase.co",
        SUPABASE_ANON_KEY="test-anon-key",
        ENVIRONMENT="development",
    )


@pytest.fixture
def london_payload():
    """OpenWeatherMap current weather response for London (metric units)."""
    return {
        "coord": {"lon": -0.1257, "lat": 51.5085},
        "weather": [
            {"id": 804, "main": "Clouds", "description": "overcast clouds", "icon": "04d"}
        ],
        "base": "stations",
        "main": {
            "temp": 12.3,
            "feels_like": 11.1,
            "temp_min": 11.0,
            "temp_max": 13.4,
            "pressure": 1012,
            "humidity": 81,
        },
        "visibility": 10000,
        "wind": {"speed": 4.1, "deg": 240},
        "dt": 1705314600,
        "sys": {"country": "GB", "sunrise": 1705305300, "sunset": 1705335600},
        "timezone": 0,
        "id": 2643743,
        "name": "London",
        "cod": 200,
    }


@pytest.fixture
def london_result(london_payload):
    return WeatherResult.from_payload(london_payload)


@pytest.fixture
def fake_auth():
    auth = FakeAuth()
    auth.accounts["alice@example.com"] = ("secret123", "user-a")
    auth.accounts["bob@example.com"] = ("hunter22", "user-b")
    return auth


@pytest.fixture
def search_store(fake_auth):
    return InMemorySearchStore(fake_auth)


@pytest.fixture
def session_store(fake_auth):
    return SessionStore(fake_auth)


@pytest.fixture
def weather_client(london_payload):
    return FakeWeatherClient({"london": london_payload})


@pytest.fixture
def controller(weather_client, session_store, search_store):
    """Controller wired to in-memory fakes; call `await controller.start()`."""
    return ApplicationController(
        weather_client=weather_client,
        session_store=session_store,
        history_reader=HistoryReader(search_store),
        search_recorder=SearchRecorder(search_store, session_store),
    )
