# =============================================================================
# tests/test_supabase_client.py - Supabase Wrapper Tests
# =============================================================================
# This module contains tests for:
# - SupabaseClient query construction and error wrapping (mocked client)
# - SupabaseClient.create configuration checks
# - FileSessionStorage persistence
# =============================================================================

import asyncio
import os
import stat
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from app.config import ConfigurationError
from lib.session_storage import FileSessionStorage
from lib.supabase_client import HISTORY_COLUMNS, PersistenceError, SupabaseClient


def insert_chain(client: MagicMock) -> MagicMock:
    return client.table.return_value.insert.return_value


def select_chain(client: MagicMock) -> MagicMock:
    return (
        client.table.return_value
        .select.return_value
        .eq.return_value
        .order.return_value
        .limit.return_value
    )


# =============================================================================
# Insert Tests
# =============================================================================

class TestInsertSearch:
    """Test SupabaseClient.insert_search."""

    @pytest.mark.asyncio
    async def test_returns_inserted_row(self):
        client = MagicMock()
        stored = {"id": 1, "user_id": "user-a", "city": "London", "created_at": "2024-01-15T10:30:00+00:00"}
        insert_chain(client).execute = AsyncMock(return_value=SimpleNamespace(data=[stored]))
        row = {"user_id": "user-a", "city": "London", "temperature": 12.3, "weather": "Clouds"}

        result = await SupabaseClient(client).insert_search(row)

        assert result == stored
        client.table.assert_called_once_with("user_searches")
        client.table.return_value.insert.assert_called_once_with(row)

    @pytest.mark.asyncio
    async def test_rejected_insert_is_wrapped(self):
        client = MagicMock()
        insert_chain(client).execute = AsyncMock(
            side_effect=Exception("new row violates row-level security policy")
        )

        with pytest.raises(PersistenceError) as exc_info:
            await SupabaseClient(client).insert_search({"user_id": "user-b", "city": "London"})

        assert exc_info.value.code == "INSERT_SEARCH_FAILED"
        assert "row-level security" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_empty_response(self):
        client = MagicMock()
        insert_chain(client).execute = AsyncMock(return_value=SimpleNamespace(data=[]))

        with pytest.raises(PersistenceError) as exc_info:
            await SupabaseClient(client).insert_search({"user_id": "user-a", "city": "London"})

        assert exc_info.value.code == "INSERT_NO_DATA"

    @pytest.mark.asyncio
    async def test_timeout(self):
        async def hang(*args, **kwargs):
            await asyncio.sleep(1)

        client = MagicMock()
        insert_chain(client).execute = AsyncMock(side_effect=hang)

        with pytest.raises(PersistenceError) as exc_info:
            await SupabaseClient(client, timeout=0.01).insert_search({"user_id": "user-a", "city": "X"})

        assert exc_info.value.code == "PERSISTENCE_TIMEOUT"


# =============================================================================
# Fetch Tests
# =============================================================================

class TestFetchSearches:
    """Test SupabaseClient.fetch_searches."""

    @pytest.mark.asyncio
    async def test_query_shape(self):
        client = MagicMock()
        rows = [{"id": 2, "city": "Paris"}, {"id": 1, "city": "Rome"}]
        select_chain(client).execute = AsyncMock(return_value=SimpleNamespace(data=rows))

        result = await SupabaseClient(client, searches_table="history").fetch_searches("user-a", limit=5)

        assert result == rows
        table = client.table.return_value
        client.table.assert_called_once_with("history")
        table.select.assert_called_once_with(HISTORY_COLUMNS)
        table.select.return_value.eq.assert_called_once_with("user_id", "user-a")
        table.select.return_value.eq.return_value.order.assert_called_once_with("created_at", desc=True)
        table.select.return_value.eq.return_value.order.return_value.limit.assert_called_once_with(5)

    @pytest.mark.asyncio
    async def test_none_data_is_empty(self):
        client = MagicMock()
        select_chain(client).execute = AsyncMock(return_value=SimpleNamespace(data=None))

        assert await SupabaseClient(client).fetch_searches("user-a") == []

    @pytest.mark.asyncio
    async def test_failure_is_wrapped(self):
        client = MagicMock()
        select_chain(client).execute = AsyncMock(side_effect=Exception("connection refused"))

        with pytest.raises(PersistenceError) as exc_info:
            await SupabaseClient(client).fetch_searches("user-a")

        assert exc_info.value.code == "FETCH_SEARCHES_FAILED"


# =============================================================================
# Client Creation Tests
# =============================================================================

class TestCreate:
    """Test SupabaseClient.create."""

    @pytest.mark.asyncio
    async def test_missing_settings(self, settings):
        incomplete = settings.model_copy(update={"SUPABASE_URL": None, "SUPABASE_ANON_KEY": None})

        with pytest.raises(ConfigurationError) as exc_info:
            await SupabaseClient.create(incomplete)

        assert exc_info.value.missing == ["SUPABASE_URL", "SUPABASE_ANON_KEY"]

    @pytest.mark.asyncio
    async def test_create_passes_storage(self, settings, tmp_path):
        storage = FileSessionStorage(tmp_path / "session.json")
        underlying = MagicMock()

        with patch("lib.supabase_client.acreate_client", new=AsyncMock(return_value=underlying)) as create:
            client = await SupabaseClient.create(settings, storage=storage)

        args, kwargs = create.call_args
        assert args == ("https://test-project.supabase.co", "test-anon-key")
        assert kwargs["options"].storage is storage
        assert client.auth is underlying.auth
        assert client.searches_table == "user_searches"

    @pytest.mark.asyncio
    async def test_create_failure(self, settings):
        with patch(
            "lib.supabase_client.acreate_client",
            new=AsyncMock(side_effect=Exception("Invalid URL")),
        ):
            with pytest.raises(PersistenceError) as exc_info:
                await SupabaseClient.create(settings)

        assert exc_info.value.code == "CLIENT_INIT_FAILED"


# =============================================================================
# Session Storage Tests
# =============================================================================

class TestFileSessionStorage:
    """Test FileSessionStorage."""

    @pytest.mark.asyncio
    async def test_set_get_remove(self, tmp_path):
        storage = FileSessionStorage(tmp_path / "nested" / "session.json")

        assert await storage.get_item("sb-auth-token") is None

        await storage.set_item("sb-auth-token", '{"access_token": "abc"}')
        assert await storage.get_item("sb-auth-token") == '{"access_token": "abc"}'

        await storage.remove_item("sb-auth-token")
        assert await storage.get_item("sb-auth-token") is None

    @pytest.mark.asyncio
    async def test_survives_new_instance(self, tmp_path):
        path = tmp_path / "session.json"
        await FileSessionStorage(path).set_item("key", "value")

        assert await FileSessionStorage(path).get_item("key") == "value"

    @pytest.mark.asyncio
    async def test_file_is_owner_only(self, tmp_path):
        path = tmp_path / "session.json"

        await FileSessionStorage(path).set_item("key", "value")

        assert stat.S_IMODE(os.stat(path).st_mode) == 0o600

    @pytest.mark.asyncio
    async def test_corrupt_file_is_ignored(self, tmp_path):
        path = tmp_path / "session.json"
        path.write_text("{not json", encoding="utf-8")

        assert await FileSessionStorage(path).get_item("key") is None
