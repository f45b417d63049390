# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for the Supabase operations the client
# needs:
# - Auth (exposed as-is through the `auth` property)
# - Inserting a search into the history table
# - Fetching a user's most recent searches
#
# The wrapper is built with the public anon key, so every query runs as the
# signed-in user and Row Level Security (auth.uid() = user_id) applies.
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   client = await SupabaseClient.create(settings)
#   rows = await client.fetch_searches(owner_id, limit=5)
# =============================================================================

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Awaitable

from supabase import AsyncClient, acreate_client
from supabase.lib.client_options import AsyncClientOptions

from lib.utils import ApplicationError

if TYPE_CHECKING:
    from app.config import Settings
    from supabase_auth import AsyncSupportedStorage

# Set up logging for this module
logger = logging.getLogger(__name__)

HISTORY_COLUMNS = "id, user_id, city, temperature, weather, created_at"


class PersistenceError(ApplicationError):
    """
    Error during Supabase database operations.

    Never fatal: the recorder and history reader log it and carry on.
    """

    def __init__(
        self,
        message: str,
        code: str = "PERSISTENCE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code=code, suggestion=suggestion, details=details)


class SupabaseClient:
    """
    Typed wrapper around the async Supabase client.

    Instances are constructed explicitly and injected into the components
    that need them (session store, recorder, history reader).

    Example:
        client = await SupabaseClient.create(settings)
        await client.insert_search({"user_id": uid, "city": "London", ...})
        rows = await client.fetch_searches(uid, limit=5)
    """

    def __init__(
        self,
        client: AsyncClient,
        searches_table: str = "user_searches",
        timeout: float = 5.0,
    ):
        self._client = client
        self.searches_table = searches_table
        self.timeout = timeout

    @classmethod
    async def create(
        cls,
        settings: Settings,
        storage: AsyncSupportedStorage | None = None,
    ) -> SupabaseClient:
        """
        Create the underlying async client from settings.

        Args:
            settings: Must provide SUPABASE_URL and SUPABASE_ANON_KEY
            storage: Where auth sessions are persisted (memory if omitted)

        Raises:
            ConfigurationError: If the Supabase settings are missing
            PersistenceError: If client creation fails
        """
        settings.require("SUPABASE_URL", "SUPABASE_ANON_KEY")

        options = AsyncClientOptions(persist_session=True, auto_refresh_token=True)
        if storage is not None:
            options.storage = storage

        try:
            client = await acreate_client(
                settings.SUPABASE_URL,
                settings.SUPABASE_ANON_KEY,
                options=options,
            )
            logger.info("Supabase client initialized successfully")
        except Exception as e:
            raise PersistenceError(
                message=f"Failed to create Supabase client: {e}",
                code="CLIENT_INIT_FAILED",
                suggestion="Check SUPABASE_URL and SUPABASE_ANON_KEY in your .env file",
            )

        return cls(
            client,
            searches_table=settings.SUPABASE_SEARCHES_TABLE,
            timeout=settings.PERSISTENCE_TIMEOUT_SECONDS,
        )

    @property
    def auth(self) -> Any:
        """The Supabase auth client (sign in, sessions, change events)."""
        return self._client.auth

    async def _execute(self, query: Awaitable[Any], operation: str) -> Any:
        try:
            return await asyncio.wait_for(query, timeout=self.timeout)
        except asyncio.TimeoutError:
            raise PersistenceError(
                message=f"Timed out during {operation} after {self.timeout}s",
                code="PERSISTENCE_TIMEOUT",
                details={"table": self.searches_table},
            )

    # -------------------------------------------------------------------------
    # Search History
    # -------------------------------------------------------------------------

    async def insert_search(self, row: dict[str, Any]) -> dict[str, Any]:
        """
        Insert one search row.

        Args:
            row: Columns user_id, city, temperature, weather

        Returns:
            Inserted row with generated id and created_at

        Raises:
            PersistenceError: If the insert fails (including RLS rejection)
        """
        try:
            response = await self._execute(
                self._client.table(self.searches_table).insert(row).execute(),
                "insert",
            )
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(
                message=f"Failed to insert search: {e}",
                code="INSERT_SEARCH_FAILED",
                suggestion="Check that the user is signed in and owns the row (RLS)",
                details={"user_id": row.get("user_id"), "city": row.get("city")},
            )

        if response.data:
            return response.data[0]
        raise PersistenceError(
            message="Insert returned no data",
            code="INSERT_NO_DATA",
        )

    async def fetch_searches(self, owner_id: str, limit: int = 5) -> list[dict[str, Any]]:
        """
        Fetch the most recent searches of one user.

        Args:
            owner_id: Identity id whose rows to read
            limit: Maximum number of rows

        Returns:
            Rows ordered by created_at, newest first

        Raises:
            PersistenceError: If the query fails
        """
        try:
            response = await self._execute(
                self._client.table(self.searches_table)
                .select(HISTORY_COLUMNS)
                .eq("user_id", owner_id)
                .order("created_at", desc=True)
                .limit(limit)
                .execute(),
                "select",
            )
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(
                message=f"Failed to fetch searches: {e}",
                code="FETCH_SEARCHES_FAILED",
                details={"user_id": owner_id, "limit": limit},
            )

        rows = response.data or []
        logger.debug(f"Fetched {len(rows)} searches for user {owner_id}")
        return rows
