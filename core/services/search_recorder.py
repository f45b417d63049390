# =============================================================================
# core/services/search_recorder.py - Search History Writer
# =============================================================================
# Persists a successful lookup for the signed-in user. Runs as a background
# task: nothing here may raise into the caller, and every failure is logged
# and dropped.
# =============================================================================

import logging
from typing import Awaitable, Callable

from core.models.identity import Identity
from core.models.search import SearchRecord
from core.models.weather import WeatherResult
from core.services.session_store import SessionStore
from lib.supabase_client import PersistenceError, SupabaseClient
from lib.utils import ApplicationError

logger = logging.getLogger(__name__)

RecordedHook = Callable[[Identity], Awaitable[None]]


class SearchRecorder:
    """
    Writes SearchRecords owned by the current session's identity.

    Args:
        supabase: Database wrapper
        session_store: Used to re-check the session at write time
        on_recorded: Awaited after a successful write (history refresh)
    """

    def __init__(
        self,
        supabase: SupabaseClient,
        session_store: SessionStore,
        on_recorded: RecordedHook | None = None,
    ):
        self._supabase = supabase
        self._session_store = session_store
        self.on_recorded = on_recorded

    async def record(
        self,
        identity: Identity,
        city: str,
        result: WeatherResult,
    ) -> SearchRecord | None:
        """
        Record one search.

        The caller's identity is only a hint: the session is fetched again
        because the user may have signed out (or switched accounts) since
        the search was started.

        Returns:
            The stored record, or None when skipped or rejected
        """
        try:
            current = await self._session_store.get_current_identity()
        except ApplicationError as e:
            logger.error(f"Error getting session for search insert: {e}")
            return None

        if current is None:
            logger.info("No active session - skipping search insert")
            return None

        if current.id != identity.id:
            logger.info(
                f"Session changed from {identity.id} to {current.id} "
                "before the search was recorded"
            )

        record = SearchRecord(
            owner_id=current.id,
            city=city,
            temperature=result.temperature_celsius,
            weather_label=result.weather_label,
        )

        try:
            row = await self._supabase.insert_search(record.to_insert_row())
        except PersistenceError as e:
            logger.error(f"Error saving search to database: {e}")
            return None

        try:
            stored = SearchRecord.from_row(row)
        except ValueError as e:
            logger.warning(f"Saved search but could not parse stored row: {e}")
            stored = record

        logger.debug(f"Saved search {city!r} for user {current.id}")

        if self.on_recorded is not None:
            await self.on_recorded(current)

        return stored
