# =============================================================================
# core/services/history_reader.py - Search History Reader
# =============================================================================
# Reads the most recent searches of one identity, newest first. A failed read
# means "no history available", never an error for the caller.
# =============================================================================

import logging

from core.models.identity import Identity
from core.models.search import SearchRecord
from lib.supabase_client import PersistenceError, SupabaseClient

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 5


class HistoryReader:
    """Fetches a user's recent SearchRecords."""

    def __init__(self, supabase: SupabaseClient):
        self._supabase = supabase

    async def fetch_recent(
        self,
        identity: Identity,
        limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> list[SearchRecord]:
        """
        Most recent searches owned by `identity`.

        Args:
            identity: Owner whose rows to read
            limit: Maximum number of records

        Returns:
            At most `limit` records, ordered by created_at descending;
            empty on any store failure
        """
        try:
            rows = await self._supabase.fetch_searches(identity.id, limit=limit)
        except PersistenceError as e:
            logger.error(f"Error fetching previous searches: {e}")
            return []

        records: list[SearchRecord] = []
        for row in rows:
            try:
                record = SearchRecord.from_row(row)
            except ValueError as e:
                logger.warning(f"Skipping malformed history row: {e}")
                continue
            if record.owner_id != identity.id:
                logger.warning(f"Dropping history row not owned by {identity.id}")
                continue
            records.append(record)

        return records[:limit]
