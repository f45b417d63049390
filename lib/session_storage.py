# =============================================================================
# lib/session_storage.py - Persisted Auth Session Storage
# =============================================================================
# Supabase Auth keeps the current session in a pluggable storage. The default
# is in-memory, which loses the sign-in on every restart; this storage writes
# it to a small JSON file instead, so a returning user is still signed in.
#
# Usage:
#   storage = FileSessionStorage(settings.session_file_path)
#   client = await SupabaseClient.create(settings, storage=storage)
# =============================================================================

import json
import logging
import os
from pathlib import Path
from typing import Optional

from supabase_auth import AsyncSupportedStorage

logger = logging.getLogger(__name__)


class FileSessionStorage(AsyncSupportedStorage):
    """
    Key/value storage backed by one JSON file.

    The file is created with owner-only permissions because it holds
    refresh tokens.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            return json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable session file {self.path}: {e}")
            return {}

    def _save(self, items: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(items), encoding="utf-8")
        os.chmod(self.path, 0o600)

    async def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    async def set_item(self, key: str, value: str) -> None:
        items = self._load()
        items[key] = value
        self._save(items)

    async def remove_item(self, key: str) -> None:
        items = self._load()
        if items.pop(key, None) is not None:
            self._save(items)
