# =============================================================================
# tests/test_interactive_script.py - Terminal Front End Tests
# =============================================================================
# This module contains tests for scripts/skycast_interactive.py:
# - Startup failures are reported as a message, not a traceback
# - A failed sign out is not reported to the user
#
# The script is loaded with runpy; its globals are patched through the
# loaded functions.
# =============================================================================

import runpy
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from app.config import ConfigurationError
from lib.supabase_client import PersistenceError

SCRIPT_PATH = Path(__file__).resolve().parent.parent / "scripts" / "skycast_interactive.py"


@pytest.fixture(scope="module")
def script():
    return runpy.run_path(str(SCRIPT_PATH))


class TestStartup:
    """Test main_async() when the client stack cannot be built."""

    @pytest.mark.asyncio
    async def test_client_init_failure(self, script, settings, capsys):
        error = PersistenceError(
            message="Failed to create Supabase client: Invalid URL",
            code="CLIENT_INIT_FAILED",
            suggestion="Check SUPABASE_URL and SUPABASE_ANON_KEY in your .env file",
        )
        main_async = script["main_async"]

        with patch.dict(main_async.__globals__, {
            "get_settings": lambda: settings,
            "build_controller": AsyncMock(side_effect=error),
        }):
            assert await main_async() == 1

        out = capsys.readouterr().out
        assert "ERROR: Failed to create Supabase client: Invalid URL" in out
        assert "Check SUPABASE_URL and SUPABASE_ANON_KEY" in out

    @pytest.mark.asyncio
    async def test_missing_configuration(self, script, settings, capsys):
        main_async = script["main_async"]

        with patch.dict(main_async.__globals__, {
            "get_settings": lambda: settings,
            "build_controller": AsyncMock(side_effect=ConfigurationError(["SUPABASE_URL"])),
        }):
            assert await main_async() == 1

        assert "Missing required configuration: SUPABASE_URL" in capsys.readouterr().out


class TestSignOut:
    """Test handle_sign_out()."""

    @pytest.mark.asyncio
    async def test_success_is_confirmed(self, script, capsys):
        controller = MagicMock()
        controller.sign_out = AsyncMock(return_value=True)

        await script["handle_sign_out"](controller)

        assert "Signed out." in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_failure_prints_nothing(self, script, capsys):
        controller = MagicMock()
        controller.sign_out = AsyncMock(return_value=False)

        await script["handle_sign_out"](controller)

        assert capsys.readouterr().out == ""
