# =============================================================================
# core/controller.py - Application Controller
# =============================================================================
# Ties the client together. Three independent state axes:
#
#   auth:    AUTH_RESOLVING -> ANONYMOUS <-> AUTHENTICATED
#   search:  IDLE -> SEARCHING -> DISPLAYING | SEARCH_FAILED -> SEARCHING ...
#   history: HISTORY_IDLE -> HISTORY_LOADING -> HISTORY_LOADED
#
# Searches are awaited; recording a search and reloading history run as
# background tasks owned by the controller and cancelled by aclose().
#
# Usage:
#   controller = await build_controller(settings)
#   await controller.start()
#   await controller.submit("London")
#   print(controller.view())
#   await controller.aclose()
# =============================================================================

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Coroutine

from app.config import Settings
from core.models.identity import Identity, RequiresConfirmation
from core.models.search import SearchRecord
from core.models.weather import WeatherResult
from core.services.history_reader import DEFAULT_HISTORY_LIMIT, HistoryReader
from core.services.search_recorder import SearchRecorder
from core.services.session_store import (
    AuthServiceError,
    AuthValidationError,
    SessionStore,
)
from lib.session_storage import FileSessionStorage
from lib.supabase_client import SupabaseClient
from lib.utils import normalize_city
from lib.weather_client import WeatherApiClient, WeatherLookupError

logger = logging.getLogger(__name__)


class AuthState(str, Enum):
    """Whether we know who the user is yet, and who it is."""
    AUTH_RESOLVING = "auth_resolving"
    ANONYMOUS = "anonymous"
    AUTHENTICATED = "authenticated"


class SearchState(str, Enum):
    """Progress of the current search. Result and error are exclusive."""
    IDLE = "idle"
    SEARCHING = "searching"
    DISPLAYING = "displaying"
    SEARCH_FAILED = "search_failed"


class HistoryState(str, Enum):
    HISTORY_IDLE = "history_idle"
    HISTORY_LOADING = "history_loading"
    HISTORY_LOADED = "history_loaded"


@dataclass(frozen=True)
class ControllerView:
    """Immutable snapshot of everything a UI needs to render."""
    auth_state: AuthState
    search_state: SearchState
    history_state: HistoryState
    identity: Identity | None = None
    result: WeatherResult | None = None
    error: str | None = None
    history: tuple[SearchRecord, ...] = field(default_factory=tuple)
    show_auth_form: bool = False
    auth_error: str | None = None

    @property
    def ready(self) -> bool:
        """False until the initial session has been resolved."""
        return self.auth_state is not AuthState.AUTH_RESOLVING

    @property
    def show_history(self) -> bool:
        return self.auth_state is AuthState.AUTHENTICATED


ViewListener = Callable[[ControllerView], None]


class ApplicationController:
    """
    Orchestrates search, auth and history for one user interface.

    Args:
        weather_client: Talks to the weather proxy
        session_store: Supabase Auth wrapper
        history_reader: Reads recent searches
        search_recorder: Writes searches; its on_recorded hook is pointed at
            this controller's history refresh
        history_limit: Number of history entries to show
    """

    def __init__(
        self,
        weather_client: WeatherApiClient,
        session_store: SessionStore,
        history_reader: HistoryReader,
        search_recorder: SearchRecorder,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ):
        self._weather_client = weather_client
        self._session_store = session_store
        self._history_reader = history_reader
        self._search_recorder = search_recorder
        self._search_recorder.on_recorded = self._on_search_recorded
        self._history_limit = history_limit

        self._auth_state = AuthState.AUTH_RESOLVING
        self._search_state = SearchState.IDLE
        self._history_state = HistoryState.HISTORY_IDLE
        self._identity: Identity | None = None
        self._result: WeatherResult | None = None
        self._error: str | None = None
        self._history: list[SearchRecord] = []
        self._show_auth_form = False
        self._auth_error: str | None = None

        # Bumped when a search or history load starts; a completion carrying
        # an older value is dropped
        self._search_generation = 0
        self._history_generation = 0

        self._unsubscribe_session: Callable[[], None] | None = None
        self._listeners: list[ViewListener] = []
        self._tasks: set[asyncio.Task] = set()

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def start(self) -> ControllerView:
        """
        Subscribe to session changes and resolve the initial identity.

        The auth state stays AUTH_RESOLVING until this returns.
        """
        self._unsubscribe_session = self._session_store.subscribe(self._on_session_change)

        try:
            identity = await self._session_store.get_current_identity()
        except AuthServiceError as e:
            logger.error(f"Could not resolve initial session: {e}")
            identity = None

        self._apply_identity(identity, force=True)
        return self.view()

    async def aclose(self) -> None:
        """Stop observing the session and cancel background work."""
        if self._unsubscribe_session is not None:
            self._unsubscribe_session()
            self._unsubscribe_session = None

        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()
        self._listeners.clear()

    async def wait_for_background_tasks(self) -> None:
        """Wait until recording and history reloads in flight have finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # -------------------------------------------------------------------------
    # View
    # -------------------------------------------------------------------------

    def view(self) -> ControllerView:
        return ControllerView(
            auth_state=self._auth_state,
            search_state=self._search_state,
            history_state=self._history_state,
            identity=self._identity,
            result=self._result,
            error=self._error,
            history=tuple(self._history),
            show_auth_form=self._show_auth_form,
            auth_error=self._auth_error,
        )

    def subscribe(self, listener: ViewListener) -> Callable[[], None]:
        """
        Call `listener` with a fresh view after every state change.

        Returns:
            A callable that removes the listener
        """
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        snapshot = self.view()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.warning(f"View listener failed: {e}")

    # -------------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------------

    async def submit(self, city: str) -> ControllerView:
        """
        Run one search.

        A blank city is ignored. Otherwise the previous result and error are
        cleared before the lookup starts. When a newer submit starts while
        this one is in flight, this one's outcome is neither shown nor
        recorded.
        """
        city = normalize_city(city)
        if not city:
            return self.view()

        self._search_generation += 1
        generation = self._search_generation

        self._error = None
        self._result = None
        self._search_state = SearchState.SEARCHING
        self._notify()

        try:
            result = await self._weather_client.fetch(city)
        except WeatherLookupError as e:
            if generation != self._search_generation:
                logger.debug(f"Dropping superseded failure for {city!r}")
                return self.view()
            self._error = e.message
            self._search_state = SearchState.SEARCH_FAILED
            self._notify()
            return self.view()

        if generation != self._search_generation:
            logger.debug(f"Dropping superseded result for {city!r}")
            return self.view()

        self._result = result
        self._search_state = SearchState.DISPLAYING
        self._notify()

        if self._auth_state is AuthState.AUTHENTICATED and self._identity is not None:
            self._spawn(
                self._search_recorder.record(self._identity, city, result),
                name=f"record-search:{city}",
            )

        return self.view()

    # -------------------------------------------------------------------------
    # History
    # -------------------------------------------------------------------------

    async def refresh_history(self) -> ControllerView:
        """Reload history for the current identity (clears it when anonymous)."""
        identity = self._identity
        if identity is None:
            self._clear_history()
            self._notify()
            return self.view()

        self._history_generation += 1
        generation = self._history_generation

        self._history_state = HistoryState.HISTORY_LOADING
        self._notify()

        records = await self._history_reader.fetch_recent(identity, limit=self._history_limit)

        # A later load started while this one was in flight
        if generation != self._history_generation:
            logger.debug(f"Discarding superseded history load for {identity.id}")
            return self.view()

        # Signed out or switched user while loading: drop the stale result
        if self._identity is None or self._identity.id != identity.id:
            logger.debug(f"Discarding history loaded for {identity.id}")
            return self.view()

        self._history = records
        self._history_state = HistoryState.HISTORY_LOADED
        self._notify()
        return self.view()

    async def _on_search_recorded(self, identity: Identity) -> None:
        if self._identity is not None and self._identity.id == identity.id:
            await self.refresh_history()

    def _clear_history(self) -> None:
        self._history_generation += 1
        self._history = []
        self._history_state = HistoryState.HISTORY_IDLE

    # -------------------------------------------------------------------------
    # Auth
    # -------------------------------------------------------------------------

    def show_auth(self) -> ControllerView:
        """Open the sign in / sign up form (only while anonymous)."""
        if self._auth_state is AuthState.ANONYMOUS:
            self._show_auth_form = True
            self._auth_error = None
            self._notify()
        return self.view()

    async def sign_in(self, email: str, password: str) -> Identity | None:
        """
        Sign in; errors end up in `view().auth_error`.

        Returns:
            The identity on success, None otherwise
        """
        self._auth_error = None
        try:
            identity = await self._session_store.sign_in(email, password)
        except (AuthValidationError, AuthServiceError) as e:
            self._auth_error = e.message
            self._notify()
            return None

        self._apply_identity(identity)
        return identity

    async def sign_up(self, email: str, password: str) -> Identity | RequiresConfirmation | None:
        """
        Create an account; a pending confirmation is reported via auth_error.

        Returns:
            Identity when signed in right away, RequiresConfirmation when the
            user must confirm their email, None on error
        """
        self._auth_error = None
        try:
            outcome = await self._session_store.sign_up(email, password)
        except (AuthValidationError, AuthServiceError) as e:
            self._auth_error = e.message
            self._notify()
            return None

        if isinstance(outcome, RequiresConfirmation):
            self._auth_error = outcome.message
            self._notify()
            return outcome

        self._apply_identity(outcome)
        return outcome

    async def sign_out(self) -> bool:
        """
        Sign out. A failure is logged and leaves the user signed in.
        """
        if not await self._session_store.sign_out():
            logger.warning("Sign out failed; keeping current session")
            return False
        self._apply_identity(None)
        return True

    def _on_session_change(self, identity: Identity | None) -> None:
        # Before start() finishes, only remember the identity
        if self._auth_state is AuthState.AUTH_RESOLVING:
            self._identity = identity
            return
        self._apply_identity(identity)

    def _apply_identity(self, identity: Identity | None, force: bool = False) -> None:
        previous = self._identity
        self._identity = identity

        if identity is None:
            self._auth_state = AuthState.ANONYMOUS
            self._clear_history()
        else:
            changed = force or previous is None or previous.id != identity.id
            self._auth_state = AuthState.AUTHENTICATED
            self._show_auth_form = False
            self._auth_error = None
            if changed:
                self._clear_history()
                self._spawn(self.refresh_history(), name=f"load-history:{identity.id}")

        self._notify()

    # -------------------------------------------------------------------------
    # Background Tasks
    # -------------------------------------------------------------------------

    def _spawn(self, coro: Coroutine[Any, Any, Any], name: str) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Background task {task.get_name()} failed: {exc!r}")


# =============================================================================
# Wiring
# =============================================================================

async def build_controller(settings: Settings) -> ApplicationController:
    """
    Build a controller with real clients from settings.

    Raises:
        ConfigurationError: If SUPABASE_URL / SUPABASE_ANON_KEY are missing
    """
    supabase = await SupabaseClient.create(
        settings,
        storage=FileSessionStorage(settings.session_file_path),
    )
    session_store = SessionStore(
        supabase.auth,
        timeout=settings.PERSISTENCE_TIMEOUT_SECONDS,
    )

    return ApplicationController(
        weather_client=WeatherApiClient(
            settings.SKYCAST_API_URL,
            prefix=settings.API_PREFIX,
            timeout=settings.WEATHER_CLIENT_TIMEOUT_SECONDS,
        ),
        session_store=session_store,
        history_reader=HistoryReader(supabase),
        search_recorder=SearchRecorder(supabase, session_store),
    )
