# =============================================================================
# core/services/session_store.py - Authentication Session Store
# =============================================================================
# Wraps Supabase Auth for the client:
# - resolve the persisted session at startup
# - observe session transitions (sign in, sign out, token refresh)
# - sign in / sign up with local validation first, sign out
#
# Validation failures never reach the network. Service failures surface the
# service's own message where it has one. Every auth call is bounded by
# `timeout`; expiry is handled like any other service failure.
# =============================================================================

import asyncio
import logging
import re
from typing import Any, Callable

from core.models.identity import Identity, RequiresConfirmation
from lib.utils import ApplicationError

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6

SIGN_IN_FALLBACK = "Invalid email or password"
SIGN_UP_FALLBACK = "Failed to create account"

IdentityListener = Callable[[Identity | None], None]


class AuthValidationError(ApplicationError):
    """Credentials rejected locally, before any network call."""

    def __init__(self, message: str):
        super().__init__(message, code="AUTH_VALIDATION_ERROR")


class AuthServiceError(ApplicationError):
    """The auth service rejected the request or could not be reached."""

    def __init__(self, message: str, operation: str):
        super().__init__(
            message,
            code="AUTH_SERVICE_ERROR",
            details={"operation": operation},
        )


def validate_credentials(email: str, password: str) -> None:
    """
    Check credentials the same way for sign in and sign up.

    Raises:
        AuthValidationError: On the first rule that fails
    """
    if not email.strip() or not password.strip():
        raise AuthValidationError("Please enter both email and password")
    if not EMAIL_PATTERN.match(email):
        raise AuthValidationError("Please enter a valid email address")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise AuthValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )


def _service_message(exc: Exception, fallback: str) -> str:
    # AuthApiError and friends carry the server text in `.message`
    message = getattr(exc, "message", None)
    return message if isinstance(message, str) and message else fallback


class SessionStore:
    """
    Client-side view of the Supabase Auth session.

    Args:
        auth: The Supabase auth client (`SupabaseClient.auth`)
        timeout: Seconds allowed per auth call; expiry counts as a failure

    Example:
        store = SessionStore(supabase.auth)
        identity = await store.get_current_identity()
        unsubscribe = store.subscribe(lambda identity: print(identity))
        ...
        unsubscribe()
    """

    def __init__(self, auth: Any, timeout: float = 5.0):
        self._auth = auth
        self.timeout = timeout

    async def get_current_identity(self) -> Identity | None:
        """
        Resolve the current session, including one persisted by an
        earlier run.

        Raises:
            AuthServiceError: If the session cannot be read
        """
        try:
            session = await asyncio.wait_for(self._auth.get_session(), self.timeout)
        except Exception as e:
            logger.error(f"Error getting session: {e}")
            raise AuthServiceError(_service_message(e, "Could not read session"), "get_session")
        return Identity.from_session(session)

    def subscribe(self, on_change: IdentityListener) -> Callable[[], None]:
        """
        Register a listener for every session transition.

        Returns:
            A callable that removes the registration
        """

        def _callback(event: Any, session: Any) -> None:
            logger.debug(f"Auth state change: {event}")
            on_change(Identity.from_session(session))

        subscription = self._auth.on_auth_state_change(_callback)
        return subscription.unsubscribe

    async def sign_in(self, email: str, password: str) -> Identity:
        """
        Sign in with email and password.

        Raises:
            AuthValidationError: Invalid input (no network call made)
            AuthServiceError: Rejected by the service
        """
        validate_credentials(email, password)

        try:
            response = await asyncio.wait_for(
                self._auth.sign_in_with_password({"email": email.strip(), "password": password}),
                self.timeout,
            )
        except Exception as e:
            logger.info(f"Sign in rejected: {e}")
            raise AuthServiceError(_service_message(e, SIGN_IN_FALLBACK), "sign_in")

        identity = Identity.from_user(getattr(response, "user", None))
        if identity is None:
            raise AuthServiceError(SIGN_IN_FALLBACK, "sign_in")

        logger.info(f"Signed in as {identity.id}")
        return identity

    async def sign_up(self, email: str, password: str) -> Identity | RequiresConfirmation:
        """
        Create an account.

        Returns:
            The new Identity when the service opened a session right away,
            RequiresConfirmation when it is waiting for email confirmation

        Raises:
            AuthValidationError: Invalid input (no network call made)
            AuthServiceError: Rejected by the service
        """
        validate_credentials(email, password)

        try:
            response = await asyncio.wait_for(
                self._auth.sign_up({"email": email.strip(), "password": password}),
                self.timeout,
            )
        except Exception as e:
            logger.info(f"Sign up rejected: {e}")
            raise AuthServiceError(_service_message(e, SIGN_UP_FALLBACK), "sign_up")

        identity = Identity.from_user(getattr(response, "user", None))
        if identity is None:
            raise AuthServiceError(SIGN_UP_FALLBACK, "sign_up")

        if getattr(response, "session", None) is None:
            logger.info(f"Sign up for {identity.id} awaiting email confirmation")
            return RequiresConfirmation(email=email.strip())

        return identity

    async def sign_out(self) -> bool:
        """
        Sign out. Failures are logged only.

        Returns:
            True when the service confirmed the sign out
        """
        try:
            await asyncio.wait_for(self._auth.sign_out(), self.timeout)
        except Exception as e:
            logger.error(f"Error signing out: {e}")
            return False
        return True
