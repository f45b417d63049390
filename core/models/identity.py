# =============================================================================
# core/models/identity.py - Authentication Models
# =============================================================================
# Pydantic models for the signed-in user as seen by the client.
# =============================================================================

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

CONFIRMATION_MESSAGE = "Please check your email to confirm your account"


class Identity(BaseModel):
    """
    Authenticated user extracted from a Supabase session.

    Created and destroyed only by the auth service; the client just observes
    transitions.
    """
    id: str
    email: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_user(cls, user: Any) -> Optional["Identity"]:
        """
        Build an Identity from a Supabase `User` (or None).

        Works with SDK objects and plain dicts.
        """
        if user is None:
            return None
        if isinstance(user, dict):
            user_id, email = user.get("id"), user.get("email")
        else:
            user_id, email = getattr(user, "id", None), getattr(user, "email", None)
        if not user_id:
            return None
        return cls(id=str(user_id), email=email)

    @classmethod
    def from_session(cls, session: Any) -> Optional["Identity"]:
        """Identity of a Supabase `Session`, or None for no session."""
        if session is None:
            return None
        return cls.from_user(getattr(session, "user", None))


class RequiresConfirmation(BaseModel):
    """
    Sign-up accepted but no session issued yet.

    The user has to follow the confirmation email before signing in.
    """
    email: str
    message: str = CONFIRMATION_MESSAGE
