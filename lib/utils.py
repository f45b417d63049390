# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used by the client-side layers (session store, recorder,
# history reader, weather client).
# =============================================================================

from typing import Any


# =============================================================================
# Base Error Class
# =============================================================================

class ApplicationError(Exception):
    """
    Base error class for client-side application errors.

    Errors carry a user-facing message plus a machine-readable code, so the
    controller can show the message as-is while logs keep the code.

    Attributes:
        code: Error code for categorization
        message: Human-readable error message
        suggestion: Actionable suggestion for fixing the error
        details: Additional context for debugging

    Example:
        class MyServiceError(ApplicationError):
            def __init__(self, message: str, **kwargs):
                super().__init__(message, code="MY_SERVICE_ERROR", **kwargs)
    """

    def __init__(
        self,
        message: str,
        code: str = "APPLICATION_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f"\n  Suggestion: {self.suggestion}"
        return result

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging."""
        return {
            "code": self.code,
            "message": self.message,
            "suggestion": self.suggestion,
            "details": self.details,
        }


# =============================================================================
# Text Utilities
# =============================================================================

def normalize_city(value: str | None) -> str:
    """
    Trim a raw city value.

    Returns an empty string for None so callers can test truthiness.

    Example:
        normalize_city("  London ")  # "London"
        normalize_city(None)         # ""
    """
    return (value or "").strip()
