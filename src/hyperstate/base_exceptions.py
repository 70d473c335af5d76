"""Root of the hyperstate exception hierarchy.

Each exception class names its own default error code, so raising sites only
pass a message and the structured context. ``log_fields()`` turns an exception
into keyword arguments for a structlog event.
"""

from typing import Any


class HyperstateException(Exception):
    """Base exception for all hyperstate errors.

    Attributes:
        message: Human-readable error message
        error_code: Error code for programmatic handling; the class default
            unless given explicitly
        context: Structured details, e.g. the state name or the request path
    """

    default_error_code = "HYPERSTATE_ERROR"

    def __init__(
        self, message: str, error_code: str | None = None, context: dict[str, Any] | None = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.context = dict(context or {})

    def log_fields(self) -> dict[str, Any]:
        """Keyword arguments describing this error in a log event."""
        return {"error_code": self.error_code, "error": self.message, **self.context}

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"
