"""
Custom exceptions for the message search domain.

These exceptions represent domain-level errors and are independent
of whatever layer (UI adapter, API, worker) calls the engine.
"""

from typing import Any, Optional


class MessageSearchException(Exception):
    """Base exception for all message search errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationException(MessageSearchException):
    """Raised when input validation fails."""

    def __init__(self, field: str, value: Any, reason: str):
        message = f"Validation failed for {field}: {reason}"
        super().__init__(
            message=message,
            details={"field": field, "value": str(value), "reason": reason},
        )


class IndexNotFoundException(MessageSearchException):
    """Raised when a search targets a session that was never indexed."""

    def __init__(self, session_id: str):
        message = f"No search index found for session {session_id}"
        super().__init__(message=message, details={"session_id": session_id})


class ProcessingException(MessageSearchException):
    """Raised when normalization, indexing or matching fails unexpectedly."""

    def __init__(self, operation: str, reason: Optional[str] = None):
        message = f"Message search {operation} failed"
        if reason:
            message += f": {reason}"
        super().__init__(
            message=message, details={"operation": operation, "reason": reason}
        )
