# ============================================================================
# FireSink - Error Classes
#
# Purpose: Custom exception hierarchy for the package
# Inputs: Error messages and context
# Outputs: Structured exceptions
# Dependencies: None
# Usage: raise InvalidPathError("Expected valid path", path=path)
#
# Changelog:
#   2026-09-02: Initial error classes
#   2026-09-18: Added FirebaseResponseError and ClientClosedError for the REST client
# ============================================================================

from typing import Optional


class FireSinkError(Exception):
    """Base exception for all FireSink errors."""

    def __init__(self, message: str, details: Optional[str] = None):
        """
        Initialize error.

        Args:
            message: Error message
            details: Optional detailed error information
        """
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        """String representation."""
        if self.details:
            return f"{self.message}\nDetails: {self.details}"
        return self.message


class ConfigurationError(FireSinkError):
    """Raised when configuration is invalid or missing."""

    pass


class SetupError(FireSinkError):
    """Raised when the Firebase client cannot be set up (fatal at startup)."""

    pass


class TemplateError(FireSinkError):
    """Raised when a %{field} placeholder cannot be resolved against an event."""

    def __init__(self, message: str, field: str, details: Optional[str] = None):
        super().__init__(message, details=details)
        self.field = field


class DispatchError(FireSinkError):
    """Raised when an event cannot be turned into a valid write."""

    pass


class InvalidPathError(DispatchError):
    """Resolved path is not a valid relative URI reference."""

    def __init__(self, message: str, path: Optional[str] = None, details: Optional[str] = None):
        super().__init__(message, details=details)
        self.path = path


class InvalidOperationError(DispatchError):
    """Resolved verb is not one of put, patch, post, delete."""

    def __init__(self, message: str, verb: Optional[str] = None, details: Optional[str] = None):
        super().__init__(message, details=details)
        self.verb = verb


class TransportError(FireSinkError):
    """Raised when a write keeps failing at the transport level after all retries."""

    pass


class FirebaseResponseError(FireSinkError):
    """Raised when Firebase answers with an HTTP error status."""

    def __init__(self, message: str, status_code: int, details: Optional[str] = None):
        super().__init__(message, details=details)
        self.status_code = status_code


class ClientClosedError(FireSinkError):
    """Raised when writing through a client that has been shut down."""

    pass


class EventDecodeError(FireSinkError):
    """Raised when an input line cannot be decoded into an event."""

    pass
