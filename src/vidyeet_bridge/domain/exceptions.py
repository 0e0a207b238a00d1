"""Domain exceptions for the CLI bridge."""

from enum import Enum
from typing import Any, Dict, Optional


class DomainException(Exception):
    """Base exception for all domain errors."""
    pass


class ConfigurationError(DomainException):
    """Raised when configuration is invalid."""
    pass


class ErrorKind(str, Enum):
    """Closed set of failure kinds a bridge call can resolve with."""

    PROCESS_NOT_FOUND = "process-not-found"
    NON_ZERO_EXIT = "non-zero-exit"
    MALFORMED_OUTPUT = "malformed-output"
    TIMEOUT = "timeout"
    NOT_AUTHENTICATED = "not-authenticated"
    UNKNOWN = "unknown"


class BridgeError(DomainException):
    """Raised when a bridge call does not produce a response.

    Every subclass pins ``kind``; ``details`` holds whatever raw diagnostic
    was available (exit code, stderr/stdout tails, CLI hint).
    """

    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"kind": self.kind.value, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value!r}, message={self.message!r})"


class ProcessNotFoundError(BridgeError):
    """Raised when the CLI executable is missing or cannot be spawned."""

    kind = ErrorKind.PROCESS_NOT_FOUND


class NonZeroExitError(BridgeError):
    """Raised when the CLI reports a failure."""

    kind = ErrorKind.NON_ZERO_EXIT


class MalformedOutputError(BridgeError):
    """Raised when the CLI output violates the line protocol."""

    kind = ErrorKind.MALFORMED_OUTPUT


class BridgeTimeoutError(BridgeError):
    """Raised when the CLI was killed for running too long or on request."""

    kind = ErrorKind.TIMEOUT

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        cancelled: bool = False
    ):
        super().__init__(message, details)
        self.cancelled = cancelled


class NotAuthenticatedError(BridgeError):
    """Raised when the CLI has no valid credentials."""

    kind = ErrorKind.NOT_AUTHENTICATED


class UnknownBridgeError(BridgeError):
    """Raised for anything that no other rule classifies."""

    kind = ErrorKind.UNKNOWN

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details or {"diagnostic": message})
