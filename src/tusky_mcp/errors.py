"""Error taxonomy for the Tusky MCP server.

Every error carries a stable machine-readable ``kind`` and a human-readable
``message``. Operations raise these internally; the operation boundary turns
them into ``Err`` results (see ``tusky_mcp.results``).
"""

from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "validation_error"
    AUTHENTICATION_REQUIRED = "authentication_required"
    NOT_AUTHENTICATED = "not_authenticated"
    NOT_FOUND = "not_found"
    OPERATIONAL = "operational_error"
    AUTH = "auth_error"


class TuskyError(Exception):
    """Base class for all errors reported through the result envelope."""

    kind: str = ErrorKind.OPERATIONAL.value

    def __init__(self, message: str, kind: str | None = None):
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind


class ValidationError(TuskyError):
    """Malformed input, detected locally before any backend call."""

    kind = ErrorKind.VALIDATION.value


class AuthenticationRequired(TuskyError):
    """Raised by the authorization gate when no valid session exists."""

    kind = ErrorKind.AUTHENTICATION_REQUIRED.value


class NotFound(TuskyError):
    kind = ErrorKind.NOT_FOUND.value


class OperationalError(TuskyError):
    """Transport failure, backend failure or unexpected payload."""

    kind = ErrorKind.OPERATIONAL.value


class BackendError(OperationalError):
    """A failure reported by the backend itself.

    The backend's own error kind and message are kept unchanged so callers
    can branch on them (e.g. ``invalid_signature`` or ``nonce_expired``).
    """

    def __init__(self, message: str, kind: str | None = None, status_code: int | None = None):
        super().__init__(message, kind=kind)
        self.status_code = status_code
