"""Exception hierarchy for the Cubby storage service.

File-domain failures share one client status; authentication failures
carry a kind that decides their status individually.
"""

from __future__ import annotations

from enum import Enum


class CubbyError(Exception):
    """Base exception for all Cubby errors."""


# ---------------------------------------------------------------------------
# File domain
# ---------------------------------------------------------------------------


class FileError(CubbyError):
    """Base for file, folder and share failures.

    ``message`` is what the client sees; ``detail`` is only logged.
    """

    message = "File error"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.message)
        self.detail = detail


class PathError(FileError):
    """Invalid, traversing, or missing path."""

    message = "Path Error"


class IoError(FileError):
    """Wrapped filesystem failure."""

    message = "Io Error"


class ContentError(FileError):
    """Malformed request content or share password mismatch."""

    message = "Content error"


class DatabaseError(FileError):
    """Share storage failure."""

    message = "Database error"


class ServerError(FileError):
    """Resource exhaustion, e.g. no free share token after all retries."""

    message = "Server error"


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------


class AuthErrorKind(Enum):
    MISSING_CREDENTIALS = "Missing credentials"
    WRONG_CREDENTIALS = "Wrong credentials"
    TOKEN_CREATION = "Token creation error"
    INVALID_TOKEN = "Invalid token"
    DATABASE_ERROR = "Database query error"


class AuthError(CubbyError):
    """Authentication or account failure."""

    def __init__(self, kind: AuthErrorKind, detail: str | None = None) -> None:
        super().__init__(detail or kind.value)
        self.kind = kind
        self.detail = detail

    @property
    def message(self) -> str:
        return self.kind.value


_AUTH_STATUS = {
    AuthErrorKind.WRONG_CREDENTIALS: 401,
    AuthErrorKind.MISSING_CREDENTIALS: 400,
    AuthErrorKind.INVALID_TOKEN: 400,
    AuthErrorKind.TOKEN_CREATION: 500,
    AuthErrorKind.DATABASE_ERROR: 500,
}


def error_status(error: CubbyError) -> int:
    """HTTP status for *error*."""
    if isinstance(error, AuthError):
        return _AUTH_STATUS[error.kind]
    if isinstance(error, FileError):
        return 400
    return 500


def error_body(error: CubbyError) -> dict[str, str]:
    """Structured client body for *error*; never includes ``detail``."""
    if isinstance(error, (AuthError, FileError)):
        return {"error": error.message}
    return {"error": "Server error"}
