"""Custom exceptions for the Asana client, auth session and ticket source."""

from __future__ import annotations

from enum import StrEnum


class ErrorKind(StrEnum):
    """What went wrong, as reported to Presentation."""

    UNAUTHENTICATED = "unauthenticated"
    NOT_FOUND = "not_found"
    TRANSPORT = "transport"
    INVALID_INPUT = "invalid_input"


class AsanaError(Exception):
    """Base exception for Asana errors."""

    kind: ErrorKind = ErrorKind.TRANSPORT


class UnauthenticatedError(AsanaError):
    """No session token, or the remote rejected it (401/403)."""

    kind = ErrorKind.UNAUTHENTICATED


class NotFoundError(AsanaError):
    """Project (or other resource) does not exist or is not accessible."""

    kind = ErrorKind.NOT_FOUND


class TransportError(AsanaError):
    """Network failure or unparseable response."""

    kind = ErrorKind.TRANSPORT


class UnexpectedStatusError(TransportError):
    """Remote answered with a status the caller did not expect."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code


class InvalidInputError(AsanaError):
    """Malformed user input, e.g. a non-numeric project id."""

    kind = ErrorKind.INVALID_INPUT
