"""Asana - Session auth and "In Progress" ticket source for the Asana REST API."""

from tickettrack.asana.auth import MIN_TOKEN_LENGTH, AuthSession, AuthState
from tickettrack.asana.client import DEFAULT_BASE_URL, AsanaClient
from tickettrack.asana.exceptions import (
    AsanaError,
    ErrorKind,
    InvalidInputError,
    NotFoundError,
    TransportError,
    UnauthenticatedError,
    UnexpectedStatusError,
)
from tickettrack.asana.models import Project
from tickettrack.asana.providers import (
    BrowserPromptTokenProvider,
    StaticTokenProvider,
    TokenProvider,
)
from tickettrack.asana.source import RemoteTicketSource, validate_project_id

__all__ = [
    "DEFAULT_BASE_URL",
    "MIN_TOKEN_LENGTH",
    "AsanaClient",
    "AsanaError",
    "AuthSession",
    "AuthState",
    "BrowserPromptTokenProvider",
    "ErrorKind",
    "InvalidInputError",
    "NotFoundError",
    "Project",
    "RemoteTicketSource",
    "StaticTokenProvider",
    "TokenProvider",
    "TransportError",
    "UnauthenticatedError",
    "UnexpectedStatusError",
    "validate_project_id",
]
