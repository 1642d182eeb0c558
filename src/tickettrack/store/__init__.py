"""Session Store - Persistent key-value storage for session, project and tickets."""

from tickettrack.store.models import Setting, StoredState
from tickettrack.store.store import (
    PROJECT_ID_KEY,
    PROJECT_NAME_KEY,
    TICKETS_KEY,
    TOKEN_KEY,
    SessionStore,
)

__all__ = [
    "PROJECT_ID_KEY",
    "PROJECT_NAME_KEY",
    "TICKETS_KEY",
    "TOKEN_KEY",
    "SessionStore",
    "Setting",
    "StoredState",
]
