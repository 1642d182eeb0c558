"""SessionStore - Load/save contract for session token, project selection and tickets."""

from __future__ import annotations

import json
import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from tickettrack.store.database import create_sqlite_engine
from tickettrack.store.models import Base, Setting, StoredState

logger = logging.getLogger(__name__)

TICKETS_KEY = "savedTickets"
TOKEN_KEY = "asanaCookie"
PROJECT_ID_KEY = "projectId"
PROJECT_NAME_KEY = "projectName"


class SessionStore:
    """Key-value persistence on SQLite.

    Nothing here validates values or raises to callers: a missing key, an
    unreadable value or a database error all read back as "unset". Writes
    are last-write-wins.
    """

    def __init__(self, db_path: str = "tickettrack.db") -> None:
        """Initialize the store, creating the database and table if needed.

        Args:
            db_path: Path to SQLite database file (":memory:" for tests)
        """
        self.db_path = db_path
        self._engine = create_sqlite_engine(db_path)
        self._sessions = sessionmaker(bind=self._engine, expire_on_commit=False)
        try:
            Base.metadata.create_all(self._engine)
        except (SQLAlchemyError, OSError) as e:
            logger.warning("Could not initialize session store at %s: %s", db_path, e)

    def close(self) -> None:
        """Dispose of the engine and its connections."""
        self._engine.dispose()

    # --- Raw key/value operations ---

    def get(self, key: str) -> str | None:
        """Get the raw value for a key, or None if unset or unreadable."""
        try:
            with self._sessions() as session:
                setting = session.get(Setting, key)
                return setting.value if setting is not None else None
        except (SQLAlchemyError, OSError) as e:
            logger.warning("Failed to read %s: %s", key, e)
            return None

    def set(self, key: str, value: str) -> None:
        """Set the raw value for a key, overwriting any previous value."""
        try:
            with self._sessions() as session:
                setting = session.get(Setting, key)
                if setting is None:
                    session.add(Setting(key=key, value=value))
                else:
                    setting.value = value
                session.commit()
        except (SQLAlchemyError, OSError) as e:
            logger.warning("Failed to write %s: %s", key, e)

    def clear(self, key: str) -> None:
        """Remove a key. Removing an unset key is a no-op."""
        try:
            with self._sessions() as session:
                setting = session.get(Setting, key)
                if setting is not None:
                    session.delete(setting)
                    session.commit()
        except (SQLAlchemyError, OSError) as e:
            logger.warning("Failed to clear %s: %s", key, e)

    # --- Whole-state operations ---

    def load(self) -> StoredState:
        """Load everything the store holds."""
        return StoredState(
            token=self.load_token(),
            project_id=self.load_project_id(),
            project_name=self.load_project_name(),
            tickets=self.load_tickets(),
        )

    def save(self, state: StoredState) -> None:
        """Save every field of ``state``; None fields clear their key."""
        for key, value in (
            (TOKEN_KEY, state.token),
            (PROJECT_ID_KEY, state.project_id),
            (PROJECT_NAME_KEY, state.project_name),
        ):
            if value:
                self.set(key, value)
            else:
                self.clear(key)
        self.save_tickets(state.tickets)

    # --- Session token ---

    def load_token(self) -> str | None:
        return self.get(TOKEN_KEY) or None

    def save_token(self, token: str) -> None:
        self.set(TOKEN_KEY, token)

    def clear_token(self) -> None:
        self.clear(TOKEN_KEY)

    # --- Project selection ---

    def load_project_id(self) -> str | None:
        return self.get(PROJECT_ID_KEY) or None

    def save_project_id(self, project_id: str) -> None:
        self.set(PROJECT_ID_KEY, project_id)

    def load_project_name(self) -> str | None:
        return self.get(PROJECT_NAME_KEY) or None

    def save_project_name(self, project_name: str) -> None:
        self.set(PROJECT_NAME_KEY, project_name)

    # --- Tickets ---

    def load_tickets(self) -> list[dict[str, Any]]:
        """Load the saved ticket records.

        Returns:
            List of record dicts. Empty if unset or the stored JSON is corrupt.
        """
        raw = self.get(TICKETS_KEY)
        if raw is None:
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("Saved tickets are not valid JSON, ignoring: %s", e)
            return []
        if not isinstance(data, list):
            logger.warning("Saved tickets are not a list, ignoring")
            return []
        return [record for record in data if isinstance(record, dict)]

    def save_tickets(self, records: list[dict[str, Any]]) -> None:
        """Save ticket records, replacing the previous snapshot."""
        self.set(TICKETS_KEY, json.dumps(records))
