"""SQLite engine setup for the Session Store."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from sqlalchemy import create_engine, event
from sqlalchemy.pool import StaticPool

if TYPE_CHECKING:
    from sqlalchemy import Engine

MEMORY = ":memory:"


def sqlite_url(db_path: str) -> str:
    """SQLite URL for a file path (``~`` expanded) or ":memory:"."""
    if db_path == MEMORY:
        return "sqlite:///:memory:"
    return f"sqlite:///{Path(db_path).expanduser()}"


def create_sqlite_engine(db_path: str) -> Engine:
    """Create an engine usable from the tick clock and network worker threads.

    File databases get their parent directory created and run in WAL mode.
    An in-memory database keeps a single shared connection, or every thread
    would see its own empty database.
    """
    options: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
    if db_path == MEMORY:
        options["poolclass"] = StaticPool
    else:
        Path(db_path).expanduser().parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(sqlite_url(db_path), **options)
    event.listen(engine, "connect", _use_wal)
    return engine


def _use_wal(dbapi_connection: Any, _connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.close()
