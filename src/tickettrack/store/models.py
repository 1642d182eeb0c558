"""SQLAlchemy models for the Session Store."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime  # noqa: TC003 - used at runtime for SQLAlchemy
from typing import Any

from sqlalchemy import DateTime, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class Setting(Base):
    """A single persisted key/value pair."""

    __tablename__ = "settings"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    def __init__(self, key: str, value: str, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.key = key
        self.value = value

    def __repr__(self) -> str:
        return f"<Setting(key={self.key!r})>"


@dataclass
class StoredState:
    """Everything the store knows, loaded in one go.

    Attributes:
        token: Session cookie, or None when unauthenticated.
        project_id: Selected Asana project id, or None when unconfigured.
        project_name: Cached display name of the project.
        tickets: Ticket records as plain dicts ({id, name, status, timeSpent}).
    """

    token: str | None = None
    project_id: str | None = None
    project_name: str | None = None
    tickets: list[dict[str, Any]] = field(default_factory=list)
