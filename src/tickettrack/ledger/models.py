"""Data models for the Ticket Ledger."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class TrackingStatus(StrEnum):
    """Tracking status of a ticket. Values are the persisted labels."""

    NOT_STARTED = "Not Started"
    ACTIVE = "Active"
    PAUSED = "Paused"
    COMPLETED = "Completed"


class TrackingEvent(StrEnum):
    """User-driven events on a ticket."""

    START = "start"
    PAUSE = "pause"
    RESUME = "resume"
    COMPLETE = "complete"
    REACTIVATE = "reactivate"


# Legal transitions; every other (status, event) pair leaves the status unchanged.
TRANSITIONS: dict[tuple[TrackingStatus, TrackingEvent], TrackingStatus] = {
    (TrackingStatus.NOT_STARTED, TrackingEvent.START): TrackingStatus.ACTIVE,
    (TrackingStatus.ACTIVE, TrackingEvent.PAUSE): TrackingStatus.PAUSED,
    (TrackingStatus.PAUSED, TrackingEvent.RESUME): TrackingStatus.ACTIVE,
    (TrackingStatus.ACTIVE, TrackingEvent.COMPLETE): TrackingStatus.COMPLETED,
    (TrackingStatus.PAUSED, TrackingEvent.COMPLETE): TrackingStatus.COMPLETED,
    (TrackingStatus.COMPLETED, TrackingEvent.REACTIVATE): TrackingStatus.ACTIVE,
}


def next_status(status: TrackingStatus, event: TrackingEvent) -> TrackingStatus:
    """Apply an event to a status. Illegal events are ignored."""
    return TRANSITIONS.get((status, event), status)


def format_duration(seconds: float) -> str:
    """Format seconds as H:MM:SS, or MM:SS below one hour."""
    total = int(seconds)
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


@dataclass
class Ticket:
    """A unit of trackable work mirrored from an Asana task."""

    id: str  # Asana task gid
    name: str
    status: TrackingStatus = TrackingStatus.NOT_STARTED
    time_spent: float = 0.0

    @property
    def is_tracking(self) -> bool:
        return self.status == TrackingStatus.ACTIVE

    @property
    def formatted_time(self) -> str:
        return format_duration(self.time_spent)

    def to_dict(self) -> dict[str, Any]:
        """Persisted record shape."""
        return {
            "id": self.id,
            "name": self.name,
            "status": self.status.value,
            "timeSpent": self.time_spent,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Ticket | None:
        """Rebuild a ticket from a persisted record.

        Returns:
            The ticket, or None when ``id`` or ``name`` is missing. An unknown
            status label loads as NOT_STARTED; a negative, non-finite or
            unparseable time loads as 0.
        """
        ticket_id = data.get("id")
        name = data.get("name")
        if not isinstance(ticket_id, str) or not ticket_id or not isinstance(name, str):
            return None

        try:
            status = TrackingStatus(data.get("status"))
        except ValueError:
            status = TrackingStatus.NOT_STARTED

        try:
            time_spent = float(data.get("timeSpent", 0))
        except (TypeError, ValueError):
            time_spent = 0.0
        if not math.isfinite(time_spent) or time_spent < 0:
            time_spent = 0.0

        return cls(id=ticket_id, name=name, status=status, time_spent=time_spent)
