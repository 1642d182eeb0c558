"""Data models for the Tracker controller."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from tickettrack.asana import ErrorKind
    from tickettrack.ledger import Ticket

DEFAULT_PROJECT_NAME = "Tickets"


@dataclass
class StateSnapshot:
    """Everything Presentation needs to render, at one point in time.

    Attributes:
        authenticated: A session token is stored.
        loading: A refresh is in flight.
        showing_completed: The completed section is expanded.
        project_id: Selected project id ("" when unconfigured).
        project_name: Display name of the project.
        tickets: Active set, in display order.
        completed_tickets: Completed set.
        error: Kind of the last failed command, cleared by the next success.
    """

    authenticated: bool
    loading: bool
    showing_completed: bool
    project_id: str
    project_name: str
    tickets: list[Ticket] = field(default_factory=list)
    completed_tickets: list[Ticket] = field(default_factory=list)
    error: ErrorKind | None = None

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready form, as published to SSE subscribers."""
        return {
            "authenticated": self.authenticated,
            "loading": self.loading,
            "showing_completed": self.showing_completed,
            "project_id": self.project_id,
            "project_name": self.project_name,
            "tickets": [_ticket_dict(t) for t in self.tickets],
            "completed_tickets": [_ticket_dict(t) for t in self.completed_tickets],
            "error": self.error.value if self.error is not None else None,
        }


def _ticket_dict(ticket: Ticket) -> dict[str, Any]:
    return {
        "id": ticket.id,
        "name": ticket.name,
        "status": ticket.status.value,
        "time_spent": ticket.time_spent,
        "formatted_time": ticket.formatted_time,
    }
