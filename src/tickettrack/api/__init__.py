"""Local REST API for tickettrack."""

from tickettrack.api.app import create_app
from tickettrack.api.models import (
    APIResponse,
    AuthRequest,
    ProjectSelectionRequest,
    StateResponse,
    TicketResponse,
)

__all__ = [
    "APIResponse",
    "AuthRequest",
    "ProjectSelectionRequest",
    "StateResponse",
    "TicketResponse",
    "create_app",
]
