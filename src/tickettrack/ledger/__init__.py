"""Ticket Ledger - Tracked tickets, time accrual and the status state machine."""

from tickettrack.ledger.ledger import TicketLedger
from tickettrack.ledger.models import (
    TRANSITIONS,
    Ticket,
    TrackingEvent,
    TrackingStatus,
    format_duration,
    next_status,
)

__all__ = [
    "TRANSITIONS",
    "Ticket",
    "TicketLedger",
    "TrackingEvent",
    "TrackingStatus",
    "format_duration",
    "next_status",
]
