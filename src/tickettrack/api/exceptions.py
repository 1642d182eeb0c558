"""Exceptions raised by API routes."""


class TicketNotFoundError(Exception):
    """No tracked ticket with the given id."""
