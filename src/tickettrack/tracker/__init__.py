"""Tracker - Command surface, tick clock and state events for Presentation."""

from tickettrack.tracker.clock import TickClock
from tickettrack.tracker.controller import TrackerController, build_controller
from tickettrack.tracker.events import Event, EventManager, EventType, Subscriber
from tickettrack.tracker.models import DEFAULT_PROJECT_NAME, StateSnapshot

__all__ = [
    "DEFAULT_PROJECT_NAME",
    "Event",
    "EventManager",
    "EventType",
    "StateSnapshot",
    "Subscriber",
    "TickClock",
    "TrackerController",
    "build_controller",
]
