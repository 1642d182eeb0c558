"""TicketLedger - Authoritative record of tracked tickets and their tracking state."""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from typing import TYPE_CHECKING

from tickettrack.ledger.models import Ticket, TrackingEvent, TrackingStatus, next_status

if TYPE_CHECKING:
    from collections.abc import Iterable

    from tickettrack.store import SessionStore

logger = logging.getLogger(__name__)

# Event that toggling fires for each status of a ticket in the active set
_TOGGLE_EVENTS = {
    TrackingStatus.NOT_STARTED: TrackingEvent.START,
    TrackingStatus.ACTIVE: TrackingEvent.PAUSE,
    TrackingStatus.PAUSED: TrackingEvent.RESUME,
}


class TicketLedger:
    """Tracks the active and completed ticket sets.

    Every public operation holds one re-entrant lock for its whole duration,
    so a tick never interleaves with a merge, toggle or complete. Mutating
    operations (except tick) persist ``active + completed`` before returning.
    Operations never raise for unknown ticket ids; they are no-ops.

    Invariant: a ticket id is in at most one of the two sets.
    """

    def __init__(self, store: SessionStore | None = None, tick_seconds: float = 1.0) -> None:
        """Initialize an empty ledger.

        Args:
            store: SessionStore to persist snapshots to (None keeps state in memory only)
            tick_seconds: Time credited to each active ticket per tick
        """
        self.store = store
        self.tick_seconds = tick_seconds
        self._lock = threading.RLock()
        self._active: list[Ticket] = []
        self._completed: list[Ticket] = []

    # --- Read access ---

    @property
    def tickets(self) -> list[Ticket]:
        """Copies of the active set, in display order."""
        with self._lock:
            return [replace(t) for t in self._active]

    @property
    def completed_tickets(self) -> list[Ticket]:
        """Copies of the completed set, in completion order."""
        with self._lock:
            return [replace(t) for t in self._completed]

    def get(self, ticket_id: str) -> Ticket | None:
        """Copy of the ticket with this id from either set, or None."""
        with self._lock:
            ticket = self._find(self._active, ticket_id) or self._find(self._completed, ticket_id)
            return replace(ticket) if ticket is not None else None

    @staticmethod
    def _find(tickets: list[Ticket], ticket_id: str) -> Ticket | None:
        return next((t for t in tickets if t.id == ticket_id), None)

    @staticmethod
    def _index(tickets: list[Ticket], ticket_id: str) -> int | None:
        return next((i for i, t in enumerate(tickets) if t.id == ticket_id), None)

    # --- Persistence ---

    def load(self) -> None:
        """Replace in-memory state with the store's saved snapshot."""
        if self.store is None:
            return
        records = self.store.load_tickets()
        with self._lock:
            self._active = []
            self._completed = []
            seen: set[str] = set()
            for record in records:
                ticket = Ticket.from_dict(record)
                if ticket is None or ticket.id in seen:
                    continue
                seen.add(ticket.id)
                if ticket.status == TrackingStatus.COMPLETED:
                    self._completed.append(ticket)
                else:
                    self._active.append(ticket)
            logger.info(
                "Loaded %d active and %d completed tickets",
                len(self._active),
                len(self._completed),
            )

    def save(self) -> None:
        """Persist the combined snapshot (active + completed)."""
        if self.store is None:
            return
        with self._lock:
            records = [t.to_dict() for t in self._active + self._completed]
            self.store.save_tickets(records)

    # --- Mutations ---

    def merge(self, remote: Iterable[Ticket], force_reset: bool = False) -> None:
        """Merge a freshly fetched remote list into the tracked state.

        - A remote ticket already completed locally is dropped (completion is sticky).
        - A remote ticket already active carries its status and time forward.
        - A new remote ticket starts as NOT_STARTED with zero time.
        - Active tickets missing from ``remote`` are dropped.
        - With ``force_reset`` both sets are cleared first, so ``remote`` becomes
          the entire truth.

        Args:
            remote: Fetched tickets, in display order. Their status/time are ignored.
            force_reset: Discard all local tracking state before merging.
        """
        with self._lock:
            if force_reset:
                logger.info(
                    "Force reset: discarding %d active and %d completed tickets",
                    len(self._active),
                    len(self._completed),
                )
                self._active = []
                self._completed = []

            completed_ids = {t.id for t in self._completed}
            previous = {t.id: t for t in self._active}
            merged: list[Ticket] = []
            seen: set[str] = set()

            for incoming in remote:
                if incoming.id in completed_ids or incoming.id in seen:
                    continue
                seen.add(incoming.id)
                existing = previous.get(incoming.id)
                if existing is not None:
                    merged.append(
                        Ticket(
                            id=incoming.id,
                            name=incoming.name,
                            status=existing.status,
                            time_spent=existing.time_spent,
                        )
                    )
                else:
                    merged.append(Ticket(id=incoming.id, name=incoming.name))

            dropped = [tid for tid in previous if tid not in seen]
            if dropped:
                logger.info("Dropping %d ticket(s) no longer in progress: %s", len(dropped), dropped)

            self._active = merged
            logger.info("Merged remote tickets: %d active", len(self._active))
            self.save()

    def toggle_tracking(self, ticket_id: str) -> TrackingStatus | None:
        """Start, pause, resume or reactivate a ticket.

        A completed ticket is moved back to the end of the active set as ACTIVE.
        An active-set ticket flips ACTIVE <-> PAUSED; NOT_STARTED becomes ACTIVE.

        Returns:
            The ticket's new status, or None if the id is unknown.
        """
        with self._lock:
            index = self._index(self._completed, ticket_id)
            if index is not None:
                ticket = self._completed.pop(index)
                ticket.status = next_status(ticket.status, TrackingEvent.REACTIVATE)
                self._active.append(ticket)
                logger.info("Reactivated ticket %s (%s)", ticket_id, ticket.formatted_time)
                self.save()
                return ticket.status

            ticket = self._find(self._active, ticket_id)
            if ticket is None:
                return None

            event = _TOGGLE_EVENTS.get(ticket.status)
            if event is None:
                return ticket.status
            ticket.status = next_status(ticket.status, event)
            if ticket.status == TrackingStatus.ACTIVE:
                logger.info("Started tracking ticket %s", ticket_id)
            else:
                logger.info(
                    "Paused tracking ticket %s with time spent: %s",
                    ticket_id,
                    ticket.formatted_time,
                )
            self.save()
            return ticket.status

    def complete(self, ticket_id: str) -> bool:
        """Move a ticket from the active set to the completed set.

        Returns:
            True if the ticket was completed, False if it was not in the active set.
        """
        with self._lock:
            index = self._index(self._active, ticket_id)
            if index is None:
                return False
            ticket = self._active.pop(index)
            # A ticket that was never started can still be completed
            ticket.status = TrackingStatus.COMPLETED
            self._completed.append(ticket)
            logger.info("Completed ticket %s with time spent: %s", ticket_id, ticket.formatted_time)
            self.save()
            return True

    def tick(self) -> bool:
        """Credit one tick of time to every ACTIVE ticket in the active set.

        Returns:
            True if any ticket accrued time.
        """
        with self._lock:
            accrued = False
            for ticket in self._active:
                if ticket.is_tracking:
                    ticket.time_spent += self.tick_seconds
                    accrued = True
            return accrued

    def clear(self) -> None:
        """Drop every tracked ticket and persist the empty state."""
        with self._lock:
            self._active = []
            self._completed = []
            self.save()
