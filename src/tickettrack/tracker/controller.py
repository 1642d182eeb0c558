"""TrackerController - Command surface for Presentation and publisher of state snapshots."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TYPE_CHECKING, Any, TypeVar

from tickettrack.asana import (
    AsanaClient,
    AsanaError,
    AuthSession,
    BrowserPromptTokenProvider,
    ErrorKind,
    InvalidInputError,
    RemoteTicketSource,
    StaticTokenProvider,
    UnauthenticatedError,
    validate_project_id,
)
from tickettrack.config import TrackerConfig
from tickettrack.ledger import TicketLedger
from tickettrack.store import PROJECT_NAME_KEY, SessionStore
from tickettrack.tracker.clock import TickClock
from tickettrack.tracker.events import EventManager
from tickettrack.tracker.models import DEFAULT_PROJECT_NAME, StateSnapshot

if TYPE_CHECKING:
    from collections.abc import Callable

    from tickettrack.asana import Project, TokenProvider
    from tickettrack.ledger import TrackingStatus

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _done(value: T) -> Future[T]:
    future: Future[T] = Future()
    future.set_result(value)
    return future


class TrackerController:
    """Wires the session, ticket source and ledger together for Presentation.

    Commands are fire-and-forget: results are observed through the
    snapshots published on ``events``. Network-bound commands run on a
    single background worker and also return a Future for callers that
    want to wait. Ledger state is only ever touched through the ledger's
    own (locked) operations.

    Refreshes in flight are not cancelled by newer ones; a late response
    can overwrite a newer one.
    """

    def __init__(
        self,
        store: SessionStore,
        auth: AuthSession,
        source: RemoteTicketSource,
        ledger: TicketLedger,
        events: EventManager | None = None,
        config: TrackerConfig | None = None,
        owns_store: bool = False,
    ) -> None:
        """Initialize the controller. Nothing runs until start().

        Args:
            store: SessionStore for the project selection
            auth: AuthSession owning the session token
            source: RemoteTicketSource for fetching tickets
            ledger: TicketLedger holding tracked state
            events: EventManager to publish snapshots on
            config: Runtime configuration (defaults if None)
            owns_store: Close the store on stop(), for a store built by build_controller
        """
        self.store = store
        self.owns_store = owns_store
        self.auth = auth
        self.source = source
        self.ledger = ledger
        self.events = events if events is not None else EventManager()
        self.config = config if config is not None else TrackerConfig()

        self._lock = threading.Lock()
        self._pending = 0
        self._error: ErrorKind | None = None
        self._showing_completed = False
        self._project_id = store.load_project_id() or ""
        self._project_name = store.load_project_name() or DEFAULT_PROJECT_NAME
        self._tick_count = 0

        self.clock = TickClock(self.config.tick_interval, self._on_tick)
        self._executor: ThreadPoolExecutor | None = None

    # --- Lifecycle ---

    def start(self) -> None:
        """Load saved tickets, start the clock, and refresh if a session exists."""
        self.ledger.load()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="tickettrack-net")
        self.clock.start()
        logger.info("Tracker started (project=%s)", self._project_id or "<unset>")
        self._publish()
        if self.auth.is_authenticated:
            self.refresh()

    def stop(self) -> None:
        """Stop the clock, drain network work, checkpoint, and release connections."""
        self.clock.stop()
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
        self.ledger.save()
        self.source.client.close()
        if self.owns_store:
            self.store.close()
        logger.info("Tracker stopped")

    def _submit(self, fn: Callable[..., T], *args: Any) -> Future[T]:
        if self._executor is None:
            raise RuntimeError("TrackerController not started. Call start() first.")
        future = self._executor.submit(fn, *args)
        future.add_done_callback(self._log_failure)
        return future

    @staticmethod
    def _log_failure(future: Future[Any]) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.error("Background command failed", exc_info=exc)

    # --- State publishing ---

    def snapshot(self) -> StateSnapshot:
        """Current state, as Presentation renders it."""
        with self._lock:
            return StateSnapshot(
                authenticated=self.auth.is_authenticated,
                loading=self._pending > 0,
                showing_completed=self._showing_completed,
                project_id=self._project_id,
                project_name=self._project_name,
                tickets=self.ledger.tickets,
                completed_tickets=self.ledger.completed_tickets,
                error=self._error,
            )

    def _publish(self) -> None:
        self.events.emit_state(self.snapshot().to_dict())

    def _set_error(self, kind: ErrorKind | None) -> None:
        with self._lock:
            self._error = kind

    # --- Authentication ---

    def authenticate(self, token: str | None = None) -> Future[bool]:
        """Acquire and validate a session token, then refresh.

        Args:
            token: Cookie supplied by Presentation; None uses the configured provider.
        """
        provider = StaticTokenProvider(token) if token is not None else None
        return self._submit(self._authenticate, provider)

    def _authenticate(self, provider: TokenProvider | None) -> bool:
        if not self.auth.authenticate(provider):
            # A rejected replacement leaves a surviving session and its error as they were
            if not self.auth.is_authenticated:
                self._set_error(ErrorKind.UNAUTHENTICATED)
            self._publish()
            return False

        self._set_error(None)
        self.events.emit_authentication_succeeded()
        self._publish()
        if self._project_id:
            self._run_refresh(force_reset=False)
        return True

    def clear_authentication(self) -> None:
        """Forget the session token and every tracked ticket."""
        self.auth.clear()
        self.ledger.clear()
        self._set_error(None)
        logger.info("Authentication cleared")
        self._publish()

    # --- Refresh ---

    def refresh(self, force_reset: bool = False) -> Future[None]:
        """Fetch "In Progress" tickets and merge them into the ledger.

        Args:
            force_reset: Discard all local tracking state before merging.
        """
        if not self.auth.is_authenticated:
            self._set_error(ErrorKind.UNAUTHENTICATED)
            self._publish()
            return _done(None)

        with self._lock:
            self._pending += 1
        self._publish()
        return self._submit(self._refresh_and_settle, force_reset)

    def _run_refresh(self, force_reset: bool) -> None:
        with self._lock:
            self._pending += 1
        self._publish()
        self._refresh_and_settle(force_reset)

    def _refresh_and_settle(self, force_reset: bool) -> None:
        try:
            self._refresh(force_reset)
        finally:
            with self._lock:
                self._pending -= 1
            self._publish()

    def _refresh(self, force_reset: bool, allow_reauthenticate: bool = True) -> None:
        try:
            project_id = validate_project_id(self._project_id)
            self.auth.ensure_valid()
            project = self.source.get_project(project_id)
            tickets = self.source.fetch_tickets(project_id)
        except UnauthenticatedError as e:
            logger.warning("Refresh failed, session rejected: %s", e)
            self._set_error(ErrorKind.UNAUTHENTICATED)
            self._publish()
            if allow_reauthenticate and self._offer_reauthentication():
                self._refresh(force_reset, allow_reauthenticate=False)
            return
        except AsanaError as e:
            logger.warning("Refresh failed (%s): %s", e.kind.value, e)
            self._set_error(e.kind)
            self._publish()
            return

        if project.name and project.gid == self._project_id:
            with self._lock:
                self._project_name = project.name
            self.store.save_project_name(project.name)
        self.ledger.merge(tickets, force_reset=force_reset)
        self._set_error(None)
        self._publish()

    def _offer_reauthentication(self) -> bool:
        """One interactive re-authentication after expiry, if configured."""
        if not self.config.reauthenticate_on_expiry or self.auth.provider is None:
            return False
        logger.info("Offering re-authentication after session expiry")
        if not self.auth.authenticate():
            return False
        self._set_error(None)
        self.events.emit_authentication_succeeded()
        self._publish()
        return True

    # --- Tracking ---

    def toggle_tracking(self, ticket_id: str) -> TrackingStatus | None:
        """Start/pause a ticket, or reactivate a completed one."""
        status = self.ledger.toggle_tracking(ticket_id)
        if status is not None:
            self._publish()
        return status

    def complete(self, ticket_id: str) -> bool:
        """Move a ticket to the completed section."""
        completed = self.ledger.complete(ticket_id)
        if completed:
            self._publish()
        return completed

    def toggle_completed_visibility(self) -> bool:
        """Show or hide the completed section."""
        with self._lock:
            self._showing_completed = not self._showing_completed
            showing = self._showing_completed
        self._publish()
        return showing

    def _on_tick(self) -> None:
        accrued = self.ledger.tick()
        self._tick_count += 1
        checkpoint = self.config.checkpoint_ticks
        if checkpoint > 0 and self._tick_count % checkpoint == 0:
            self.ledger.save()
        if accrued:
            self._publish()

    # --- Settings ---

    def save_project_selection(self, project_id: str) -> Future[bool]:
        """Validate and store the project to track.

        A malformed id is rejected immediately. When authenticated the id is
        checked against Asana before saving. Switching to a different project
        discards all tracked state.
        """
        try:
            project_id = validate_project_id(project_id)
        except InvalidInputError as e:
            logger.warning("Rejected project id %r: %s", project_id, e)
            self._set_error(ErrorKind.INVALID_INPUT)
            self._publish()
            return _done(False)
        return self._submit(self._save_project, project_id)

    def _save_project(self, project_id: str) -> bool:
        name: str | None = None
        if self.auth.is_authenticated:
            try:
                name = self.source.get_project(project_id).name or None
            except AsanaError as e:
                logger.warning("Project %s rejected (%s): %s", project_id, e.kind.value, e)
                self._set_error(e.kind)
                self._publish()
                return False

        with self._lock:
            changed = project_id != self._project_id
            self._project_id = project_id
            if name:
                self._project_name = name
            elif changed:
                self._project_name = DEFAULT_PROJECT_NAME
            self._error = None
        self.store.save_project_id(project_id)
        if name:
            self.store.save_project_name(name)
        elif changed:
            self.store.clear(PROJECT_NAME_KEY)
        logger.info("Project selection saved: %s (changed=%s)", project_id, changed)

        if self.auth.is_authenticated:
            self._run_refresh(force_reset=changed)
        else:
            if changed:
                self.ledger.clear()
            self._publish()
        return True

    def list_projects(self) -> list[Project]:
        """Projects accessible with the current session.

        Raises:
            UnauthenticatedError: If not authenticated or the session was rejected
            AsanaError: On any other failure
        """
        if not self.auth.is_authenticated:
            raise UnauthenticatedError("Not authenticated")
        return self.source.list_projects()

    @property
    def project_id(self) -> str:
        return self._project_id


def build_controller(
    config: TrackerConfig,
    provider: TokenProvider | None = None,
    events: EventManager | None = None,
) -> TrackerController:
    """Construct every service from configuration.

    Args:
        config: Runtime configuration
        provider: Default token provider (interactive browser prompt if None)
        events: EventManager to publish on (a new one if None)
    """
    store = SessionStore(config.db_path)
    client = AsanaClient(base_url=config.base_url, timeout=config.request_timeout)
    auth = AuthSession(
        client,
        store,
        provider=provider if provider is not None else BrowserPromptTokenProvider(),
        min_token_length=config.min_token_length,
    )
    source = RemoteTicketSource(client, auth, section_match=config.section_match)
    ledger = TicketLedger(store, tick_seconds=config.tick_interval)
    return TrackerController(
        store, auth, source, ledger, events=events, config=config, owns_store=True
    )
