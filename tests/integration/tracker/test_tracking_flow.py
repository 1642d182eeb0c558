"""Integration tests for a full tracking session through the controller."""

import threading
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from tickettrack.asana import StaticTokenProvider
from tickettrack.config import TrackerConfig
from tickettrack.ledger import TrackingStatus
from tickettrack.tracker import Event, EventManager, TrackerController, build_controller

TOKEN = "ticket=0123456789abcdef0123456789"
PROJECT_ID = "1201234567890"


@pytest.fixture
def config(tmp_path: Path) -> TrackerConfig:
    return TrackerConfig(
        db_path=str(tmp_path / "tickettrack.db"),
        base_url="https://asana.test/api/1.0",
        tick_interval=0.01,
        checkpoint_ticks=5,
    )


def _build(config: TrackerConfig, mock_http: MagicMock, events=None) -> TrackerController:
    controller = build_controller(config, provider=StaticTokenProvider(TOKEN), events=events)
    controller.source.client._client = mock_http
    return controller


def _drain(controller: TrackerController) -> None:
    controller._submit(lambda: None).result(timeout=5)


@pytest.mark.integration
class TestTrackingSession:
    """End-to-end tracking with the real clock and a file database."""

    def test_session_survives_restart(
        self, config: TrackerConfig, mock_http: MagicMock, fake_asana
    ) -> None:
        fake_asana.add_task("1", "Build login")
        fake_asana.add_task("2", "Write docs")

        accrued = threading.Event()

        def on_event(event: Event) -> None:
            tickets = event.data.get("tickets") or []
            if any(t["time_spent"] >= 0.05 for t in tickets):
                accrued.set()

        events = EventManager()
        events.add_listener(on_event)
        controller = _build(config, mock_http, events)
        controller.start()
        try:
            assert controller.save_project_selection(PROJECT_ID).result(timeout=5) is True
            assert controller.authenticate(TOKEN).result(timeout=5) is True
            assert [t.id for t in controller.snapshot().tickets] == ["1", "2"]

            controller.toggle_tracking("1")
            assert accrued.wait(5.0)
            controller.toggle_tracking("1")
            controller.complete("2")
        finally:
            controller.stop()

        time_spent = controller.ledger.get("1").time_spent
        assert time_spent >= 0.05

        restarted = _build(config, mock_http)
        restarted.start()
        try:
            _drain(restarted)
            snapshot = restarted.snapshot()
            assert snapshot.authenticated is True
            assert snapshot.project_name == "Roadmap"
            assert [t.id for t in snapshot.tickets] == ["1"]
            assert snapshot.tickets[0].status == TrackingStatus.PAUSED
            assert snapshot.tickets[0].time_spent == time_spent
            assert [t.id for t in snapshot.completed_tickets] == ["2"]
        finally:
            restarted.stop()

    def test_ticket_leaving_section_is_pruned(
        self, config: TrackerConfig, mock_http: MagicMock, fake_asana
    ) -> None:
        fake_asana.add_task("1", "Build login")
        controller = _build(config, mock_http)
        controller.start()
        try:
            controller.save_project_selection(PROJECT_ID).result(timeout=5)
            controller.authenticate(TOKEN).result(timeout=5)
            controller.toggle_tracking("1")

            fake_asana.tasks[PROJECT_ID][0]["memberships"][0]["section"]["name"] = "Review"
            controller.refresh().result(timeout=5)

            assert controller.snapshot().tickets == []
        finally:
            controller.stop()

    def test_expired_session_during_tracking(
        self, config: TrackerConfig, mock_http: MagicMock, fake_asana
    ) -> None:
        """Expiry stops refreshes but tracking keeps accruing locally."""
        fake_asana.add_task("1", "Build login")
        controller = _build(config, mock_http)
        controller.start()
        try:
            controller.save_project_selection(PROJECT_ID).result(timeout=5)
            controller.authenticate(TOKEN).result(timeout=5)
            controller.toggle_tracking("1")
            fake_asana.statuses["/users/me"] = 401

            controller.refresh().result(timeout=5)
            before = controller.ledger.get("1").time_spent
            controller._on_tick()

            snapshot = controller.snapshot()
            assert snapshot.authenticated is False
            assert snapshot.error == "unauthenticated"
            assert controller.ledger.get("1").time_spent > before
        finally:
            controller.stop()
