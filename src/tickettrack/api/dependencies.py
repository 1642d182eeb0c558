"""FastAPI dependencies for dependency injection."""

from __future__ import annotations

from collections.abc import Generator  # noqa: TC003
from typing import Annotated

from fastapi import Depends

from tickettrack.tracker import EventManager, TrackerController

# TrackerController for the app's lifespan (initialized on startup)
_controller: TrackerController | None = None


def init_controller(controller: TrackerController) -> TrackerController:
    """Install the TrackerController the routes operate on."""
    global _controller  # noqa: PLW0603
    _controller = controller
    return _controller


def close_controller() -> None:
    """Forget the TrackerController."""
    global _controller  # noqa: PLW0603
    _controller = None


def get_controller() -> Generator[TrackerController, None, None]:
    """Dependency that provides the TrackerController instance."""
    if _controller is None:
        raise RuntimeError("TrackerController not initialized. Call init_controller() first.")
    yield _controller


def get_event_manager(
    controller: Annotated[TrackerController, Depends(get_controller)],
) -> EventManager:
    """Dependency that provides the controller's EventManager."""
    return controller.events


# Type aliases for dependency injection
ControllerDep = Annotated[TrackerController, Depends(get_controller)]
EventManagerDep = Annotated[EventManager, Depends(get_event_manager)]
