"""FastAPI application setup."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tickettrack import get_version
from tickettrack.api.dependencies import close_controller, init_controller
from tickettrack.api.exceptions import TicketNotFoundError
from tickettrack.api.models import APIResponse
from tickettrack.api.routes import auth, events, projects, settings, state, tickets
from tickettrack.asana import (
    AsanaError,
    InvalidInputError,
    NotFoundError,
    UnauthenticatedError,
)
from tickettrack.config import TrackerConfig
from tickettrack.tracker import build_controller

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Callable

    from tickettrack.tracker import TrackerController


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    config: TrackerConfig = app.state.config
    factory: Callable[[TrackerConfig], TrackerController] = app.state.controller_factory

    # Startup
    controller = factory(config)
    init_controller(controller)
    controller.start()

    yield
    # Shutdown
    controller.stop()
    close_controller()


ERROR_RESPONSES: list[tuple[type[Exception], int, str | None]] = [
    (TicketNotFoundError, status.HTTP_404_NOT_FOUND, "Ticket not found"),
    (UnauthenticatedError, status.HTTP_401_UNAUTHORIZED, "Not authenticated"),
    (InvalidInputError, 422, None),
    (NotFoundError, status.HTTP_404_NOT_FOUND, "Project not found"),
    (AsanaError, status.HTTP_502_BAD_GATEWAY, "Asana request failed"),
]
"""Domain errors mapped to (status, message); None reuses the error's text."""

ROUTERS = (state, auth, tickets, settings, projects, events)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=APIResponse[None](data=None, error=message).model_dump(),
    )


def _register_error_handlers(app: FastAPI) -> None:
    for exc_type, status_code, message in ERROR_RESPONSES:

        async def handler(
            _request: Request, exc: Exception, code: int = status_code, text: str | None = message
        ) -> JSONResponse:
            return _error(code, text if text is not None else str(exc))

        app.add_exception_handler(exc_type, handler)


def create_app(
    config: TrackerConfig | None = None,
    controller_factory: Callable[[TrackerConfig], TrackerController] | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Runtime configuration (defaults if None)
        controller_factory: Builds the controller on startup (build_controller if None)
    """
    app = FastAPI(
        title="tickettrack API",
        description="Local command surface for the tickettrack time tracker",
        version=get_version(),
        lifespan=lifespan,
    )
    app.state.config = config if config is not None else TrackerConfig()
    app.state.controller_factory = controller_factory or build_controller

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _register_error_handlers(app)
    for module in ROUTERS:
        app.include_router(module.router, prefix="/api/v1")

    return app
