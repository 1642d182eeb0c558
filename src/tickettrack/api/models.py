"""Pydantic models for the local REST API."""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    """Standard API response wrapper."""

    data: T | None = None
    error: str | None = None


# Ticket / state models


class TicketResponse(BaseModel):
    """Response model for a tracked ticket."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    status: str
    time_spent: float
    formatted_time: str


class StateResponse(BaseModel):
    """Response model for the tracker state snapshot."""

    model_config = ConfigDict(from_attributes=True)

    authenticated: bool
    loading: bool
    showing_completed: bool
    project_id: str
    project_name: str
    tickets: list[TicketResponse]
    completed_tickets: list[TicketResponse]
    error: str | None


def state_to_response(snapshot: Any) -> StateResponse:
    """Convert a StateSnapshot to StateResponse."""
    return StateResponse.model_validate(snapshot)


# Command models


class AuthRequest(BaseModel):
    """Request model for authenticating with a pasted session cookie."""

    token: str | None = Field(default=None, description="Asana Cookie header value")


class ProjectSelectionRequest(BaseModel):
    """Request model for selecting the project to track."""

    project_id: str = Field(..., min_length=1, max_length=32, pattern=r"^\s*\d+\s*$")


class CommandAccepted(BaseModel):
    """Response model for commands that complete in the background."""

    message: str


class ProjectResponse(BaseModel):
    """Response model for an accessible Asana project."""

    model_config = ConfigDict(from_attributes=True)

    gid: str
    name: str


def project_to_response(project: Any) -> ProjectResponse:
    """Convert a Project to ProjectResponse."""
    return ProjectResponse.model_validate(project)
