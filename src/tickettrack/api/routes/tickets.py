"""Ticket endpoints: refresh, toggle tracking, complete."""

from fastapi import APIRouter, Query, status

from tickettrack.api.dependencies import ControllerDep
from tickettrack.api.exceptions import TicketNotFoundError
from tickettrack.api.models import (
    APIResponse,
    CommandAccepted,
    StateResponse,
    state_to_response,
)

router = APIRouter(tags=["tickets"])


@router.post(
    "/refresh",
    response_model=APIResponse[CommandAccepted],
    status_code=status.HTTP_202_ACCEPTED,
)
def refresh(
    controller: ControllerDep,
    force_reset: bool = Query(default=False, description="Discard all local tracking state"),
) -> APIResponse[CommandAccepted]:
    """Fetch "In Progress" tickets from Asana and merge them."""
    controller.refresh(force_reset=force_reset)
    return APIResponse(data=CommandAccepted(message="Refresh started"))


@router.post("/tickets/{ticket_id}/toggle", response_model=APIResponse[StateResponse])
def toggle_tracking(ticket_id: str, controller: ControllerDep) -> APIResponse[StateResponse]:
    """Start, pause or reactivate a ticket."""
    if controller.toggle_tracking(ticket_id) is None:
        raise TicketNotFoundError(ticket_id)
    return APIResponse(data=state_to_response(controller.snapshot()))


@router.post("/tickets/{ticket_id}/complete", response_model=APIResponse[StateResponse])
def complete(ticket_id: str, controller: ControllerDep) -> APIResponse[StateResponse]:
    """Move a ticket to the completed section."""
    if controller.ledger.get(ticket_id) is None:
        raise TicketNotFoundError(ticket_id)
    controller.complete(ticket_id)
    return APIResponse(data=state_to_response(controller.snapshot()))
