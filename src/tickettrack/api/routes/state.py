"""State endpoint."""

from fastapi import APIRouter

from tickettrack.api.dependencies import ControllerDep
from tickettrack.api.models import APIResponse, StateResponse, state_to_response

router = APIRouter(tags=["state"])


@router.get("/state", response_model=APIResponse[StateResponse])
def get_state(controller: ControllerDep) -> APIResponse[StateResponse]:
    """Get the current tracker state snapshot."""
    return APIResponse(data=state_to_response(controller.snapshot()))
