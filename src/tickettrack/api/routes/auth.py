"""Authentication endpoints."""

from fastapi import APIRouter, status

from tickettrack.api.dependencies import ControllerDep
from tickettrack.api.models import (
    APIResponse,
    AuthRequest,
    CommandAccepted,
    StateResponse,
    state_to_response,
)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "",
    response_model=APIResponse[CommandAccepted],
    status_code=status.HTTP_202_ACCEPTED,
)
def authenticate(
    controller: ControllerDep, body: AuthRequest | None = None
) -> APIResponse[CommandAccepted]:
    """Start authentication.

    With a token in the body, that cookie is validated. Without one, the
    configured token provider is asked for it. The outcome is published on
    the event stream.
    """
    token = body.token if body is not None else None
    controller.authenticate(token)
    return APIResponse(data=CommandAccepted(message="Authentication started"))


@router.delete("", response_model=APIResponse[StateResponse])
def clear_authentication(controller: ControllerDep) -> APIResponse[StateResponse]:
    """Forget the session cookie and all tracked tickets."""
    controller.clear_authentication()
    return APIResponse(data=state_to_response(controller.snapshot()))
