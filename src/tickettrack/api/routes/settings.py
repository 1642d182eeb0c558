"""Settings endpoints: project selection and completed-section visibility."""

from fastapi import APIRouter, status

from tickettrack.api.dependencies import ControllerDep
from tickettrack.api.models import (
    APIResponse,
    CommandAccepted,
    ProjectSelectionRequest,
    StateResponse,
    state_to_response,
)

router = APIRouter(prefix="/settings", tags=["settings"])


@router.put(
    "/project",
    response_model=APIResponse[CommandAccepted],
    status_code=status.HTTP_202_ACCEPTED,
)
def save_project_selection(
    body: ProjectSelectionRequest, controller: ControllerDep
) -> APIResponse[CommandAccepted]:
    """Validate and save the project to track, then refresh."""
    controller.save_project_selection(body.project_id)
    return APIResponse(data=CommandAccepted(message="Project selection started"))


@router.post("/completed-visibility", response_model=APIResponse[StateResponse])
def toggle_completed_visibility(controller: ControllerDep) -> APIResponse[StateResponse]:
    """Show or hide the completed section."""
    controller.toggle_completed_visibility()
    return APIResponse(data=state_to_response(controller.snapshot()))
