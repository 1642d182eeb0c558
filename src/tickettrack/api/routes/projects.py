"""Accessible projects endpoint."""

from fastapi import APIRouter

from tickettrack.api.dependencies import ControllerDep
from tickettrack.api.models import APIResponse, ProjectResponse, project_to_response

router = APIRouter(tags=["projects"])


@router.get("/projects", response_model=APIResponse[list[ProjectResponse]])
def list_projects(controller: ControllerDep) -> APIResponse[list[ProjectResponse]]:
    """List Asana projects accessible with the current session."""
    projects = controller.list_projects()
    return APIResponse(data=[project_to_response(p) for p in projects])
