"""RemoteTicketSource - Fetches "In Progress" tasks of an Asana project as Tickets."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from tickettrack.asana.exceptions import (
    InvalidInputError,
    NotFoundError,
    TransportError,
    UnauthenticatedError,
    UnexpectedStatusError,
)
from tickettrack.asana.models import Project
from tickettrack.ledger.models import Ticket

if TYPE_CHECKING:
    from tickettrack.asana.auth import AuthSession
    from tickettrack.asana.client import AsanaClient

logger = logging.getLogger(__name__)

DEFAULT_SECTION_MATCH = "in progress"
PAGE_LIMIT = 100
TASK_FIELDS = "name,gid,completed,memberships.section.name,memberships.project.gid"
MAX_PAGES = 50


def validate_project_id(project_id: str | None) -> str:
    """Normalize a user-supplied project id.

    Returns:
        The stripped id.

    Raises:
        InvalidInputError: If the id is empty or contains anything but digits.
    """
    value = (project_id or "").strip()
    if not value:
        raise InvalidInputError("No project ID configured")
    if not value.isdigit():
        raise InvalidInputError("Project ID should contain only numbers")
    return value


def is_in_section(task: dict[str, Any], project_id: str, section_match: str) -> bool:
    """Check whether a task sits in a matching section of *this* project.

    Memberships of other projects are ignored even if their section matches.
    """
    needle = section_match.lower()
    for membership in task.get("memberships") or []:
        if not isinstance(membership, dict):
            continue
        project = membership.get("project") or {}
        section = membership.get("section") or {}
        if project.get("gid") != project_id:
            continue
        section_name = section.get("name")
        if isinstance(section_name, str) and needle in section_name.lower():
            return True
    return False


def task_to_ticket(task: dict[str, Any], project_id: str, section_match: str) -> Ticket | None:
    """Map one task payload to a Ticket, or None if it should not be tracked."""
    gid = task.get("gid")
    name = task.get("name")
    completed = task.get("completed")
    if not isinstance(gid, str) or not isinstance(name, str) or not isinstance(completed, bool):
        return None
    if completed:
        return None
    if not is_in_section(task, project_id, section_match):
        logger.debug("Skipping task %s - not in '%s' section", gid, section_match)
        return None
    return Ticket(id=gid, name=name)


class RemoteTicketSource:
    """Queries Asana for the tasks a user should be tracking.

    Every request goes out with the AuthSession's current token. A 401/403
    from any request invalidates the session before the error propagates.
    """

    def __init__(
        self,
        client: AsanaClient,
        auth: AuthSession,
        section_match: str = DEFAULT_SECTION_MATCH,
    ) -> None:
        """Initialize the ticket source.

        Args:
            client: Shared AsanaClient
            auth: AuthSession providing the session token
            section_match: Case-insensitive substring a section name must contain
        """
        self.client = client
        self.auth = auth
        self.section_match = section_match

    def _get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        try:
            return self.client.get(path, self.auth.token, params=params)
        except UnauthenticatedError:
            self.auth.invalidate()
            raise

    def get_project(self, project_id: str) -> Project:
        """Look up a project, confirming it exists and is accessible.

        Args:
            project_id: Asana project gid (digits)

        Returns:
            The Project with its display name

        Raises:
            InvalidInputError: If the id is malformed
            UnauthenticatedError: If the session was rejected
            NotFoundError: For any other non-200 answer
            TransportError: On network failure
        """
        project_id = validate_project_id(project_id)
        try:
            data = self._get(f"/projects/{project_id}")
        except UnexpectedStatusError as e:
            raise NotFoundError(
                f"Project {project_id} not found (status {e.status_code})"
            ) from e

        project = data.get("data") or {}
        name = project.get("name") if isinstance(project, dict) else None
        logger.info("Project ID %s is valid", project_id)
        return Project(gid=project_id, name=name if isinstance(name, str) else "")

    def fetch_tickets(self, project_id: str) -> list[Ticket]:
        """Fetch open tasks in the project's "In Progress" section.

        Follows Asana's ``next_page`` offsets until the listing is exhausted.

        Args:
            project_id: Asana project gid (digits)

        Returns:
            Fresh Tickets (NOT_STARTED, zero time) in remote order

        Raises:
            InvalidInputError: If the id is malformed
            UnauthenticatedError: If the session was rejected
            NotFoundError: If the project doesn't exist
            TransportError: On network failure or malformed payload
        """
        project_id = validate_project_id(project_id)
        params: dict[str, Any] = {"opt_fields": TASK_FIELDS, "limit": PAGE_LIMIT}
        tasks: list[dict[str, Any]] = []

        for _ in range(MAX_PAGES):
            data = self._get(f"/projects/{project_id}/tasks", params=params)
            page = data.get("data")
            if not isinstance(page, list):
                raise TransportError("Failed to parse tasks data")
            tasks.extend(task for task in page if isinstance(task, dict))

            next_page = data.get("next_page") or {}
            offset = next_page.get("offset") if isinstance(next_page, dict) else None
            if not offset:
                break
            params = {**params, "offset": offset}
        else:
            logger.warning(
                "Stopped paging tasks for project %s after %d pages", project_id, MAX_PAGES
            )

        logger.info("Received %d tasks from Asana for project %s", len(tasks), project_id)

        tickets = []
        for task in tasks:
            ticket = task_to_ticket(task, project_id, self.section_match)
            if ticket is not None:
                tickets.append(ticket)

        logger.info("Filtered to %d '%s' tickets", len(tickets), self.section_match)
        return tickets

    def list_projects(self) -> list[Project]:
        """List projects accessible with the current session."""
        data = self._get("/projects", params={"opt_fields": "gid,name", "limit": PAGE_LIMIT})
        projects = []
        for item in data.get("data") or []:
            if isinstance(item, dict) and isinstance(item.get("gid"), str):
                projects.append(Project(gid=item["gid"], name=str(item.get("name") or "")))
        logger.info("Found %d accessible projects", len(projects))
        return projects
