"""Shared pytest fixtures and configuration."""

from unittest.mock import MagicMock

import pytest

from tickettrack.asana import AsanaClient
from tickettrack.store import SessionStore

VALID_TOKEN = "ticket=0123456789abcdef0123456789; sid=42"
PROJECT_ID = "1201234567890"


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: component interaction tests")


# Shared fixtures


@pytest.fixture
def store():
    """Create an in-memory SessionStore."""
    s = SessionStore(":memory:")
    yield s
    s.close()


@pytest.fixture
def mock_http() -> MagicMock:
    """Create a mock httpx client."""
    return MagicMock()


@pytest.fixture
def asana_client(mock_http: MagicMock) -> AsanaClient:
    """Create an AsanaClient whose HTTP client is mocked."""
    client = AsanaClient(base_url="https://asana.test/api/1.0")
    client._client = mock_http
    return client


def json_response(body: object, status_code: int = 200) -> MagicMock:
    """Create a mock httpx response."""
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = body
    response.text = str(body)
    return response


@pytest.fixture
def respond():
    """Factory for mock httpx responses."""
    return json_response


class FakeAsana:
    """Routes mocked httpx GETs to canned Asana payloads.

    Attributes:
        projects: Project gid -> name for every accessible project
        tasks: Project gid -> task payloads
        statuses: Path -> status code returned on every request
        fail_once: Path -> status code returned on the next request only
    """

    base_url = "https://asana.test/api/1.0"

    def __init__(self) -> None:
        self.projects: dict[str, str] = {PROJECT_ID: "Roadmap"}
        self.tasks: dict[str, list[dict]] = {PROJECT_ID: []}
        self.statuses: dict[str, int] = {}
        self.fail_once: dict[str, int] = {}
        self.requests: list[str] = []

    def add_task(
        self,
        gid: str,
        name: str,
        section: str = "In Progress",
        project: str = PROJECT_ID,
        completed: bool = False,
    ) -> None:
        self.tasks.setdefault(project, []).append(
            {
                "gid": gid,
                "name": name,
                "completed": completed,
                "memberships": [{"project": {"gid": project}, "section": {"name": section}}],
            }
        )

    def __call__(self, url: str, params=None, headers=None) -> MagicMock:
        path = url.removeprefix(self.base_url)
        self.requests.append(path)
        if path in self.fail_once:
            return json_response({}, status_code=self.fail_once.pop(path))
        if path in self.statuses:
            return json_response({}, status_code=self.statuses[path])
        if path == "/users/me":
            return json_response({"data": {"gid": "42", "name": "Ada"}})
        if path == "/projects":
            return json_response(
                {"data": [{"gid": gid, "name": name} for gid, name in self.projects.items()]}
            )

        parts = path.strip("/").split("/")
        if parts[0] == "projects" and parts[1] in self.projects:
            if len(parts) == 2:
                return json_response({"data": {"gid": parts[1], "name": self.projects[parts[1]]}})
            if parts[2:] == ["tasks"]:
                return json_response({"data": self.tasks.get(parts[1], []), "next_page": None})
        return json_response({"errors": [{"message": "Not found"}]}, status_code=404)


@pytest.fixture
def fake_asana(mock_http: MagicMock) -> FakeAsana:
    """Serve canned Asana responses through the mocked httpx client."""
    fake = FakeAsana()
    mock_http.get.side_effect = fake
    return fake
