"""AsanaClient - HTTP transport for the Asana REST API using a session cookie."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from tickettrack.asana.exceptions import (
    NotFoundError,
    TransportError,
    UnauthenticatedError,
    UnexpectedStatusError,
)
from tickettrack.logging import mask_token, sanitize_for_log, truncate_output

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://app.asana.com/api/1.0"
AUTH_FAILURE_STATUSES = (401, 403)


class AsanaClient:
    """Thin wrapper around httpx for cookie-authenticated Asana requests.

    The session token is the raw browser ``Cookie`` header value and is
    passed per request, so one client can serve both the auth probe and
    ticket fetches.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Asana REST API base URL (overridable for testing)
            timeout: Transport timeout in seconds for every request
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client: httpx.Client | None = None

    @property
    def client(self) -> httpx.Client:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                headers={
                    "Accept": "application/json",
                    "X-Requested-With": "XMLHttpRequest",
                },
                timeout=self.timeout,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def get(
        self,
        path: str,
        token: str | None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Issue an authenticated GET and return the decoded JSON body.

        Args:
            path: API path, e.g. "/users/me"
            token: Session cookie
            params: Query parameters

        Returns:
            Decoded JSON object

        Raises:
            UnauthenticatedError: No token, a token that is not ASCII, 401/403, or an
                error body reporting 401
            NotFoundError: 404
            UnexpectedStatusError: Any other non-200 status
            TransportError: Network failure or a body that is not a JSON object
        """
        if not token:
            raise UnauthenticatedError("Not authenticated")

        url = f"{self.base_url}{path}"
        logger.debug("GET %s params=%s", url, params)
        try:
            response = self.client.get(url, params=params, headers={"Cookie": token})
        except httpx.HTTPError as e:
            logger.warning("Request to %s failed: %s", path, sanitize_for_log(str(e)))
            raise TransportError(f"Request to {path} failed: {e}") from e
        except UnicodeEncodeError as e:
            # Header values must be ASCII; such a token can never be accepted.
            logger.warning("Session token %s is not sendable as a header", mask_token(token))
            raise UnauthenticatedError("Session token contains non-ASCII characters") from e

        if response.status_code in AUTH_FAILURE_STATUSES:
            logger.info("Asana rejected the session for %s (%d)", path, response.status_code)
            raise UnauthenticatedError(
                f"Authentication failed or session expired ({response.status_code})"
            )
        if response.status_code == 404:
            raise NotFoundError(f"Not found: {path}")
        if response.status_code != 200:
            body = sanitize_for_log(truncate_output(response.text, 500))
            logger.warning("Unexpected status %d for %s: %s", response.status_code, path, body)
            raise UnexpectedStatusError(
                response.status_code,
                f"Request to {path} failed: {response.status_code}",
            )

        try:
            data = response.json()
        except ValueError as e:
            raise TransportError(f"Failed to parse JSON from {path}") from e
        if not isinstance(data, dict):
            raise TransportError(f"Unexpected response shape from {path}")

        errors = data.get("errors")
        if isinstance(errors, list) and errors:
            first = errors[0] if isinstance(errors[0], dict) else {}
            if first.get("status") in AUTH_FAILURE_STATUSES:
                raise UnauthenticatedError("Authentication failed or session expired")
            raise TransportError(f"Asana errors: {first.get('message', errors)}")

        return data
