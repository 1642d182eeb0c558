"""AuthSession - Lifecycle of the Asana session cookie."""

from __future__ import annotations

import logging
import threading
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from tickettrack.asana.exceptions import AsanaError, TransportError, UnauthenticatedError
from tickettrack.logging import mask_token

if TYPE_CHECKING:
    from tickettrack.asana.client import AsanaClient
    from tickettrack.asana.providers import TokenProvider
    from tickettrack.store import SessionStore

logger = logging.getLogger(__name__)

MIN_TOKEN_LENGTH = 20


class AuthState(StrEnum):
    """Auth session state."""

    UNAUTHENTICATED = "unauthenticated"
    UNVERIFIED = "unverified"
    AUTHENTICATED = "authenticated"


def is_identity_payload(data: dict[str, Any]) -> bool:
    """True for a /users/me body carrying a non-null user gid."""
    user = data.get("data")
    return isinstance(user, dict) and user.get("gid") is not None


class AuthSession:
    """Owns acquisition, validation and disposal of the session token.

    State machine:
        UNAUTHENTICATED -> (acquire token) -> UNVERIFIED -> (probe ok) -> AUTHENTICATED
        UNVERIFIED/AUTHENTICATED -> (probe 401/403 or bad identity) -> UNAUTHENTICATED

    The token is discarded on every transition to UNAUTHENTICATED. A token
    acquired interactively is only persisted once the probe accepted it.
    """

    def __init__(
        self,
        client: AsanaClient,
        store: SessionStore,
        provider: TokenProvider | None = None,
        min_token_length: int = MIN_TOKEN_LENGTH,
    ) -> None:
        """Initialize the session from the stored token, if any.

        Args:
            client: AsanaClient used for the identity probe
            store: SessionStore holding the token
            provider: Default token provider for authenticate()
            min_token_length: Tokens shorter than this are rejected without a request
        """
        self.client = client
        self.store = store
        self.provider = provider
        self.min_token_length = min_token_length
        self._lock = threading.RLock()
        self._token = store.load_token()
        self._state = AuthState.UNVERIFIED if self._token else AuthState.UNAUTHENTICATED

    @property
    def token(self) -> str | None:
        return self._token

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def is_authenticated(self) -> bool:
        """True iff a non-empty token is stored. Not a freshness guarantee."""
        return bool(self._token)

    def authenticate(self, provider: TokenProvider | None = None) -> bool:
        """Acquire a token from a provider, validate it, and persist it if valid.

        Args:
            provider: Token provider to use instead of the default one

        Returns:
            True if a valid token is now stored.
        """
        provider = provider or self.provider
        if provider is None:
            logger.warning("No token provider configured")
            return False

        token = (provider.acquire_token() or "").strip()
        if not token:
            logger.info("Authentication cancelled, no token provided")
            return False
        if len(token) < self.min_token_length:
            logger.warning(
                "Rejecting token %s: shorter than %d characters",
                mask_token(token),
                self.min_token_length,
            )
            return False
        if not token.isascii():
            logger.warning("Rejecting token %s: contains non-ASCII characters", mask_token(token))
            return False

        with self._lock:
            previous = self._state
            self._state = AuthState.UNVERIFIED
            if not self.validate(token):
                logger.warning("Session token %s failed validation, discarding", mask_token(token))
                self._state = previous if self._token else AuthState.UNAUTHENTICATED
                return False

            self._token = token
            self.store.save_token(token)
            self._state = AuthState.AUTHENTICATED
            logger.info("Authenticated with session token %s", mask_token(token))
            return True

    def validate(self, token: str | None) -> bool:
        """Probe GET /users/me with a token.

        Returns:
            True only for a 200 carrying a well-formed identity. Any error,
            including network failure, yields False.
        """
        if not token:
            return False
        try:
            data = self.client.get("/users/me", token)
        except AsanaError as e:
            logger.info("Token validation failed: %s", e)
            return False
        return is_identity_payload(data)

    def ensure_valid(self) -> None:
        """Probe the stored token before acting on it.

        Raises:
            UnauthenticatedError: No token, or the remote rejected it (token cleared)
            TransportError: The probe could not complete (token kept)
        """
        with self._lock:
            token = self._token
            if not token:
                self._state = AuthState.UNAUTHENTICATED
                raise UnauthenticatedError("Not authenticated")
            try:
                data = self.client.get("/users/me", token)
            except UnauthenticatedError:
                self.invalidate()
                raise
            except AsanaError as e:
                logger.warning("Could not verify session, keeping token: %s", e)
                if isinstance(e, TransportError):
                    raise
                raise TransportError(f"Session probe failed: {e}") from e

            if not is_identity_payload(data):
                self.invalidate()
                raise UnauthenticatedError("Session probe returned no identity")
            self._state = AuthState.AUTHENTICATED

    def invalidate(self) -> None:
        """Drop the token after the remote rejected it."""
        with self._lock:
            if self._token:
                logger.warning("Session expired or rejected, clearing token")
            self.clear()

    def clear(self) -> None:
        """Discard the stored token unconditionally."""
        with self._lock:
            self._token = None
            self._state = AuthState.UNAUTHENTICATED
            self.store.clear_token()
