"""Unit tests for AuthSession."""

from unittest.mock import MagicMock

import httpx
import pytest

from tickettrack.asana import (
    AsanaClient,
    AuthSession,
    AuthState,
    StaticTokenProvider,
    TransportError,
    UnauthenticatedError,
)
from tickettrack.store import SessionStore

TOKEN = "ticket=0123456789abcdef0123456789"
IDENTITY = {"data": {"gid": "12345", "name": "Ada"}}


@pytest.fixture
def auth(asana_client: AsanaClient, store: SessionStore) -> AuthSession:
    """Create an AuthSession with no stored token."""
    return AuthSession(asana_client, store)


@pytest.mark.unit
class TestInitialState:
    """Tests for state derived from the store."""

    def test_no_stored_token(self, auth: AuthSession) -> None:
        assert auth.state == AuthState.UNAUTHENTICATED
        assert auth.is_authenticated is False

    def test_stored_token_is_unverified(
        self, asana_client: AsanaClient, store: SessionStore
    ) -> None:
        store.save_token(TOKEN)
        auth = AuthSession(asana_client, store)

        assert auth.state == AuthState.UNVERIFIED
        assert auth.is_authenticated is True
        assert auth.token == TOKEN


@pytest.mark.unit
class TestAuthenticate:
    """Tests for AuthSession.authenticate."""

    def test_valid_token_is_persisted(
        self, auth: AuthSession, store: SessionStore, mock_http: MagicMock, respond
    ) -> None:
        mock_http.get.return_value = respond(IDENTITY)

        assert auth.authenticate(StaticTokenProvider(f"  {TOKEN}\n")) is True
        assert auth.state == AuthState.AUTHENTICATED
        assert auth.token == TOKEN
        assert store.load_token() == TOKEN

    def test_invalid_token_not_persisted(
        self, auth: AuthSession, store: SessionStore, mock_http: MagicMock, respond
    ) -> None:
        mock_http.get.return_value = respond({}, status_code=401)

        assert auth.authenticate(StaticTokenProvider(TOKEN)) is False
        assert auth.state == AuthState.UNAUTHENTICATED
        assert auth.is_authenticated is False
        assert store.load_token() is None

    def test_identity_without_gid_rejected(
        self, auth: AuthSession, store: SessionStore, mock_http: MagicMock, respond
    ) -> None:
        mock_http.get.return_value = respond({"data": {"gid": None}})

        assert auth.authenticate(StaticTokenProvider(TOKEN)) is False
        assert store.load_token() is None

    def test_short_token_rejected_without_request(
        self, auth: AuthSession, mock_http: MagicMock
    ) -> None:
        assert auth.authenticate(StaticTokenProvider("too-short")) is False
        mock_http.get.assert_not_called()

    def test_non_ascii_token_rejected_without_request(
        self, auth: AuthSession, store: SessionStore, mock_http: MagicMock
    ) -> None:
        """A pasted cookie with a curly quote cannot go out as a header."""
        token = "ticket=0123456789abcdef“0123456789"

        assert auth.authenticate(StaticTokenProvider(token)) is False
        assert auth.state == AuthState.UNAUTHENTICATED
        assert store.load_token() is None
        mock_http.get.assert_not_called()

    def test_empty_or_cancelled(self, auth: AuthSession, mock_http: MagicMock) -> None:
        assert auth.authenticate(StaticTokenProvider(None)) is False
        assert auth.authenticate(StaticTokenProvider("   ")) is False
        mock_http.get.assert_not_called()

    def test_no_provider(self, auth: AuthSession) -> None:
        assert auth.authenticate() is False

    def test_uses_default_provider(
        self, asana_client: AsanaClient, store: SessionStore, mock_http: MagicMock, respond
    ) -> None:
        mock_http.get.return_value = respond(IDENTITY)
        auth = AuthSession(asana_client, store, provider=StaticTokenProvider(TOKEN))

        assert auth.authenticate() is True

    def test_failed_replacement_keeps_previous_token(
        self, asana_client: AsanaClient, store: SessionStore, mock_http: MagicMock, respond
    ) -> None:
        """A rejected new token leaves the stored one in place."""
        store.save_token(TOKEN)
        auth = AuthSession(asana_client, store)
        mock_http.get.return_value = respond({}, status_code=401)

        assert auth.authenticate(StaticTokenProvider("x" * 30)) is False
        assert auth.token == TOKEN
        assert store.load_token() == TOKEN

    def test_custom_min_length(
        self, asana_client: AsanaClient, store: SessionStore, mock_http: MagicMock, respond
    ) -> None:
        mock_http.get.return_value = respond(IDENTITY)
        auth = AuthSession(asana_client, store, min_token_length=5)

        assert auth.authenticate(StaticTokenProvider("sid=1")) is True


@pytest.mark.unit
class TestValidate:
    """Tests for AuthSession.validate."""

    def test_network_failure_is_invalid(self, auth: AuthSession, mock_http: MagicMock) -> None:
        mock_http.get.side_effect = httpx.ConnectError("offline")

        assert auth.validate(TOKEN) is False

    def test_unencodable_token_is_invalid(self, auth: AuthSession, mock_http: MagicMock) -> None:
        mock_http.get.side_effect = UnicodeEncodeError("ascii", "“", 0, 1, "ordinal not in range")

        assert auth.validate(TOKEN) is False

    def test_empty_token(self, auth: AuthSession, mock_http: MagicMock) -> None:
        assert auth.validate("") is False
        mock_http.get.assert_not_called()


@pytest.mark.unit
class TestEnsureValid:
    """Tests for AuthSession.ensure_valid."""

    @pytest.fixture
    def stored(self, asana_client: AsanaClient, store: SessionStore) -> AuthSession:
        store.save_token(TOKEN)
        return AuthSession(asana_client, store)

    def test_ok(self, stored: AuthSession, mock_http: MagicMock, respond) -> None:
        mock_http.get.return_value = respond(IDENTITY)

        stored.ensure_valid()

        assert stored.state == AuthState.AUTHENTICATED

    def test_no_token(self, auth: AuthSession, mock_http: MagicMock) -> None:
        with pytest.raises(UnauthenticatedError):
            auth.ensure_valid()
        mock_http.get.assert_not_called()

    def test_rejected_clears_token(
        self, stored: AuthSession, store: SessionStore, mock_http: MagicMock, respond
    ) -> None:
        mock_http.get.return_value = respond({}, status_code=401)

        with pytest.raises(UnauthenticatedError):
            stored.ensure_valid()

        assert stored.is_authenticated is False
        assert stored.state == AuthState.UNAUTHENTICATED
        assert store.load_token() is None

    def test_missing_identity_clears_token(
        self, stored: AuthSession, store: SessionStore, mock_http: MagicMock, respond
    ) -> None:
        mock_http.get.return_value = respond({"data": {}})

        with pytest.raises(UnauthenticatedError):
            stored.ensure_valid()

        assert store.load_token() is None

    def test_network_failure_keeps_token(
        self, stored: AuthSession, store: SessionStore, mock_http: MagicMock
    ) -> None:
        mock_http.get.side_effect = httpx.ReadTimeout("timed out")

        with pytest.raises(TransportError):
            stored.ensure_valid()

        assert stored.is_authenticated is True
        assert store.load_token() == TOKEN

    def test_server_error_keeps_token(
        self, stored: AuthSession, store: SessionStore, mock_http: MagicMock, respond
    ) -> None:
        mock_http.get.return_value = respond({}, status_code=404)

        with pytest.raises(TransportError):
            stored.ensure_valid()

        assert store.load_token() == TOKEN


@pytest.mark.unit
def test_clear(asana_client: AsanaClient, store: SessionStore) -> None:
    store.save_token(TOKEN)
    auth = AuthSession(asana_client, store)

    auth.clear()

    assert auth.token is None
    assert auth.state == AuthState.UNAUTHENTICATED
    assert store.load_token() is None
