"""Shared test fixtures."""

import asyncio
import time
from dataclasses import dataclass, field
from urllib.parse import parse_qs

import httpx
import pytest

from pkceflow.auth.client import OAuthClient
from pkceflow.auth.flow import AuthorizationFlow
from pkceflow.auth.models import TokenSet
from pkceflow.auth.session import SessionState
from pkceflow.settings import Settings

TOKEN_URL = "https://auth.example.com/token"
REVOKE_URL = "https://auth.example.com/revoke"
RESOURCE_URL = "https://api.example.com/admin/office"


def form_of(request: httpx.Request) -> dict[str, str]:
    """Decode a form-encoded request body."""
    return {k: v[0] for k, v in parse_qs(request.content.decode()).items()}


@dataclass
class MockServer:
    """Scripted stand-in for the authorization and resource servers.

    Responses are queued per URL (query string ignored) and consumed in order.
    A queued exception is raised instead of answering.
    """

    responses: dict[str, list[httpx.Response | Exception]] = field(default_factory=dict)
    requests: list[httpx.Request] = field(default_factory=list)

    def queue(self, url: str, *responses: httpx.Response | Exception) -> None:
        self.responses.setdefault(url, []).extend(responses)

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        # Yield so concurrent callers interleave as they would over a network
        await asyncio.sleep(0)
        pending = self.responses.get(str(request.url).split("?")[0])
        if not pending:
            return httpx.Response(404, json={"error": "not_found"})
        response = pending.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def calls(self, url: str) -> list[httpx.Request]:
        return [r for r in self.requests if str(r.url).split("?")[0] == url]

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def settings() -> Settings:
    """Client configuration pointing at the mock servers."""
    return Settings(
        _env_file=None,
        server_url="https://auth.example.com",
        client_id="client-123",
        client_secret="secret-456",
        redirect_uri="http://localhost:12345/callback",
        scope="mfc/admin/office.read",
        resource_url=RESOURCE_URL,
    )


@pytest.fixture
def mock_server() -> MockServer:
    return MockServer()


@pytest.fixture
def session() -> SessionState:
    return SessionState()


@pytest.fixture
def oauth_client(settings, mock_server) -> OAuthClient:
    return OAuthClient(settings, http=mock_server.client())


@pytest.fixture
def flow(oauth_client, session) -> AuthorizationFlow:
    return AuthorizationFlow(oauth_client, session)


@pytest.fixture
def tokens() -> TokenSet:
    """A stored token set whose access token the resource server may reject."""
    return TokenSet(
        access_token="expired_access",
        refresh_token="valid_refresh",
        expires_at=int(time.time()) - 100,
        token_type="Bearer",
        raw={
            "access_token": "expired_access",
            "refresh_token": "valid_refresh",
            "token_type": "Bearer",
            "expires_in": 3600,
        },
    )
