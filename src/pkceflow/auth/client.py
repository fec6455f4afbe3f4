"""HTTP client for the authorization server endpoints."""

import logging
from typing import Any
from urllib.parse import urlencode

import httpx

from pkceflow.auth.models import AuthMethod
from pkceflow.settings import Settings

logger = logging.getLogger(__name__)


class OAuthClient:
    """Talks to the authorization, token and revocation endpoints.

    Wraps a shared ``httpx.AsyncClient``. Methods raise ``httpx.HTTPError`` for
    transport failures and non-2xx responses; callers fold those into their
    own error kinds.
    """

    def __init__(self, settings: Settings, http: httpx.AsyncClient | None = None):
        """Initialize the client.

        Args:
            settings: Client configuration.
            http: Client to send requests with. A new one using the configured
                timeout is created when omitted.
        """
        self.settings = settings
        self.http = http or httpx.AsyncClient(timeout=settings.http_timeout)

    async def aclose(self) -> None:
        await self.http.aclose()

    def build_auth_url(self, state: str, code_challenge: str) -> str:
        """Build the authorization URL for a new attempt.

        Args:
            state: CSRF state round-tripped through the redirect.
            code_challenge: PKCE challenge derived from the pending verifier.

        Returns:
            Full authorization URL to redirect the browser to.
        """
        params = {
            "response_type": "code",
            "client_id": self.settings.client_id,
            "redirect_uri": self.settings.redirect_uri,
            "scope": self.settings.scope,
            "state": state,
            "code_challenge": code_challenge,
            "code_challenge_method": self.settings.code_challenge_method.value,
        }
        base = self.settings.endpoint_url(self.settings.authorization_endpoint)
        separator = "&" if "?" in base else "?"
        return f"{base}{separator}{urlencode(params)}"

    def _client_credentials(self, form: dict[str, str]) -> httpx.BasicAuth | None:
        """Attach client credentials per the configured authentication method.

        Mutates ``form`` for ``client_secret_post``; returns the basic auth to
        send for ``client_secret_basic``.
        """
        secret = self.settings.client_secret
        if self.settings.authentication_method == AuthMethod.CLIENT_SECRET_BASIC:
            return httpx.BasicAuth(
                self.settings.client_id,
                secret.get_secret_value() if secret else "",
            )

        form["client_id"] = self.settings.client_id
        if secret is not None:
            form["client_secret"] = secret.get_secret_value()
        return None

    async def _post_form(self, endpoint: str, form: dict[str, str]) -> httpx.Response:
        body = dict(form)
        auth = self._client_credentials(body)
        url = self.settings.endpoint_url(endpoint)

        kwargs: dict[str, Any] = {"data": body, "headers": {"Accept": "application/json"}}
        if auth is not None:
            kwargs["auth"] = auth

        response = await self.http.post(url, **kwargs)
        logger.debug("POST %s -> %d", url, response.status_code)
        response.raise_for_status()
        return response

    async def token_request(self, form: dict[str, str]) -> dict[str, Any]:
        """POST a grant to the token endpoint and return the decoded body.

        Raises:
            httpx.HTTPError: On transport failure or non-2xx status.
            ValueError: If the body is not a JSON object.
        """
        response = await self._post_form(self.settings.token_endpoint, form)
        data = response.json()
        if not isinstance(data, dict):
            raise ValueError("Token endpoint returned a non-object JSON body")
        return data

    async def revoke(self, token: str, token_type_hint: str = "access_token") -> None:
        """Revoke a token at the revocation endpoint (RFC 7009).

        Raises:
            httpx.HTTPError: On transport failure or non-2xx status.
        """
        await self._post_form(
            self.settings.revocation_endpoint,
            {"token": token, "token_type_hint": token_type_hint},
        )
