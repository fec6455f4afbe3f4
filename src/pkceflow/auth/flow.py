"""Authorization Code + PKCE flow: initiate, verify callback, refresh, revoke."""

import logging

import httpx

from pkceflow.auth.client import OAuthClient
from pkceflow.auth.models import TokenSet
from pkceflow.auth.pkce import generate_pkce, generate_state, states_match
from pkceflow.auth.session import SessionState
from pkceflow.exceptions import (
    AuthorizationDeniedError,
    MissingVerifierError,
    NoActiveTokenError,
    NoRefreshTokenError,
    RefreshFailedError,
    RevocationError,
    StateMismatchError,
    TokenExchangeError,
)

logger = logging.getLogger(__name__)


class AuthorizationFlow:
    """Drives the token lifecycle for the single session."""

    def __init__(self, client: OAuthClient, session: SessionState):
        self.client = client
        self.session = session

    def start_authorization(self) -> str:
        """Start a new authorization attempt.

        Generates a PKCE pair and CSRF state, records them as the pending
        authorization (overwriting any earlier attempt) and returns the URL to
        redirect the browser to.
        """
        method = self.client.settings.code_challenge_method
        code_verifier, code_challenge = generate_pkce(method)
        state = generate_state()
        self.session.begin_authorization(state=state, code_verifier=code_verifier)

        auth_url = self.client.build_auth_url(state=state, code_challenge=code_challenge)
        logger.info("Redirecting to %s", auth_url)
        return auth_url

    async def handle_callback(
        self,
        code: str | None,
        state: str | None,
        error: str | None = None,
        error_description: str | None = None,
    ) -> TokenSet:
        """Validate the redirect back from the authorization server and exchange the code.

        Args:
            code: Authorization code from the callback query.
            state: CSRF state from the callback query.
            error: OAuth error code, when the server reports a failure instead.
            error_description: Optional human-readable error detail.

        Returns:
            The stored TokenSet.

        Raises:
            AuthorizationDeniedError: If the callback carries an OAuth error.
            MissingVerifierError: If no authorization attempt is pending.
            StateMismatchError: If the state does not match the pending attempt.
            TokenExchangeError: If the token endpoint call fails.
        """
        if error:
            logger.error("Authorization server returned error: %s - %s", error, error_description or "")
            raise AuthorizationDeniedError(f"OAuth error: {error}")

        pending = self.session.pending
        if pending is None:
            logger.error("Callback received with no pending authorization")
            raise MissingVerifierError("Code verifier is missing")

        if not states_match(pending.state, state):
            logger.error("State mismatch - possible CSRF attack")
            raise StateMismatchError("State does not match")

        if not code:
            logger.error("No authorization code in callback")
            raise TokenExchangeError("No authorization code in callback")

        form = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self.client.settings.redirect_uri,
            "code_verifier": pending.code_verifier,
        }

        async with self.session.lock:
            try:
                data = await self.client.token_request(form)
                tokens = TokenSet.from_response(data)
            except (httpx.HTTPError, ValueError) as e:
                # The code is single-use, a failed exchange is not retried
                logger.error("Token exchange failed: %s", e)
                raise TokenExchangeError("Failed to obtain access token") from e

            self.session.complete_authorization(tokens)

        logger.info("Access token obtained")
        logger.debug("Token response: %s", tokens.redacted())
        return tokens

    async def refresh_or_raise(self) -> TokenSet:
        """Exchange the stored refresh token for a new token set.

        Raises:
            NoRefreshTokenError: If no refresh token is stored.
            RefreshFailedError: If the token endpoint call fails.
        """
        async with self.session.lock:
            refresh_token = self.session.refresh_token
            if not refresh_token:
                raise NoRefreshTokenError("Refresh token is missing")

            logger.info("Refreshing access token")
            try:
                data = await self.client.token_request(
                    {"grant_type": "refresh_token", "refresh_token": refresh_token}
                )
                # Servers that rotate refresh tokens return a new one; keep ours otherwise
                tokens = TokenSet.from_response(data, previous_refresh_token=refresh_token)
            except (httpx.HTTPError, ValueError) as e:
                raise RefreshFailedError(f"Failed to refresh token: {e}") from e

            self.session.replace_tokens(tokens)

        logger.debug("Refreshed token response: %s", tokens.redacted())
        return tokens

    async def refresh(self) -> bool:
        """Refresh the access token, reporting success as a boolean.

        Failures are logged and leave the stored token set as it was.
        """
        try:
            await self.refresh_or_raise()
        except NoRefreshTokenError:
            logger.warning("Refresh token is missing")
            return False
        except RefreshFailedError as e:
            logger.warning("%s", e)
            return False
        return True

    async def revoke(self) -> None:
        """Revoke the current access token and forget the token set.

        Raises:
            NoActiveTokenError: If no access token is stored.
            RevocationError: If the revocation endpoint call fails.
        """
        async with self.session.lock:
            access_token = self.session.access_token
            if not access_token:
                raise NoActiveTokenError("Access token is missing")

            try:
                await self.client.revoke(access_token)
            except httpx.HTTPError as e:
                logger.error("Error revoking token: %s", e)
                raise RevocationError("Failed to revoke token") from e

            self.session.clear_tokens()

        logger.info("Token revoked successfully")
