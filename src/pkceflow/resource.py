"""Protected resource access with a single refresh-and-retry cycle."""

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

import httpx

from pkceflow.auth.flow import AuthorizationFlow
from pkceflow.exceptions import (
    AuthError,
    InvalidTransitionError,
    RefreshFailedError,
    ResourceFetchError,
    UnauthenticatedError,
)

logger = logging.getLogger(__name__)


class FetchState(StrEnum):
    """States of a single protected resource fetch."""

    INITIAL = "initial"
    AWAITING_REFRESH = "awaiting_refresh"
    RETRIED = "retried"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


TRANSITIONS: dict[FetchState, frozenset[FetchState]] = {
    FetchState.INITIAL: frozenset(
        {FetchState.SUCCEEDED, FetchState.AWAITING_REFRESH, FetchState.FAILED}
    ),
    FetchState.AWAITING_REFRESH: frozenset({FetchState.RETRIED, FetchState.FAILED}),
    FetchState.RETRIED: frozenset({FetchState.SUCCEEDED, FetchState.FAILED}),
    FetchState.SUCCEEDED: frozenset(),
    FetchState.FAILED: frozenset(),
}

TERMINAL = frozenset({FetchState.SUCCEEDED, FetchState.FAILED})


@dataclass
class ResourceFetch:
    """One run of the fetch state machine.

    Only ``INITIAL`` may move to ``AWAITING_REFRESH``, so a run performs at
    most one refresh and at most two resource requests.
    """

    state: FetchState = FetchState.INITIAL
    attempts: int = 0
    refreshes: int = 0
    result: Any = None
    error: AuthError | None = None

    @property
    def done(self) -> bool:
        return self.state in TERMINAL

    def _advance(self, target: FetchState) -> None:
        if target not in TRANSITIONS[self.state]:
            raise InvalidTransitionError(f"Cannot move from {self.state} to {target}")
        self.state = target

    def fail(self, error: AuthError) -> None:
        self._advance(FetchState.FAILED)
        self.error = error

    def on_response(self, status_code: int, body: Any = None) -> None:
        """Apply the outcome of a resource request."""
        if self.state not in (FetchState.INITIAL, FetchState.RETRIED):
            raise InvalidTransitionError(f"No request expected in state {self.state}")
        self.attempts += 1

        if 200 <= status_code < 300:
            self._advance(FetchState.SUCCEEDED)
            self.result = body
        elif status_code == 401 and self.state == FetchState.INITIAL:
            self._advance(FetchState.AWAITING_REFRESH)
        else:
            self.fail(ResourceFetchError(f"Failed to fetch resource: HTTP {status_code}"))

    def on_refresh(self, ok: bool) -> None:
        """Apply the outcome of the token refresh."""
        if self.state != FetchState.AWAITING_REFRESH:
            raise InvalidTransitionError(f"No refresh expected in state {self.state}")
        self.refreshes += 1

        if ok:
            self._advance(FetchState.RETRIED)
        else:
            self.fail(RefreshFailedError("Token expired and refresh failed"))


class ResourceAccessor:
    """Calls the protected resource with the session's bearer token."""

    def __init__(self, flow: AuthorizationFlow, http: httpx.AsyncClient, resource_url: str):
        self.flow = flow
        self.http = http
        self.resource_url = resource_url

    async def _request(self, run: ResourceFetch) -> None:
        access_token = self.flow.session.access_token
        if not access_token:
            run.fail(UnauthenticatedError("Access token is missing"))
            return

        try:
            response = await self.http.get(
                self.resource_url,
                headers={"Authorization": f"Bearer {access_token}"},
            )
            body = response.json() if response.is_success else None
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Error fetching protected resource: %s", e)
            run.fail(ResourceFetchError("Failed to fetch protected resource"))
            return

        run.on_response(response.status_code, body)

    async def run(self) -> ResourceFetch:
        """Drive a fetch to a terminal state and return the run."""
        run = ResourceFetch()
        while not run.done:
            if run.state == FetchState.AWAITING_REFRESH:
                logger.info("Token rejected. Refreshing token...")
                run.on_refresh(await self.flow.refresh())
            else:
                await self._request(run)
        return run

    async def fetch(self) -> Any:
        """Fetch the protected resource.

        Returns:
            The decoded JSON body of the resource response.

        Raises:
            UnauthenticatedError: If no token set is stored.
            RefreshFailedError: If the token was rejected and refresh failed.
            ResourceFetchError: If the request fails for any other reason.
        """
        if self.flow.session.tokens is None:
            raise UnauthenticatedError("Access token is missing. Please log in.")

        run = await self.run()
        if run.error is not None:
            logger.error("Protected resource fetch failed after %d attempt(s): %s", run.attempts, run.error)
            raise run.error

        logger.info("Protected resource fetched")
        return run.result
