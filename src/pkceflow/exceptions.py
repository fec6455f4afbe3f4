"""Exception hierarchy for pkceflow."""

from enum import StrEnum


class PkceflowError(Exception):
    """Base exception for all pkceflow errors."""


class InvalidTransitionError(PkceflowError):
    """Resource fetch state machine was driven through an illegal transition."""


class ErrorKind(StrEnum):
    """Distinct failure kinds surfaced by the authorization flow."""

    STATE_MISMATCH = "state_mismatch"
    MISSING_VERIFIER = "missing_verifier"
    AUTHORIZATION_DENIED = "authorization_denied"
    TOKEN_EXCHANGE_FAILED = "token_exchange_failed"
    NO_REFRESH_TOKEN = "no_refresh_token"
    REFRESH_FAILED = "refresh_failed"
    NO_ACTIVE_TOKEN = "no_active_token"
    REVOCATION_FAILED = "revocation_failed"
    UNAUTHENTICATED = "unauthenticated"
    RESOURCE_FETCH_FAILED = "resource_fetch_failed"


class AuthError(PkceflowError):
    """Base exception for authorization flow failures."""

    kind: ErrorKind


class StateMismatchError(AuthError):
    """Returned CSRF state does not match the pending authorization."""

    kind = ErrorKind.STATE_MISMATCH


class MissingVerifierError(AuthError):
    """Callback arrived without a pending authorization."""

    kind = ErrorKind.MISSING_VERIFIER


class AuthorizationDeniedError(AuthError):
    """Authorization server redirected back with an error."""

    kind = ErrorKind.AUTHORIZATION_DENIED


class TokenExchangeError(AuthError):
    """Failed to exchange the authorization code for tokens."""

    kind = ErrorKind.TOKEN_EXCHANGE_FAILED


class NoRefreshTokenError(AuthError):
    """No refresh token is stored."""

    kind = ErrorKind.NO_REFRESH_TOKEN


class RefreshFailedError(AuthError):
    """Failed to refresh the access token."""

    kind = ErrorKind.REFRESH_FAILED


class NoActiveTokenError(AuthError):
    """No access token is stored."""

    kind = ErrorKind.NO_ACTIVE_TOKEN


class RevocationError(AuthError):
    """Revocation endpoint rejected the request or could not be reached."""

    kind = ErrorKind.REVOCATION_FAILED


class UnauthenticatedError(AuthError):
    """Protected resource requested before any tokens were obtained."""

    kind = ErrorKind.UNAUTHENTICATED


class ResourceFetchError(AuthError):
    """Protected resource request failed."""

    kind = ErrorKind.RESOURCE_FETCH_FAILED
