"""Tests for exception hierarchy."""

import pytest

from pkceflow.exceptions import (
    AuthError,
    AuthorizationDeniedError,
    ErrorKind,
    InvalidTransitionError,
    MissingVerifierError,
    NoActiveTokenError,
    NoRefreshTokenError,
    PkceflowError,
    RefreshFailedError,
    ResourceFetchError,
    RevocationError,
    StateMismatchError,
    TokenExchangeError,
    UnauthenticatedError,
)

AUTH_ERRORS = [
    (StateMismatchError, ErrorKind.STATE_MISMATCH),
    (MissingVerifierError, ErrorKind.MISSING_VERIFIER),
    (AuthorizationDeniedError, ErrorKind.AUTHORIZATION_DENIED),
    (TokenExchangeError, ErrorKind.TOKEN_EXCHANGE_FAILED),
    (NoRefreshTokenError, ErrorKind.NO_REFRESH_TOKEN),
    (RefreshFailedError, ErrorKind.REFRESH_FAILED),
    (NoActiveTokenError, ErrorKind.NO_ACTIVE_TOKEN),
    (RevocationError, ErrorKind.REVOCATION_FAILED),
    (UnauthenticatedError, ErrorKind.UNAUTHENTICATED),
    (ResourceFetchError, ErrorKind.RESOURCE_FETCH_FAILED),
]


class TestExceptionHierarchy:
    """Test exception inheritance and structure."""

    def test_base_exception_exists(self):
        error = PkceflowError("test message")
        assert isinstance(error, Exception)
        assert str(error) == "test message"

    @pytest.mark.parametrize(("exception_class", "kind"), AUTH_ERRORS)
    def test_auth_errors_carry_kind(self, exception_class, kind):
        """Each failure kind has its own exception type."""
        error = exception_class("specific error")
        assert isinstance(error, AuthError)
        assert isinstance(error, PkceflowError)
        assert error.kind == kind

    def test_kinds_are_distinct(self):
        kinds = [kind for _, kind in AUTH_ERRORS]
        assert len(set(kinds)) == len(ErrorKind)

    def test_invalid_transition_is_not_auth_error(self):
        """Programming errors are not mapped to HTTP responses."""
        error = InvalidTransitionError("bad")
        assert isinstance(error, PkceflowError)
        assert not isinstance(error, AuthError)
