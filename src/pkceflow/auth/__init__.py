"""Authentication module for pkceflow."""

from pkceflow.auth.models import AuthMethod, ChallengeMethod, PendingAuthorization, TokenSet
from pkceflow.auth.session import SessionState

__all__ = [
    "AuthMethod",
    "ChallengeMethod",
    "PendingAuthorization",
    "SessionState",
    "TokenSet",
]
