"""Authentication data models."""

import time
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, TypeAdapter

_SECRET_FIELDS = ("access_token", "refresh_token", "id_token")
_EXPIRES_IN = TypeAdapter(int | None)


class AuthMethod(str, Enum):
    """How client credentials are presented to the token endpoint."""

    CLIENT_SECRET_POST = "client_secret_post"
    CLIENT_SECRET_BASIC = "client_secret_basic"


class ChallengeMethod(str, Enum):
    """PKCE code challenge methods (RFC 7636)."""

    S256 = "S256"
    PLAIN = "plain"


def mask_secret(value: str, visible: int = 6) -> str:
    """Mask all but the first few characters of a secret."""
    if len(value) <= visible:
        return "*" * len(value)
    return f"{value[:visible]}…"


class TokenSet(BaseModel):
    """OAuth token set returned by the token endpoint."""

    access_token: str = Field(min_length=1)
    refresh_token: str | None = None
    token_type: str = "Bearer"
    expires_at: int | None = None
    scope: str | None = None
    raw: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_response(
        cls,
        data: dict[str, Any],
        previous_refresh_token: str | None = None,
    ) -> "TokenSet":
        """Build a token set from a token endpoint JSON body.

        Args:
            data: Decoded token endpoint response.
            previous_refresh_token: Refresh token to keep when the response
                does not carry a new one.

        Returns:
            TokenSet with absolute expiry computed from ``expires_in``.

        Raises:
            pydantic.ValidationError: If the body has no usable access token
                or its ``expires_in`` is not an integer.
        """
        expires_in = _EXPIRES_IN.validate_python(data.get("expires_in"))
        expires_at = int(time.time()) + expires_in if expires_in is not None else None

        return cls(
            access_token=data.get("access_token", ""),
            refresh_token=data.get("refresh_token") or previous_refresh_token,
            token_type=data.get("token_type", "Bearer"),
            expires_at=expires_at,
            scope=data.get("scope"),
            raw=dict(data),
        )

    def is_expired(self, buffer_seconds: int = 0) -> bool:
        """Check if token is expired or expiring soon.

        Tokens without expiry metadata are never considered expired; the
        resource server has the final word via a 401.
        """
        if self.expires_at is None:
            return False
        return time.time() >= (self.expires_at - buffer_seconds)

    def redacted(self) -> dict[str, Any]:
        """Return the raw response with secrets masked, for logs and display."""
        data = dict(self.raw) if self.raw else self.model_dump(exclude={"raw"})
        for key in _SECRET_FIELDS:
            if isinstance(data.get(key), str):
                data[key] = mask_secret(data[key])
        return data


class PendingAuthorization(BaseModel):
    """In-flight authorization attempt awaiting its callback."""

    state: str
    code_verifier: str
