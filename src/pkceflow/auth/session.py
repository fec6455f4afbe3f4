"""Process-wide session state for the single user of the demo."""

import asyncio
import logging
from dataclasses import dataclass, field

from pkceflow.auth.models import PendingAuthorization, TokenSet

logger = logging.getLogger(__name__)


@dataclass
class SessionState:
    """Owns the pending authorization and the current token set.

    One instance is created per application and lives until shutdown. The
    demo serves a single user, so there is exactly one session; ``lock``
    serialises token writes made by concurrent requests.
    """

    pending: PendingAuthorization | None = None
    tokens: TokenSet | None = None
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    def begin_authorization(self, state: str, code_verifier: str) -> PendingAuthorization:
        """Record a new authorization attempt, replacing any previous one."""
        if self.pending is not None:
            logger.debug("Discarding previous pending authorization")
        self.pending = PendingAuthorization(state=state, code_verifier=code_verifier)
        return self.pending

    def complete_authorization(self, tokens: TokenSet) -> None:
        """Store tokens from a successful code exchange and drop the pending attempt."""
        self.tokens = tokens
        self.pending = None

    def replace_tokens(self, tokens: TokenSet) -> None:
        self.tokens = tokens

    def clear_tokens(self) -> None:
        self.tokens = None

    @property
    def access_token(self) -> str | None:
        return self.tokens.access_token if self.tokens else None

    @property
    def refresh_token(self) -> str | None:
        return self.tokens.refresh_token if self.tokens else None
