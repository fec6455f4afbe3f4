"""PKCE (Proof Key for Code Exchange) utilities for OAuth 2.0."""

import base64
import hashlib
import hmac
import secrets

from pkceflow.auth.models import ChallengeMethod


def derive_challenge(verifier: str, method: ChallengeMethod = ChallengeMethod.S256) -> str:
    """Derive the code challenge for a verifier.

    Returns:
        base64url(SHA256(verifier)) for S256, the verifier itself for plain.
    """
    if method == ChallengeMethod.PLAIN:
        return verifier
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


def generate_pkce(method: ChallengeMethod = ChallengeMethod.S256) -> tuple[str, str]:
    """Generate PKCE code verifier and challenge.

    Returns:
        Tuple of (code_verifier, code_challenge).
    """
    # 32 bytes of randomness -> 43 chars in base64url
    verifier_bytes = secrets.token_bytes(32)
    verifier = base64.urlsafe_b64encode(verifier_bytes).rstrip(b"=").decode("ascii")
    return verifier, derive_challenge(verifier, method)


def generate_state() -> str:
    """Generate a random state parameter for CSRF protection.

    Returns:
        URL-safe random string carrying 256 bits of entropy.
    """
    return secrets.token_urlsafe(32)


def states_match(expected: str | None, received: str | None) -> bool:
    """Compare CSRF state values in constant time."""
    if expected is None or received is None:
        return False
    return hmac.compare_digest(expected.encode("utf-8"), received.encode("utf-8"))
