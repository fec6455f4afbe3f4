"""Tests for PKCE utilities."""

import base64
import hashlib
import re

from pkceflow.auth.models import ChallengeMethod
from pkceflow.auth.pkce import derive_challenge, generate_pkce, generate_state, states_match


class TestGeneratePkce:
    """Test generate_pkce function."""

    def test_returns_verifier_and_challenge(self):
        """generate_pkce returns verifier and challenge tuple."""
        verifier, challenge = generate_pkce()
        assert isinstance(verifier, str)
        assert isinstance(challenge, str)

    def test_verifier_length(self):
        """Verifier is between 43-128 characters (RFC 7636)."""
        verifier, _ = generate_pkce()
        assert 43 <= len(verifier) <= 128

    def test_verifier_uses_valid_characters(self):
        """Verifier uses only unreserved URL-safe characters."""
        verifier, _ = generate_pkce()
        # RFC 7636: ALPHA / DIGIT / "-" / "." / "_" / "~"
        assert re.match(r"^[A-Za-z0-9\-._~]+$", verifier)

    def test_challenge_is_sha256_of_verifier(self):
        """Challenge is base64url(SHA256(verifier))."""
        verifier, challenge = generate_pkce()
        digest = hashlib.sha256(verifier.encode("ascii")).digest()
        expected = base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")
        assert challenge == expected

    def test_plain_challenge_equals_verifier(self):
        """Plain method uses the verifier as the challenge."""
        verifier, challenge = generate_pkce(ChallengeMethod.PLAIN)
        assert challenge == verifier

    def test_generates_unique_values(self):
        """Each call generates unique verifier/challenge."""
        v1, c1 = generate_pkce()
        v2, c2 = generate_pkce()
        assert v1 != v2
        assert c1 != c2


class TestDeriveChallenge:
    """Test derive_challenge against the RFC 7636 appendix B vector."""

    def test_rfc_vector(self):
        verifier = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"
        assert derive_challenge(verifier) == "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"


class TestGenerateState:
    """Test generate_state function."""

    def test_returns_string(self):
        state = generate_state()
        assert isinstance(state, str)

    def test_carries_at_least_128_bits(self):
        """32 random bytes encode to 43 base64url characters."""
        state = generate_state()
        assert len(state) >= 43

    def test_generates_unique_values(self):
        assert generate_state() != generate_state()


class TestStatesMatch:
    """Test constant-time state comparison."""

    def test_equal_states_match(self):
        assert states_match("abc123", "abc123")

    def test_different_states_do_not_match(self):
        assert not states_match("abc123", "xyz789")

    def test_prefix_does_not_match(self):
        assert not states_match("abc123", "abc")

    def test_none_never_matches(self):
        assert not states_match(None, None)
        assert not states_match("abc123", None)
        assert not states_match(None, "abc123")

    def test_uses_compare_digest(self, monkeypatch):
        """Comparison is delegated to hmac.compare_digest."""
        calls = []

        def fake_compare(a, b):
            calls.append((a, b))
            return True

        monkeypatch.setattr("pkceflow.auth.pkce.hmac.compare_digest", fake_compare)
        assert states_match("abc123", "abc123")
        assert calls == [(b"abc123", b"abc123")]
