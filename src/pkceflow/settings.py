"""Application settings loaded from the environment."""

from functools import lru_cache
from urllib.parse import urljoin, urlparse

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from pkceflow.auth.models import AuthMethod, ChallengeMethod

# Paths served by the app itself; the callback route cannot share them
RESERVED_PATHS = frozenset({"/", "/login", "/start_authorization", "/refresh", "/revoke", "/office"})


class Settings(BaseSettings):
    """OAuth client configuration, read-only for the process lifetime."""

    model_config = SettingsConfigDict(
        env_prefix="PKCEFLOW_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Authorization server
    server_url: str = "https://api.biz.moneyforward.com"
    authorization_endpoint: str = "/authorize"
    token_endpoint: str = "/token"
    revocation_endpoint: str = "/revoke"

    # Client registration
    client_id: str
    client_secret: SecretStr | None = None
    redirect_uri: str = "http://localhost:12345/callback"
    scope: str = "mfc/admin/office.read"
    authentication_method: AuthMethod = AuthMethod.CLIENT_SECRET_POST
    code_challenge_method: ChallengeMethod = ChallengeMethod.S256

    # Protected resource
    resource_url: str = "https://bizapis.moneyforward.com/admin/office"

    http_timeout: float = 10.0
    host: str = "127.0.0.1"
    port: int = 12345
    show_tokens: bool = False
    logfire_token: str | None = None

    @field_validator("redirect_uri")
    @classmethod
    def _callback_path_not_reserved(cls, value: str) -> str:
        path = urlparse(value).path or "/callback"
        if path in RESERVED_PATHS:
            raise ValueError(f"redirect_uri path {path!r} clashes with a built-in route")
        return value

    def endpoint_url(self, endpoint: str) -> str:
        """Resolve an endpoint path against the authorization server URL."""
        if urlparse(endpoint).scheme:
            return endpoint
        return urljoin(self.server_url.rstrip("/") + "/", endpoint.lstrip("/"))

    @property
    def callback_path(self) -> str:
        """Path component of the redirect URI, served by the callback route."""
        return urlparse(self.redirect_uri).path or "/callback"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
