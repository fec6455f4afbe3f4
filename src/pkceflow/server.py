"""aiohttp application exposing the demo routes."""

import json
import logging
from datetime import datetime

import httpx
from aiohttp import web
from jinja2 import Template

from pkceflow.auth.client import OAuthClient
from pkceflow.auth.flow import AuthorizationFlow
from pkceflow.auth.session import SessionState
from pkceflow.exceptions import AuthError, ErrorKind
from pkceflow.resource import ResourceAccessor
from pkceflow.settings import Settings

logger = logging.getLogger(__name__)

SETTINGS_KEY = web.AppKey("settings", Settings)
SESSION_KEY = web.AppKey("session", SessionState)
FLOW_KEY = web.AppKey("flow", AuthorizationFlow)
ACCESSOR_KEY = web.AppKey("accessor", ResourceAccessor)

HOME_PAGE = Template("""\
<!DOCTYPE html>
<html>
<head><title>OAuth2 Client Demo</title></head>
<body style="font-family:monospace;padding:2rem;">
<h1>OAuth2 Client Demo</h1>
<h2>Token Info</h2>
{% if tokens %}
<pre>{{ token_json }}</pre>
{% if expires %}<p>Expires at {{ expires }}{% if expired %} (expired){% endif %}</p>{% endif %}
{% else %}
<pre>No token available</pre>
{% endif %}
{% for action, label in buttons %}
<form action="{{ action }}" method="get" style="display:inline;">
  <button type="submit">{{ label }}</button>
</form>
{% endfor %}
<br /><br />
<form action="/office" method="get" style="display:inline;">
  <button type="submit">Fetch Protected Resource</button>
</form>
</body>
</html>""", autoescape=True)

# Client-facing responses per failure kind; causes are logged, never echoed.
ERROR_RESPONSES: dict[ErrorKind, tuple[int, str]] = {
    ErrorKind.STATE_MISMATCH: (500, "Failed to obtain access token."),
    ErrorKind.MISSING_VERIFIER: (500, "Failed to obtain access token."),
    ErrorKind.AUTHORIZATION_DENIED: (500, "Failed to obtain access token."),
    ErrorKind.TOKEN_EXCHANGE_FAILED: (500, "Failed to obtain access token."),
    ErrorKind.NO_REFRESH_TOKEN: (401, "Failed to refresh token. Please log in again."),
    ErrorKind.REFRESH_FAILED: (401, "Token expired and refresh failed. Please log in again."),
    ErrorKind.NO_ACTIVE_TOKEN: (400, "Access token is missing"),
    ErrorKind.REVOCATION_FAILED: (500, "Failed to revoke token."),
    ErrorKind.UNAUTHENTICATED: (401, "Access token is missing. Please log in."),
    ErrorKind.RESOURCE_FETCH_FAILED: (500, "Failed to fetch protected resource."),
}


def render_home(session: SessionState, show_tokens: bool = False) -> str:
    """Render the status page for the current token set."""
    tokens = session.tokens
    token_json = ""
    expires = None
    if tokens is not None:
        data = tokens.raw if show_tokens and tokens.raw else tokens.redacted()
        token_json = json.dumps(data, indent=2)
        if tokens.expires_at is not None:
            expires = datetime.fromtimestamp(tokens.expires_at).strftime("%Y-%m-%d %H:%M:%S")

    return HOME_PAGE.render(
        tokens=tokens,
        token_json=token_json,
        expires=expires,
        expired=tokens is not None and tokens.is_expired(),
        buttons=[
            ("/login", "Authorize"),
            ("/refresh", "Refresh Token"),
            ("/revoke", "Revoke Token"),
        ],
    )


@web.middleware
async def error_middleware(request: web.Request, handler) -> web.StreamResponse:
    """Turn authorization flow failures into short plain-text responses."""
    try:
        return await handler(request)
    except AuthError as e:
        status, message = ERROR_RESPONSES[e.kind]
        logger.warning("%s %s failed (%s): %s", request.method, request.path, e.kind, e)
        return web.Response(status=status, text=message)


async def home(request: web.Request) -> web.Response:
    settings = request.app[SETTINGS_KEY]
    html = render_home(request.app[SESSION_KEY], show_tokens=settings.show_tokens)
    return web.Response(text=html, content_type="text/html")


async def login(request: web.Request) -> web.Response:
    auth_url = request.app[FLOW_KEY].start_authorization()
    raise web.HTTPFound(auth_url)


async def callback(request: web.Request) -> web.Response:
    query = request.query
    await request.app[FLOW_KEY].handle_callback(
        code=query.get("code"),
        state=query.get("state"),
        error=query.get("error"),
        error_description=query.get("error_description"),
    )
    raise web.HTTPFound("/")


async def refresh(request: web.Request) -> web.Response:
    if not await request.app[FLOW_KEY].refresh():
        return web.Response(status=401, text="Failed to refresh token. Please log in again.")
    raise web.HTTPFound("/")


async def revoke(request: web.Request) -> web.Response:
    await request.app[FLOW_KEY].revoke()
    raise web.HTTPFound("/")


async def office(request: web.Request) -> web.Response:
    data = await request.app[ACCESSOR_KEY].fetch()
    return web.json_response(data)


def create_app(settings: Settings, http: httpx.AsyncClient | None = None) -> web.Application:
    """Build the application and its single session.

    Args:
        settings: Client configuration.
        http: Outbound HTTP client. Created with the configured timeout when
            omitted; closed on application cleanup either way.
    """
    http = http or httpx.AsyncClient(timeout=settings.http_timeout)
    session = SessionState()
    client = OAuthClient(settings, http=http)
    flow = AuthorizationFlow(client, session)

    app = web.Application(middlewares=[error_middleware])
    app[SETTINGS_KEY] = settings
    app[SESSION_KEY] = session
    app[FLOW_KEY] = flow
    app[ACCESSOR_KEY] = ResourceAccessor(flow, http, settings.resource_url)

    app.router.add_get("/", home)
    app.router.add_get("/login", login)
    app.router.add_get("/start_authorization", login)
    app.router.add_get(settings.callback_path, callback)
    app.router.add_get("/refresh", refresh)
    app.router.add_get("/revoke", revoke)
    app.router.add_get("/office", office)

    async def _close_http(app: web.Application) -> None:
        await client.aclose()

    app.on_cleanup.append(_close_http)
    return app
