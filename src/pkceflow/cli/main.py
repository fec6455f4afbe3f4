"""Command-line interface for pkceflow."""

import logging
from typing import Annotated

import typer
from aiohttp import web
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from pkceflow.server import create_app
from pkceflow.settings import Settings, get_settings

console = Console()


def _setup_logging(verbose: bool = False) -> None:
    """Configure logging with Rich handler."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )
    # Quiet noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def _configure_logfire(settings: Settings) -> None:
    """Configure logfire if available and token is present."""
    if not settings.logfire_token:
        return

    try:
        import logfire

        logfire.configure(
            service_name="pkceflow",
            token=settings.logfire_token,
            send_to_logfire="if-token-present",
        )
        logfire.instrument_httpx()
    except ImportError:
        logging.getLogger(__name__).warning("logfire token set but logfire is not installed")


def _load_settings() -> Settings:
    try:
        return get_settings()
    except ValidationError as e:
        console.print("[red]Invalid configuration:[/red]")
        for error in e.errors():
            field = ".".join(str(part) for part in error["loc"])
            console.print(f"  [bold]PKCEFLOW_{field.upper()}[/bold]: {error['msg']}")
        raise typer.Exit(code=1) from e


app = typer.Typer(
    name="pkceflow",
    help="OAuth2 Authorization Code + PKCE demo client.",
)


@app.command()
def serve(
    host: Annotated[
        str | None,
        typer.Option("--host", help="Interface to bind. Defaults to PKCEFLOW_HOST."),
    ] = None,
    port: Annotated[
        int | None,
        typer.Option("--port", "-p", help="Port to listen on. Defaults to PKCEFLOW_PORT."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging."),
    ] = False,
) -> None:
    """Run the demo web server."""
    _setup_logging(verbose)
    settings = _load_settings()
    _configure_logfire(settings)

    host = host or settings.host
    port = port or settings.port
    console.print(f"\n[bold]pkceflow[/bold] - serving at [cyan]http://{host}:{port}[/cyan]\n")
    web.run_app(create_app(settings), host=host, port=port, print=None)


@app.command()
def config() -> None:
    """Show the effective client configuration."""
    settings = _load_settings()

    table = Table(title="Client Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    secret = settings.client_secret
    rows = [
        ("Server", settings.server_url),
        ("Authorization endpoint", settings.endpoint_url(settings.authorization_endpoint)),
        ("Token endpoint", settings.endpoint_url(settings.token_endpoint)),
        ("Revocation endpoint", settings.endpoint_url(settings.revocation_endpoint)),
        ("Client ID", settings.client_id),
        ("Client secret", "********" if secret else "-"),
        ("Redirect URI", settings.redirect_uri),
        ("Scope", settings.scope),
        ("Authentication method", settings.authentication_method.value),
        ("Challenge method", settings.code_challenge_method.value),
        ("Protected resource", settings.resource_url),
    ]
    for name, value in rows:
        table.add_row(name, value)

    console.print(table)


if __name__ == "__main__":
    app()
