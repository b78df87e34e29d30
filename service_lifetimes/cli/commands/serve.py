"""
Serve command for CLI.

Runs the web application with uvicorn.
"""

import click
import uvicorn

from ...config import AppSettings
from ...di import Container
from ...exceptions import ConfigurationError
from ...observability import configure_logging
from ...web import create_app
from ..utils import DEFAULT_CONFIGURE, load_configure


@click.command()
@click.option("--host", default=None, help="Bind address (default: HOST or 127.0.0.1)")
@click.option("--port", default=None, type=int, help="Bind port (default: PORT or 8000)")
@click.option(
    "--environment",
    default=None,
    help="Hosting environment (default: APP_ENVIRONMENT or Development)",
)
@click.option(
    "--services",
    "services_path",
    default=None,
    help=f"Registration function as module:function (default: {DEFAULT_CONFIGURE})",
)
def serve(
    host: str | None,
    port: int | None,
    environment: str | None,
    services_path: str | None,
) -> None:
    """
    Serve the lifetimes demonstration.

    Scope validation is enabled in Development and disabled otherwise,
    unless VALIDATE_SCOPES / VALIDATE_ON_BUILD say differently.
    """
    configure = load_configure(services_path)
    try:
        settings = AppSettings.from_env().with_overrides(
            host=host, port=port, environment=environment
        )
        configure_logging(settings.log_level)
        app = create_app(settings, container=configure(Container()))
    except ConfigurationError as e:
        click.echo(click.style("❌ Startup failed!", fg="red"))
        raise click.ClickException(str(e)) from e

    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
