"""
Check command for CLI.

Builds the container with build-time validation and lists the registrations.
"""

import click

from ...config import ServiceProviderOptions
from ...di import Container
from ...exceptions import ConfigurationError
from ..utils import DEFAULT_CONFIGURE, load_configure


@click.command()
@click.option(
    "--services",
    "services_path",
    default=None,
    help=f"Registration function as module:function (default: {DEFAULT_CONFIGURE})",
)
@click.option(
    "--validate-scopes/--no-validate-scopes",
    default=True,
    show_default=True,
    help="Reject scoped services consumed by singletons",
)
def check(services_path: str | None, validate_scopes: bool) -> None:
    """
    Validate the service graph the way startup does with validate_on_build.

    Examples:
        service-lifetimes check
        service-lifetimes check --services myapp.wiring:configure
    """
    configure = load_configure(services_path)
    container = configure(Container())
    options = ServiceProviderOptions(validate_scopes=validate_scopes, validate_on_build=True)

    try:
        container.build(options)
    except ConfigurationError as e:
        click.echo(click.style("❌ Service graph is invalid!", fg="red"))
        raise click.ClickException(str(e)) from e

    for service_type, provider in container.registrations().items():
        click.echo(
            f"  {service_type.__name__:<24} {provider.lifetime.value:<10} "
            f"{provider.implementation_name}"
        )
    click.echo(
        click.style(
            f"✅ {len(container.registrations())} registration(s) are valid", fg="green"
        )
    )
