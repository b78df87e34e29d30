"""
Main CLI entry point.
"""

import click

from .commands.check import check
from .commands.serve import serve


@click.group()
@click.version_option(package_name="service-lifetimes")
def cli() -> None:
    """Service lifetimes demonstration."""


cli.add_command(check)
cli.add_command(serve)
