"""
Utility functions for CLI commands.

This module provides shared utilities for CLI operations.
"""

import importlib
from collections.abc import Callable

import click

from ..di import Container
from ..services import configure_services

DEFAULT_CONFIGURE = "service_lifetimes.services:configure_services"


def load_configure(path: str | None) -> Callable[[Container], Container]:
    """
    Load a service registration function from "module:function".

    Args:
        path: Import path of a function taking and returning a Container

    Returns:
        The registration function (configure_services when path is None)

    Raises:
        click.ClickException: If the path cannot be imported
    """
    if not path:
        return configure_services

    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise click.ClickException(f"Expected 'module:function', got {path!r}")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise click.ClickException(f"Cannot import {module_name}: {e}") from e

    configure = getattr(module, attr, None)
    if not callable(configure):
        raise click.ClickException(f"{path} is not a callable")
    return configure
