"""
Pytest configuration and shared fixtures for SERVICE_LIFETIMES tests.

This module provides:
- Container fixtures (default wiring, built with and without validation)
- Settings fixtures for Development and Production
- FastAPI application and TestClient fixtures
- Test service classes for graph validation
"""

from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from service_lifetimes.config import AppSettings, ServiceProviderOptions
from service_lifetimes.di import Container, Lifetime
from service_lifetimes.services import configure_services
from service_lifetimes.web import create_app


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast isolated tests")
    config.addinivalue_line("markers", "integration: tests running the full web pipeline")


SETTINGS_ENV_KEYS = (
    "APP_ENVIRONMENT",
    "LOG_LEVEL",
    "VALIDATE_SCOPES",
    "VALIDATE_ON_BUILD",
    "HOST",
    "PORT",
)


@pytest.fixture(autouse=True)
def isolated_settings_env(monkeypatch):
    """Keep the runner's environment out of AppSettings."""
    for key in SETTINGS_ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


# ============================================================================
# TEST SERVICES
# ============================================================================


class Disposable:
    """Records dispose() calls."""

    def __init__(self) -> None:
        self.disposed = 0

    def dispose(self) -> None:
        self.disposed += 1


class RequestContext:
    """A scoped service."""


class Repository:
    """A transient service depending on a scoped one."""

    def __init__(self, context: RequestContext) -> None:
        self.context = context


class CaptiveCache:
    """A singleton consuming a scoped service directly."""

    def __init__(self, context: RequestContext) -> None:
        self.context = context


class IndirectCaptiveCache:
    """A singleton consuming a scoped service through a transient."""

    def __init__(self, repository: Repository) -> None:
        self.repository = repository


class Clock:
    """A singleton."""


class Handler:
    """A scoped service consuming a singleton: a legal graph."""

    def __init__(self, clock: Clock, context: RequestContext) -> None:
        self.clock = clock
        self.context = context


def configure_captive(container: Container) -> Container:
    """Wiring with a scoped service captured by a singleton."""
    container.register(RequestContext, lifetime=Lifetime.SCOPED)
    container.register(CaptiveCache, lifetime=Lifetime.SINGLETON)
    return container


# ============================================================================
# CONTAINER FIXTURES
# ============================================================================


@pytest.fixture
def validating_options() -> ServiceProviderOptions:
    return ServiceProviderOptions(validate_scopes=True, validate_on_build=True)


@pytest.fixture
def container() -> Iterator[Container]:
    """Default wiring, built without validation."""
    container = configure_services(Container()).build()
    yield container
    container.dispose()


@pytest.fixture
def validated_container(validating_options) -> Iterator[Container]:
    """Default wiring, built with scope validation on build."""
    container = configure_services(Container()).build(validating_options)
    yield container
    container.dispose()


# ============================================================================
# WEB FIXTURES
# ============================================================================


@pytest.fixture
def dev_settings() -> AppSettings:
    return AppSettings(environment="Development")


@pytest.fixture
def prod_settings() -> AppSettings:
    return AppSettings(environment="Production")


@pytest.fixture
def app(dev_settings):
    return create_app(dev_settings)


@pytest.fixture
def client(app) -> Iterator[TestClient]:
    with TestClient(app) as client:
        yield client
