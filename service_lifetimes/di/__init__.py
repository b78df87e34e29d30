"""
SERVICE_LIFETIMES Dependency Injection Module

DI container with the three service lifetimes:
- SINGLETON: One instance per process lifetime
- SCOPED: One instance per request scope
- TRANSIENT: New instance on every resolution

Usage:
    from service_lifetimes.di import Container, Lifetime

    # Register services
    container = Container()
    container.register(SingletonGuidService, GuidService, Lifetime.SINGLETON)
    container.register(ScopedGuidService, GuidService, Lifetime.SCOPED)
    container.build()

    # Resolve inside a request scope
    with container.create_scope() as scope:
        guid = scope.resolve(ScopedGuidService).get_guid()
"""

from .container import Container
from .providers import (
    Dependency,
    FactoryProvider,
    InstanceProvider,
    Provider,
    ScopedProvider,
    SingletonProvider,
    TransientProvider,
)
from .scopes import Lifetime, RequestScope, ScopeManager
from .validation import ScopeValidator

__all__ = [
    "Container",
    "Lifetime",
    "RequestScope",
    "ScopeManager",
    "ScopeValidator",
    "Dependency",
    "Provider",
    "FactoryProvider",
    "InstanceProvider",
    "ScopedProvider",
    "SingletonProvider",
    "TransientProvider",
]
