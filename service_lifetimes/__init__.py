"""
SERVICE_LIFETIMES - Service lifetimes in a request pipeline

Registers one identifier service under Singleton, Scoped and Transient
lifetimes, wires it into FastAPI middleware and pages, and shows how the
identifier changes (or doesn't) across requests and across components of
the same request.
"""

from .config import AppSettings, ServiceProviderOptions
from .di import Container, Lifetime, RequestScope, ScopeManager
from .exceptions import (
    ConfigurationError,
    InvalidOperationError,
    MissingScopeError,
    ServiceLifetimesError,
    ServiceNotRegisteredError,
)
from .services import (
    GuidProvider,
    GuidService,
    GuidTrimmer,
    ScopedGuidService,
    SingletonGuidService,
    TransientGuidService,
    configure_services,
)

__version__ = "0.1.0"

__all__ = [
    # Container
    "Container",
    "Lifetime",
    "RequestScope",
    "ScopeManager",
    # Configuration
    "AppSettings",
    "ServiceProviderOptions",
    # Services
    "GuidProvider",
    "GuidService",
    "GuidTrimmer",
    "SingletonGuidService",
    "ScopedGuidService",
    "TransientGuidService",
    "configure_services",
    # Errors
    "ServiceLifetimesError",
    "ConfigurationError",
    "InvalidOperationError",
    "MissingScopeError",
    "ServiceNotRegisteredError",
]
