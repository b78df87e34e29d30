"""
Identifier services.

One implementation (GuidService) registered under three capabilities, one
per lifetime. The capabilities are structural Protocols: GuidService does
not inherit from them, the registration alone selects the lifetime.
"""

import logging
import uuid
from typing import Protocol, runtime_checkable

from .di import Container, Lifetime

logger = logging.getLogger(__name__)


@runtime_checkable
class GuidProvider(Protocol):
    """Produces an identifier string."""

    def get_guid(self) -> str: ...


class SingletonGuidService(GuidProvider, Protocol):
    """Identifier shared by every resolution for the life of the process."""


class ScopedGuidService(GuidProvider, Protocol):
    """Identifier shared by every resolution within one request scope."""


class TransientGuidService(GuidProvider, Protocol):
    """Identifier generated anew on every resolution."""


class GuidService:
    """Holds a random identifier generated once, at construction."""

    def __init__(self) -> None:
        self._service_guid = uuid.uuid4()

    def get_guid(self) -> str:
        return str(self._service_guid)

    def __repr__(self) -> str:
        return f"<GuidService {self._service_guid}>"


class GuidTrimmer:
    """
    Request-scoped view over the process-wide identifier.

    Depends on the singleton capability; a scoped consumer of a singleton is
    a legal graph.
    """

    def __init__(self, guid_service: SingletonGuidService) -> None:
        self._guid_service = guid_service

    def trim(self, length: int = 8) -> str:
        """Leading characters of the singleton identifier."""
        if length < 1:
            raise ValueError(f"length must be >= 1, got {length}")
        return self._guid_service.get_guid()[:length]


def configure_services(container: Container) -> Container:
    """Register the identifier services with their lifetimes."""
    container.register(SingletonGuidService, GuidService, Lifetime.SINGLETON)
    container.register(ScopedGuidService, GuidService, Lifetime.SCOPED)
    container.register(TransientGuidService, GuidService, Lifetime.TRANSIENT)
    container.register(GuidTrimmer, lifetime=Lifetime.SCOPED)
    logger.debug("Identifier services registered")
    return container


__all__ = [
    "GuidProvider",
    "SingletonGuidService",
    "ScopedGuidService",
    "TransientGuidService",
    "GuidService",
    "GuidTrimmer",
    "configure_services",
]
