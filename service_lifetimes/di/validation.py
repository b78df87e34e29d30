"""
Service graph validation.

Walks the constructor dependency graph of registered services and reports
wiring defects as ConfigurationError before they can produce incorrect
sharing at runtime:

- a Scoped service reachable from a Singleton (captive dependency)
- a required dependency with no registration
- a dependency cycle
"""

import logging
import threading
from collections.abc import Mapping
from typing import Any

from ..exceptions import ConfigurationError
from .providers import Provider
from .scopes import Lifetime

logger = logging.getLogger(__name__)


def _name(service_type: Any) -> str:
    return getattr(service_type, "__name__", repr(service_type))


class ScopeValidator:
    """
    Validates the dependency graph of a container's registrations.

    Args:
        providers: Registered providers keyed by service type
        check_scopes: Report Scoped services consumed by Singletons
    """

    def __init__(self, providers: Mapping[Any, Provider], check_scopes: bool = True):
        self._providers = providers
        self.check_scopes = check_scopes
        self._validated: set[Any] = set()
        # (service_type, singleton_owner) pairs whose subgraph passed
        self._checked: set[tuple[Any, Any]] = set()
        self._lock = threading.Lock()

    def is_validated(self, service_type: Any) -> bool:
        return service_type in self._validated

    def validate(self, service_type: Any) -> None:
        """
        Validate the graph rooted at service_type.

        Raises:
            ConfigurationError: If the graph cannot be built correctly
        """
        if service_type in self._validated:
            return

        provider = self._providers.get(service_type)
        if provider is None:
            raise ConfigurationError(
                f"Service {_name(service_type)} is not registered",
                service_type=service_type,
            )

        owner = service_type if provider.lifetime == Lifetime.SINGLETON else None
        self._visit(provider, [service_type], owner)

        with self._lock:
            self._validated.add(service_type)
        logger.debug(f"Validated service graph for {_name(service_type)}")

    def validate_all(self) -> None:
        """Validate every registration, in registration order."""
        for service_type in list(self._providers):
            self.validate(service_type)

    def _visit(self, provider: Provider, chain: list[Any], singleton_owner: Any) -> None:
        for dep in provider.dependencies():
            dep_chain = chain + [dep.service_type]

            if dep.service_type in chain:
                raise ConfigurationError(
                    "Circular dependency detected: "
                    + " -> ".join(_name(t) for t in dep_chain),
                    service_type=chain[0],
                    dependency=dep.service_type,
                    chain=dep_chain,
                )

            dep_provider = self._providers.get(dep.service_type)
            if dep_provider is None:
                if not dep.required:
                    continue
                raise ConfigurationError(
                    f"Unable to resolve {_name(dep.service_type)} for parameter "
                    f"'{dep.name}' while building {_name(chain[-1])}",
                    service_type=chain[0],
                    dependency=dep.service_type,
                    chain=dep_chain,
                )

            if (
                self.check_scopes
                and singleton_owner is not None
                and dep_provider.lifetime == Lifetime.SCOPED
            ):
                raise ConfigurationError(
                    f"Cannot consume scoped service {_name(dep.service_type)} "
                    f"from singleton {_name(singleton_owner)}",
                    service_type=singleton_owner,
                    dependency=dep.service_type,
                    chain=dep_chain,
                )

            owner = singleton_owner
            if owner is None and dep_provider.lifetime == Lifetime.SINGLETON:
                owner = dep.service_type
            if (dep.service_type, owner) in self._checked:
                continue
            self._visit(dep_provider, dep_chain, owner)
            self._checked.add((dep.service_type, owner))
