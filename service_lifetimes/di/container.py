"""
Dependency Injection Container

A lightweight, FastAPI-friendly DI container with Singleton, Scoped and
Transient lifetimes and optional scope validation.
"""

import logging
import threading
from collections.abc import Callable
from typing import Any, Optional, TypeVar

from ..config import ServiceProviderOptions
from ..exceptions import (
    ConfigurationError,
    InvalidOperationError,
    ServiceNotRegisteredError,
)
from .providers import FactoryProvider, InstanceProvider, Provider, create_provider
from .scopes import Lifetime, RequestScope
from .validation import ScopeValidator

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Container:
    """
    Dependency Injection Container with proper service lifetimes.

    Supports three lifetimes:
    - SINGLETON: One instance for the container's lifetime
    - SCOPED: One instance per RequestScope
    - TRANSIENT: New instance on every resolve

    The registry is mutable until build(); after that it is frozen and the
    container only resolves. The first resolve() builds with default options
    if build() was never called.

    Usage:
        container = Container()
        container.register(SingletonGuidService, GuidService, Lifetime.SINGLETON)
        container.register_scoped(ScopedGuidService, GuidService)
        container.build(ServiceProviderOptions(validate_scopes=True, validate_on_build=True))

        with container.create_scope() as scope:
            guid = scope.resolve(ScopedGuidService).get_guid()
    """

    def __init__(self):
        self._providers: dict[Any, Provider] = {}
        self._options = ServiceProviderOptions()
        self._validator: ScopeValidator | None = None
        self._built = False
        self._disposed = False
        self._lock = threading.RLock()
        self._resolving = threading.local()

    @property
    def options(self) -> ServiceProviderOptions:
        return self._options

    @property
    def is_built(self) -> bool:
        return self._built

    def register(
        self,
        service_type: type[T],
        implementation: Callable[..., T] | None = None,
        lifetime: Lifetime = Lifetime.SINGLETON,
    ) -> "Container":
        """
        Register a service type with the container.

        Args:
            service_type: The type to register (capability or concrete class)
            implementation: Optional implementation class (defaults to service_type)
            lifetime: Service lifetime

        Returns:
            Self for chaining

        Example:
            container.register(GuidService)
            container.register(ScopedGuidService, GuidService, Lifetime.SCOPED)
        """
        impl = implementation or service_type
        self._add(create_provider(service_type, impl, lifetime))
        logger.debug(
            f"Registered {service_type.__name__} -> "
            f"{getattr(impl, '__name__', impl)} as {lifetime.value}"
        )
        return self

    def register_singleton(
        self, service_type: type[T], implementation: Callable[..., T] | None = None
    ) -> "Container":
        return self.register(service_type, implementation, Lifetime.SINGLETON)

    def register_scoped(
        self, service_type: type[T], implementation: Callable[..., T] | None = None
    ) -> "Container":
        return self.register(service_type, implementation, Lifetime.SCOPED)

    def register_transient(
        self, service_type: type[T], implementation: Callable[..., T] | None = None
    ) -> "Container":
        return self.register(service_type, implementation, Lifetime.TRANSIENT)

    def register_factory(
        self,
        service_type: type[T],
        factory: Callable[[Any], T],
        lifetime: Lifetime = Lifetime.SINGLETON,
    ) -> "Container":
        """
        Register a service with a custom factory function.

        The factory receives a resolver (the current RequestScope, or the
        container outside of a scope) and can resolve dependencies manually.

        Example:
            container.register_factory(
                GuidTrimmer,
                lambda r: GuidTrimmer(r.resolve(SingletonGuidService), length=4),
                Lifetime.SCOPED,
            )
        """
        self._add(FactoryProvider(service_type, factory, lifetime))
        logger.debug(f"Registered factory for {service_type.__name__} as {lifetime.value}")
        return self

    def register_instance(self, service_type: type[T], instance: T) -> "Container":
        """
        Register an existing instance as a singleton.

        Useful for configuration objects or externally created instances.
        """
        self._add(InstanceProvider(service_type, instance))
        logger.debug(f"Registered instance for {service_type.__name__}")
        return self

    def _add(self, provider: Provider) -> None:
        with self._lock:
            if self._built:
                raise InvalidOperationError(
                    f"Cannot register {provider.service_type.__name__}: "
                    "the container has already been built",
                )
            self._providers[provider.service_type] = provider

    def build(self, options: Optional[ServiceProviderOptions] = None) -> "Container":
        """
        Freeze the registry and apply provider options.

        With validate_on_build, every registration is validated now and a
        wiring defect fails the build instead of the first request.

        Raises:
            ConfigurationError: If validation is enabled and the graph is invalid
            InvalidOperationError: If the container was already built
        """
        with self._lock:
            if self._built:
                raise InvalidOperationError("The container has already been built")
            self._options = options or ServiceProviderOptions()
            self._validator = ScopeValidator(
                self._providers, check_scopes=self._options.validate_scopes
            )
            if self._options.validate_on_build:
                self._validator.validate_all()
                logger.info(f"Validated {len(self._providers)} service registration(s) on build")
            self._built = True
        logger.debug(
            f"Container built (validate_scopes={self._options.validate_scopes}, "
            f"validate_on_build={self._options.validate_on_build})"
        )
        return self

    def resolve(self, service_type: type[T], scope: RequestScope | None = None) -> T:
        """
        Resolve a service instance.

        Args:
            service_type: The type to resolve
            scope: The request scope to resolve in; required for Scoped services

        Returns:
            Service instance

        Raises:
            ServiceNotRegisteredError: If service is not registered
            MissingScopeError: If a Scoped service is resolved without a scope
            ConfigurationError: If scope validation rejects the service graph
        """
        if not self._built:
            with self._lock:
                if not self._built:
                    self.build()
        if self._disposed:
            raise InvalidOperationError("Cannot resolve from a disposed container")
        if scope is not None and scope.closed:
            raise InvalidOperationError(
                f"Cannot resolve {service_type.__name__} from an ended scope",
                context={"scope_id": scope.scope_id},
            )

        provider = self._providers.get(service_type)
        if provider is None:
            raise ServiceNotRegisteredError(service_type)

        if self._options.validate_scopes and not self._validator.is_validated(service_type):
            self._validator.validate(service_type)

        stack = self._resolution_stack()
        if service_type in stack:
            chain = stack + [service_type]
            raise ConfigurationError(
                "Circular dependency detected: "
                + " -> ".join(t.__name__ for t in chain),
                service_type=chain[0],
                dependency=service_type,
                chain=chain,
            )
        stack.append(service_type)
        try:
            return provider.get(self, scope)
        finally:
            stack.pop()

    def try_resolve(self, service_type: type[T], scope: RequestScope | None = None) -> T | None:
        """Try to resolve a service, returning None if not registered."""
        try:
            return self.resolve(service_type, scope=scope)
        except ServiceNotRegisteredError:
            return None

    def _resolution_stack(self) -> list[Any]:
        stack = getattr(self._resolving, "stack", None)
        if stack is None:
            stack = self._resolving.stack = []
        return stack

    def create_scope(self) -> RequestScope:
        """Create a new RequestScope bound to this container."""
        if self._disposed:
            raise InvalidOperationError("Cannot create a scope from a disposed container")
        return RequestScope(self)

    def is_registered(self, service_type: Any) -> bool:
        """Check if a service type is registered."""
        return service_type in self._providers

    def lifetime_of(self, service_type: Any) -> Lifetime:
        """Lifetime a service type was registered with."""
        provider = self._providers.get(service_type)
        if provider is None:
            raise ServiceNotRegisteredError(service_type)
        return provider.lifetime

    def registrations(self) -> dict[Any, Provider]:
        """Snapshot of the registered providers."""
        return dict(self._providers)

    def dispose(self) -> None:
        """
        Release the singletons this container created, in reverse
        registration order. Calling dispose() again is a no-op.
        """
        with self._lock:
            if self._disposed:
                return
            self._disposed = True
            providers = list(self._providers.values())
        for provider in reversed(providers):
            try:
                provider.dispose()
            except (AttributeError, RuntimeError, TypeError) as e:
                logger.warning(f"Error disposing {provider.service_type.__name__}: {e}")
        logger.debug("Container disposed")

    def __contains__(self, service_type: Any) -> bool:
        """Support 'in' operator for checking registration."""
        return self.is_registered(service_type)
