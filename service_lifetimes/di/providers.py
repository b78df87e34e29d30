"""
Service Providers for Dependency Injection

Providers are responsible for creating and managing service instances
according to their configured lifetime.
"""

import inspect
import logging
import threading
import types
import typing
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar, get_type_hints

from ..exceptions import MissingScopeError
from .scopes import Lifetime, RequestScope, dispose_instance

if TYPE_CHECKING:
    from .container import Container

logger = logging.getLogger(__name__)

T = TypeVar("T")

_PRIMITIVES = (str, int, float, bool, bytes, type(None))


@dataclass(frozen=True)
class Dependency:
    """A constructor parameter satisfied from the container."""

    name: str
    service_type: Any
    has_default: bool = False
    nullable: bool = False

    @property
    def required(self) -> bool:
        return not (self.has_default or self.nullable)


def _unwrap_optional(annotation: Any) -> tuple[Any, bool]:
    """Return (X, True) for Optional[X] / X | None, else (annotation, False)."""
    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        args = [a for a in typing.get_args(annotation) if a is not type(None)]
        if len(args) == 1 and len(args) < len(typing.get_args(annotation)):
            return args[0], True
    return annotation, False


def collect_dependencies(factory: Callable[..., Any]) -> list[Dependency]:
    """
    Inspect the factory/constructor signature and collect the type-hinted
    parameters the container should inject.

    Primitive annotations and unannotated parameters are left to the factory's
    own defaults.
    """
    target = factory.__init__ if inspect.isclass(factory) else factory
    try:
        hints = get_type_hints(target)
    except (NameError, TypeError):
        hints = {}

    try:
        sig = inspect.signature(factory)
    except (TypeError, ValueError):
        return []

    dependencies: list[Dependency] = []
    for param_name, param in sig.parameters.items():
        if param_name == "self":
            continue
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue

        annotation = hints.get(param_name, param.annotation)
        if annotation is inspect.Parameter.empty or isinstance(annotation, str):
            continue

        annotation, nullable = _unwrap_optional(annotation)
        if annotation in _PRIMITIVES:
            continue

        dependencies.append(
            Dependency(
                name=param_name,
                service_type=annotation,
                has_default=param.default is not inspect.Parameter.empty,
                nullable=nullable,
            )
        )
    return dependencies


class Provider(ABC, Generic[T]):
    """
    Abstract base class for service providers.

    Providers know how to create instances of a service and manage
    their lifecycle according to the configured lifetime.
    """

    def __init__(
        self,
        service_type: type[T],
        lifetime: Lifetime,
        factory: Callable[..., T] | None = None,
    ):
        self.service_type = service_type
        self.lifetime = lifetime
        self._factory = factory or service_type
        self._dependencies: list[Dependency] | None = None

    @abstractmethod
    def get(self, container: "Container", scope: RequestScope | None) -> T:
        """
        Get or create a service instance.

        Args:
            container: The DI container for resolving dependencies
            scope: The request scope of the resolution, or None

        Returns:
            Service instance
        """

    def dependencies(self) -> list[Dependency]:
        """Constructor dependencies, inspected once and cached."""
        if self._dependencies is None:
            self._dependencies = collect_dependencies(self._factory)
        return self._dependencies

    @property
    def implementation_name(self) -> str:
        return getattr(self._factory, "__name__", repr(self._factory))

    def _create_instance(self, container: "Container", scope: RequestScope | None) -> T:
        """
        Create a new instance, injecting dependencies resolved in scope.
        """
        kwargs: dict[str, Any] = {}
        for dep in self.dependencies():
            if dep.service_type not in container:
                if dep.has_default:
                    continue
                if dep.nullable:
                    kwargs[dep.name] = None
                    continue
            kwargs[dep.name] = container.resolve(dep.service_type, scope=scope)

        return self._factory(**kwargs)

    def dispose(self) -> None:
        """Release any instance owned by this provider."""

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__} {self.service_type.__name__} -> "
            f"{self.implementation_name} ({self.lifetime.value})>"
        )


class SingletonProvider(Provider[T]):
    """
    Provider that creates a single instance shared across the process.

    The instance is created lazily on first request and cached for the
    lifetime of the container. The check-and-create step is guarded so
    concurrent first resolutions construct exactly one instance. The
    instance is always built outside of any request scope.
    """

    def __init__(
        self,
        service_type: type[T],
        factory: Callable[..., T] | None = None,
    ):
        super().__init__(service_type, Lifetime.SINGLETON, factory)
        self._instance: T | None = None
        self._created = False
        # Reentrant so a failed cycle surfaces as an error, not a deadlock
        self._lock = threading.RLock()

    @property
    def created(self) -> bool:
        return self._created

    def get(self, container: "Container", scope: RequestScope | None) -> T:
        if self._created:
            return self._instance
        with self._lock:
            if not self._created:
                self._instance = self._create_instance(container, None)
                self._created = True
                logger.debug(f"Created singleton: {self.service_type.__name__}")
        return self._instance

    def dispose(self) -> None:
        with self._lock:
            instance, created = self._instance, self._created
            self._instance = None
            self._created = False
        if created:
            dispose_instance(instance)


class ScopedProvider(Provider[T]):
    """
    Provider that creates one instance per request scope.

    The instance is cached in, and owned by, the RequestScope.
    """

    def __init__(
        self,
        service_type: type[T],
        factory: Callable[..., T] | None = None,
    ):
        super().__init__(service_type, Lifetime.SCOPED, factory)

    def get(self, container: "Container", scope: RequestScope | None) -> T:
        if scope is None:
            raise MissingScopeError(
                f"Cannot resolve scoped service {self.service_type.__name__} "
                "outside of a request scope",
                service_type=self.service_type,
            )
        return scope.get_or_create(
            self.service_type, lambda: self._create_instance(container, scope)
        )


class TransientProvider(Provider[T]):
    """
    Provider that creates a new instance every time.
    """

    def __init__(
        self,
        service_type: type[T],
        factory: Callable[..., T] | None = None,
    ):
        super().__init__(service_type, Lifetime.TRANSIENT, factory)

    def get(self, container: "Container", scope: RequestScope | None) -> T:
        instance = self._create_instance(container, scope)
        logger.debug(f"Created transient: {self.service_type.__name__}")
        return instance


class FactoryProvider(Provider[T]):
    """
    Provider that uses a custom factory function.

    The factory is called with a resolver: the RequestScope when the
    resolution happens inside one, otherwise the container. Both expose
    resolve(service_type). Its dependencies are opaque to scope validation.

    Usage:
        def create_trimmer(resolver) -> GuidTrimmer:
            return GuidTrimmer(resolver.resolve(SingletonGuidService), length=4)

        container.register_factory(GuidTrimmer, create_trimmer, Lifetime.SCOPED)
    """

    def __init__(
        self,
        service_type: type[T],
        factory: Callable[[Any], T],
        lifetime: Lifetime,
    ):
        super().__init__(service_type, lifetime, None)
        self._custom_factory = factory
        self._singleton_instance: T | None = None
        self._created = False
        self._lock = threading.RLock()

    def dependencies(self) -> list[Dependency]:
        return []

    @property
    def implementation_name(self) -> str:
        return getattr(self._custom_factory, "__name__", repr(self._custom_factory))

    def get(self, container: "Container", scope: RequestScope | None) -> T:
        if self.lifetime == Lifetime.SINGLETON:
            if not self._created:
                with self._lock:
                    if not self._created:
                        self._singleton_instance = self._custom_factory(container)
                        self._created = True
            return self._singleton_instance

        elif self.lifetime == Lifetime.SCOPED:
            if scope is None:
                raise MissingScopeError(
                    f"Cannot resolve scoped service {self.service_type.__name__} "
                    "outside of a request scope",
                    service_type=self.service_type,
                )
            return scope.get_or_create(self.service_type, lambda: self._custom_factory(scope))

        else:  # TRANSIENT
            return self._custom_factory(scope if scope is not None else container)

    def dispose(self) -> None:
        with self._lock:
            instance, created = self._singleton_instance, self._created
            self._singleton_instance = None
            self._created = False
        if created:
            dispose_instance(instance)


class InstanceProvider(Provider[T]):
    """
    Provider for a pre-built instance. Always a singleton; the container
    does not dispose instances it did not create.
    """

    def __init__(self, service_type: type[T], instance: T):
        super().__init__(service_type, Lifetime.SINGLETON, None)
        self._instance = instance

    def dependencies(self) -> list[Dependency]:
        return []

    @property
    def implementation_name(self) -> str:
        return type(self._instance).__name__

    def get(self, container: "Container", scope: RequestScope | None) -> T:
        return self._instance


def create_provider(
    service_type: type[T],
    implementation: Callable[..., T],
    lifetime: Lifetime,
) -> Provider[T]:
    """Create the provider matching a lifetime."""
    if lifetime == Lifetime.SINGLETON:
        return SingletonProvider(service_type, implementation)
    elif lifetime == Lifetime.SCOPED:
        return ScopedProvider(service_type, implementation)
    return TransientProvider(service_type, implementation)


__all__ = [
    "Dependency",
    "Provider",
    "SingletonProvider",
    "ScopedProvider",
    "TransientProvider",
    "FactoryProvider",
    "InstanceProvider",
    "collect_dependencies",
    "create_provider",
]
