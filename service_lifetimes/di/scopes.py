"""
Service Lifetimes and Request Scopes

Defines service lifetimes:
- SINGLETON: Created once, shared across all requests
- SCOPED: Created once per request scope, released when the scope ends
- TRANSIENT: Created fresh on every resolution

and the RequestScope that owns scoped instances for one request.
"""

import logging
import threading
import uuid
from collections.abc import Callable
from contextvars import ContextVar
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional, TypeVar

from ..exceptions import InvalidOperationError

if TYPE_CHECKING:
    from .container import Container

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Scope of the request being processed in the current context
_current_scope: ContextVar[Optional["RequestScope"]] = ContextVar("current_scope", default=None)


class Lifetime(Enum):
    """
    Service lifetimes.

    SINGLETON: One instance for the entire process lifetime.
               Use for: configuration, caches, process-wide identity.

    SCOPED: One instance per request scope. Released when the scope ends.
            Use for: request context, unit of work.

    TRANSIENT: New instance created every time it's resolved.
               Use for: stateless services, utilities.
    """

    SINGLETON = "singleton"
    SCOPED = "scoped"
    TRANSIENT = "transient"


def dispose_instance(instance: Any) -> None:
    """Call the teardown hook of an instance, if it defines one."""
    for hook in ("dispose", "close"):
        method = getattr(instance, hook, None)
        if callable(method):
            method()
            return


class RequestScope:
    """
    Logical container bound to one request.

    Owns every Scoped instance resolved through it. Instances are created
    lazily on first resolution and released, in reverse creation order,
    when the scope ends.

    Usage:
        with container.create_scope() as scope:
            guid = scope.resolve(ScopedGuidService).get_guid()
    """

    def __init__(self, container: "Container"):
        self.container = container
        self.scope_id = uuid.uuid4().hex[:12]
        self._instances: dict[Any, Any] = {}
        # Reentrant: a scoped factory may resolve other scoped services
        self._lock = threading.RLock()
        self._closed = False
        self._previous: Optional["RequestScope"] = None

    @property
    def closed(self) -> bool:
        return self._closed

    def resolve(self, service_type: type[T]) -> T:
        """Resolve a service from the container within this scope."""
        self._ensure_open()
        return self.container.resolve(service_type, scope=self)

    def get_or_create(self, key: Any, factory: Callable[[], T]) -> T:
        """
        Get an existing instance from this scope or create one.

        Args:
            key: The service type used as cache key
            factory: Callable creating a new instance if not cached

        Returns:
            The cached or newly created instance

        Raises:
            InvalidOperationError: If the scope has already ended
        """
        with self._lock:
            self._ensure_open()
            if key not in self._instances:
                self._instances[key] = factory()
                logger.debug(
                    f"Created scoped instance {getattr(key, '__name__', key)} "
                    f"in scope {self.scope_id}"
                )
            return self._instances[key]

    def owns(self, key: Any) -> bool:
        """Check whether an instance for key was created in this scope."""
        with self._lock:
            return key in self._instances

    def end(self) -> None:
        """
        End the scope and release the instances it owns.

        Calls dispose() (or close()) on instances that define it. Calling
        end() again is a no-op.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            instances = list(self._instances.values())
            self._instances.clear()

        for instance in reversed(instances):
            try:
                dispose_instance(instance)
            except (AttributeError, RuntimeError, TypeError) as e:
                logger.warning(f"Error disposing {type(instance).__name__}: {e}")
        logger.debug(f"Request scope {self.scope_id} ended ({len(instances)} instance(s))")

    def _ensure_open(self) -> None:
        if self._closed:
            raise InvalidOperationError(
                "Cannot use a request scope after it has ended",
                context={"scope_id": self.scope_id},
            )

    def __enter__(self) -> "RequestScope":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.end()
        return False

    async def __aenter__(self) -> "RequestScope":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.end()
        return False

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<RequestScope {self.scope_id} {state}>"


class ScopeManager:
    """
    Tracks the request scope of the current execution context.

    Usage with FastAPI middleware:
        @app.middleware("http")
        async def scope_middleware(request: Request, call_next):
            async with ScopeManager.request_scope(container):
                response = await call_next(request)
            return response
    """

    @classmethod
    def begin(cls, container: "Container") -> RequestScope:
        """
        Begin a new request scope and make it the current one.

        Returns the scope handle; pass it to end() when the request completes.
        """
        scope = container.create_scope()
        scope._previous = _current_scope.get()
        _current_scope.set(scope)
        logger.debug(f"Request scope {scope.scope_id} started")
        return scope

    @classmethod
    def end(cls, scope: RequestScope) -> None:
        """End a request scope and restore the previous current scope."""
        try:
            scope.end()
        finally:
            if _current_scope.get() is scope:
                _current_scope.set(scope._previous)
            scope._previous = None

    @classmethod
    def current(cls) -> RequestScope | None:
        """Get the current request scope, if any."""
        return _current_scope.get()

    @classmethod
    def request_scope(cls, container: "Container") -> "_RequestScopeContext":
        """
        Async context manager for a request scope.

        The scope is ended on normal exit, on error and on cancellation.

        Usage:
            async with ScopeManager.request_scope(container) as scope:
                # Scoped services resolved through scope live until exit
                pass
        """
        return _RequestScopeContext(container)


class _RequestScopeContext:
    """Async context manager for request scope."""

    def __init__(self, container: "Container"):
        self._container = container
        self._scope: RequestScope | None = None

    async def __aenter__(self) -> RequestScope:
        self._scope = ScopeManager.begin(self._container)
        return self._scope

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        if self._scope is not None:
            ScopeManager.end(self._scope)
            self._scope = None
        return False
