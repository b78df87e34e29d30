"""
FastAPI Dependencies for SERVICE_LIFETIMES

Usage:
    from fastapi import Depends
    from service_lifetimes.web.dependencies import inject

    @app.get("/guid")
    async def get_guid(svc: ScopedGuidService = Depends(inject(ScopedGuidService))):
        return {"guid": svc.get_guid()}
"""

from collections.abc import Callable, Coroutine
from typing import Any, TypeVar

from fastapi import Depends, Request

from ..di import Container, RequestScope
from ..exceptions import InvalidOperationError, MissingScopeError

T = TypeVar("T")


async def get_container(request: Request) -> Container:
    """Get the DI container from app state."""
    container = getattr(request.app.state, "container", None)
    if container is None:
        raise InvalidOperationError("No container configured on the application")
    return container


async def get_request_scope(request: Request) -> RequestScope:
    """
    Get the RequestScope opened for this request.

    Raises:
        MissingScopeError: If RequestScopeMiddleware did not open a scope
    """
    scope = getattr(request.state, "service_scope", None)
    if scope is None:
        raise MissingScopeError(
            "No active request scope. Ensure RequestScopeMiddleware is installed."
        )
    return scope


def inject(service_type: type[T]) -> Callable[..., Coroutine[Any, Any, T]]:
    """
    FastAPI dependency that resolves a service from the request's scope.

    Handlers and middleware of one request resolve from the same scope, so
    Scoped services are shared between them.
    """

    async def _dependency(scope: RequestScope = Depends(get_request_scope)) -> T:
        return scope.resolve(service_type)

    return _dependency


# Alias for cleaner syntax
Inject = inject
