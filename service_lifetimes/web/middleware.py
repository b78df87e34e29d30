"""
Request pipeline middleware.

RequestScopeMiddleware opens one RequestScope per request and always ends
it. GuidMiddleware is the pipeline stage that resolves the identifier
services from that scope before the page handler does.
"""

from typing import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..di import Container, ScopeManager
from ..observability import clear_scope_context, get_logger, set_scope_context
from ..services import ScopedGuidService, SingletonGuidService, TransientGuidService
from .dependencies import get_request_scope

logger = get_logger(__name__)

SCOPED_HEADER = "X-Scoped-Guid"
SINGLETON_HEADER = "X-Singleton-Guid"
TRANSIENT_HEADER = "X-Transient-Guid"
SCOPE_ID_HEADER = "X-Request-Scope"


class RequestScopeMiddleware(BaseHTTPMiddleware):
    """
    Middleware that creates a RequestScope for each HTTP request.

    The scope is stored on request.state.service_scope and ended when the
    response has been produced, when the request faults and when it is
    cancelled.

    Usage:
        app.add_middleware(RequestScopeMiddleware, container=container)
    """

    def __init__(self, app, container: Container):
        super().__init__(app)
        self.container = container

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        scope = ScopeManager.begin(self.container)
        request.state.service_scope = scope
        set_scope_context(scope.scope_id, method=request.method, path=request.url.path)
        try:
            response = await call_next(request)
            response.headers[SCOPE_ID_HEADER] = scope.scope_id
            return response
        finally:
            ScopeManager.end(scope)
            clear_scope_context()


class GuidMiddleware(BaseHTTPMiddleware):
    """
    Pipeline stage observing the identifier services.

    Resolves the singleton, scoped and transient identifiers from the
    request scope, records them on request.state.middleware_guids, logs
    them, forwards the request and attaches them as response headers.
    Resolution failures propagate; the stage never short-circuits otherwise.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        scope = await get_request_scope(request)

        guids = {
            "singleton": scope.resolve(SingletonGuidService).get_guid(),
            "scoped": scope.resolve(ScopedGuidService).get_guid(),
            "transient": scope.resolve(TransientGuidService).get_guid(),
        }
        request.state.middleware_guids = guids
        logger.info(
            f"Middleware observed singleton={guids['singleton']} "
            f"scoped={guids['scoped']} transient={guids['transient']}"
        )

        response = await call_next(request)

        response.headers[SINGLETON_HEADER] = guids["singleton"]
        response.headers[SCOPED_HEADER] = guids["scoped"]
        response.headers[TRANSIENT_HEADER] = guids["transient"]
        return response
