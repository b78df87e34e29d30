"""
Web pipeline components.

Provides the FastAPI application factory, the request scope and identifier
middleware, and the request-scoped FastAPI dependencies.
"""

from .app import create_app
from .dependencies import Inject, get_container, get_request_scope, inject
from .middleware import GuidMiddleware, RequestScopeMiddleware

__all__ = [
    "create_app",
    "GuidMiddleware",
    "RequestScopeMiddleware",
    "get_container",
    "get_request_scope",
    "inject",
    "Inject",
]
