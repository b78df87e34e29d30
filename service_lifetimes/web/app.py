"""
Application factory.

Wires the container into a FastAPI application:

    RequestScopeMiddleware -> GuidMiddleware -> router (pages)

The container is built, and validated when the options ask for it, before
the application object exists, so a wiring defect fails startup instead of
the first request.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from ..config import AppSettings
from ..di import Container
from ..exceptions import ServiceLifetimesError
from ..observability import get_logger, get_scope_id
from ..services import configure_services
from . import pages
from .middleware import GuidMiddleware, RequestScopeMiddleware

logger = get_logger(__name__)

STATIC_DIR = Path(__file__).parent / "static"


def _error_page(request: Request, scope_id: str | None):
    return pages.templates.TemplateResponse(
        request, "error.html", {"scope_id": scope_id}, status_code=500
    )


def install_error_handlers(app: FastAPI, settings: AppSettings) -> None:
    """
    Map service errors to responses: a detailed JSON diagnostic in
    development, the generic error page otherwise.

    Outside development every other unhandled exception also renders the
    generic error page instead of a plain-text 500.
    """

    @app.exception_handler(ServiceLifetimesError)
    async def _service_error_handler(request: Request, exc: ServiceLifetimesError):
        scope_id = get_scope_id()
        logger.error(f"{type(exc).__name__} while handling {request.url.path}: {exc}")
        if settings.is_development:
            return JSONResponse(
                status_code=500,
                content={
                    "error": type(exc).__name__,
                    "detail": exc.message,
                    "context": {k: str(v) for k, v in exc.context.items()},
                    "scope_id": scope_id,
                },
            )
        return _error_page(request, scope_id)

    if settings.is_development:
        return

    @app.exception_handler(Exception)
    async def _unhandled_error_handler(request: Request, exc: Exception):
        logger.error(
            f"Unhandled {type(exc).__name__} while handling {request.url.path}", exc_info=exc
        )
        return _error_page(request, get_scope_id())


def create_app(
    settings: Optional[AppSettings] = None,
    container: Optional[Container] = None,
) -> FastAPI:
    """
    Create the web application.

    Args:
        settings: Application settings (defaults to AppSettings.from_env())
        container: Container with registrations (defaults to the identifier
                   services from configure_services). Built here unless it
                   already is.

    Returns:
        Configured FastAPI application

    Raises:
        ConfigurationError: If validate_on_build is set and the graph is invalid
    """
    settings = settings or AppSettings.from_env()
    if container is None:
        container = configure_services(Container())
    if not container.is_built:
        container.build(settings.provider_options())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            f"Starting in {settings.environment} "
            f"(validate_scopes={container.options.validate_scopes}, "
            f"validate_on_build={container.options.validate_on_build})"
        )
        yield
        container.dispose()
        logger.info("Container disposed")

    app = FastAPI(
        title="Service Lifetimes",
        description="Singleton, scoped and transient services in a request pipeline",
        lifespan=lifespan,
        debug=settings.is_development,
    )
    app.state.container = container
    app.state.settings = settings

    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    # Last added runs first: the scope must exist before GuidMiddleware runs
    app.add_middleware(GuidMiddleware)
    app.add_middleware(RequestScopeMiddleware, container=container)

    app.include_router(pages.router)
    install_error_handlers(app, settings)
    return app
