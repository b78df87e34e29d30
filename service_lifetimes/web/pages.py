"""
Pages

The page handler resolves the identifier services from the same request
scope the middleware used and renders both observations side by side:
- singleton: identical in middleware and page, identical across requests
- scoped: identical in middleware and page, new on every request
- transient: new on every resolution
"""

from pathlib import Path
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from ..di import RequestScope
from ..services import (
    GuidTrimmer,
    ScopedGuidService,
    SingletonGuidService,
    TransientGuidService,
)
from .dependencies import get_request_scope, inject

TEMPLATES_DIR = Path(__file__).parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

router = APIRouter()


def _observations(
    request: Request,
    scope: RequestScope,
    singleton: SingletonGuidService,
    scoped: ScopedGuidService,
    transient: TransientGuidService,
    trimmer: GuidTrimmer,
) -> dict[str, Any]:
    return {
        "scope_id": scope.scope_id,
        "handler": {
            "singleton": singleton.get_guid(),
            "scoped": scoped.get_guid(),
            "transient": transient.get_guid(),
        },
        "middleware": getattr(request.state, "middleware_guids", None),
        "trimmed_singleton": trimmer.trim(),
    }


@router.get("/", response_class=HTMLResponse)
async def index(
    request: Request,
    scope: RequestScope = Depends(get_request_scope),
    singleton: SingletonGuidService = Depends(inject(SingletonGuidService)),
    scoped: ScopedGuidService = Depends(inject(ScopedGuidService)),
    transient: TransientGuidService = Depends(inject(TransientGuidService)),
    trimmer: GuidTrimmer = Depends(inject(GuidTrimmer)),
):
    """Render the identifiers seen by the middleware and by this page."""
    context = _observations(request, scope, singleton, scoped, transient, trimmer)
    return templates.TemplateResponse(request, "index.html", context)


@router.get("/api/guids")
async def guids(
    request: Request,
    scope: RequestScope = Depends(get_request_scope),
    singleton: SingletonGuidService = Depends(inject(SingletonGuidService)),
    scoped: ScopedGuidService = Depends(inject(ScopedGuidService)),
    transient: TransientGuidService = Depends(inject(TransientGuidService)),
    trimmer: GuidTrimmer = Depends(inject(GuidTrimmer)),
) -> dict[str, Any]:
    """The same observations as the index page, as JSON."""
    return _observations(request, scope, singleton, scoped, transient, trimmer)


@router.get("/error", response_class=HTMLResponse)
async def error_page(request: Request):
    """Generic error page shown in production."""
    return templates.TemplateResponse(request, "error.html", {})
