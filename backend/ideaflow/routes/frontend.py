"""
IdeaFlow Backend — Frontend Fallback Routes
=============================================

What:  Serves the prebuilt single-page frontend from FRONTEND_BUILD_DIR.
How:   Registered after every API router. A GET for an existing file in the
       build directory returns that file; any other path returns index.html
       so the frontend's client-side router can handle it.

Exclusions:
    /api/*      → 404 JSON (an unknown API route must not return HTML)
                 307 to the path without its trailing slash when that is a route
                 405 JSON when the path exists for other methods only
    /uploads/*  → 404 JSON (missing uploads are served by the StaticFiles mount)
    no build    → 500 JSON "Frontend not built"
"""

import logging
from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import FileResponse, RedirectResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.routing import Match

from ideaflow.config import settings
from ideaflow.exceptions import IdeaFlowError, NotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(include_in_schema=False)

RESERVED_PREFIXES = ("api", "uploads")


def _is_reserved(path: str) -> bool:
    head = path.split("/", 1)[0]
    return head in RESERVED_PREFIXES


def _build_file(build_dir: Path, path: str):
    """Returns the file inside build_dir for `path`, or None (never escapes build_dir)."""
    if not path:
        return None
    candidate = (build_dir / path).resolve()
    if build_dir not in candidate.parents or not candidate.is_file():
        return None
    return candidate


def _match_api_route(request: Request, path: str) -> Match:
    """How well `path` matches a real API route for this request's method."""
    scope = {**request.scope, "path": path}
    best = Match.NONE
    for route in request.app.router.routes:
        if getattr(route, "endpoint", None) in (unknown_api_route, serve_frontend):
            continue
        match, _ = route.matches(scope)
        if match == Match.FULL:
            return match
        if match == Match.PARTIAL:
            best = match
    return best


@router.api_route(
    "/api/{path:path}",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
)
async def unknown_api_route(request: Request, path: str):
    url_path = request.url.path
    stripped = url_path.rstrip("/")
    if stripped != url_path and _match_api_route(request, stripped) == Match.FULL:
        return RedirectResponse(str(request.url.replace(path=stripped)), status_code=307)
    if _match_api_route(request, url_path) == Match.PARTIAL:
        raise StarletteHTTPException(status_code=405, detail="Method Not Allowed")
    raise NotFoundError(resource="API route", resource_id=f"/api/{path}")


@router.get("/{path:path}")
async def serve_frontend(path: str):
    if _is_reserved(path):
        raise NotFoundError(resource="path", resource_id=f"/{path}")

    build_dir = Path(settings.frontend_build_dir).resolve()
    index = build_dir / "index.html"
    if not index.is_file():
        logger.error("Frontend build missing: %s", index)
        raise IdeaFlowError(
            message="Frontend not built",
            context={"build_dir": str(build_dir)},
        )

    target = _build_file(build_dir, path)
    return FileResponse(target or index)
