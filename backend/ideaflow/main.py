"""
IdeaFlow Backend — FastAPI Application Factory
================================================

What:  Creates and configures the FastAPI application instance.
How:   `create_app()` assembles middleware, exception handlers, routers, the
       /uploads static mount and the lifespan. The data-store handle, the
       file storage and the caller resolver are application state: injected
       by the caller (tests) or built at startup.
Who:   uvicorn imports `ideaflow.main:app`.

Application Architecture:
    ┌───────────────────────────────────────────────────────────────┐
    │                         FastAPI App                           │
    │                                                               │
    │  Middleware: RequestID → Logging → NoCache → GZip → CORS      │
    │                                                               │
    │  /health  /api  /api/register  /api/login  /api/profile/..    │
    │  /api/cases/..  /api/processed-cases/..  /api/projects/..     │
    │  /api/reviews   /uploads/* (static)      /* (frontend build)  │
    │                                                               │
    │  app.state.db               Database (engine + sessions)      │
    │  app.state.storage          FileStorage                       │
    │  app.state.caller_resolver  CallerResolver                    │
    └───────────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Configure logging, validate configuration
    2. Build storage and Database unless injected
    3. Probe the database (tenacity backoff), create missing tables
    Shutdown:
    1. Dispose the Database the lifespan built
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from ideaflow import __version__
from ideaflow.config import settings
from ideaflow.database import Database
from ideaflow.exceptions import (
    AuthenticationError,
    ConflictError,
    DatabaseError,
    FileStorageError,
    IdeaFlowError,
    NotFoundError,
    ValidationError,
)
from ideaflow.middleware.cache_control import NoCacheMiddleware
from ideaflow.middleware.logging import RequestLoggingMiddleware
from ideaflow.middleware.request_id import REQUEST_ID_HEADER, RequestIDMiddleware, request_id_var
from ideaflow.routes import cases, frontend, health, processed_cases, projects, reviews, users
from ideaflow.services.caller_service import CallerResolver, HeaderCallerResolver
from ideaflow.services.storage_service import UPLOADS_URL_PREFIX, FileStorage, LocalFileStorage

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """Configure the root logger once; module loggers inherit from it."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Build whatever application state was not injected, then tear down only
    what was built here. An injected Database belongs to its creator.
    """
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("IdeaFlow Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        logger.error("Fix the configuration and restart the server.")

    if getattr(app.state, "storage", None) is None:
        app.state.storage = LocalFileStorage()

    owns_database = getattr(app.state, "db", None) is None
    if owns_database:
        app.state.db = Database()
    database: Database = app.state.db

    await database.wait_until_ready()
    if settings.db_auto_create:
        await database.create_all()

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("IdeaFlow Backend shutting down...")
    if owns_database:
        await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(status_code: int, error: str, message: str, details=None) -> JSONResponse:
    content = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map the exception hierarchy onto HTTP responses.

    Handler hierarchy:
        ValidationError          → 400 validation_error
        RequestValidationError   → 400 validation_error
        ConflictError            → 400 conflict
        AuthenticationError      → 401 unauthorized
        NotFoundError            → 404 not_found
        StarletteHTTPException   → its own status
        FileStorageError         → 500 server_error
        DatabaseError            → 500 server_error (generic message)
        IdeaFlowError (base)     → 500 server_error
        Exception (fallback)     → 500 internal_server_error

    Server-side context is logged for every 5xx and never returned.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error_response(400, "validation_error", exc.message, exc.context)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        errors = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
            for err in exc.errors()
        ]
        logger.warning("[%s] Malformed request: %s", request_id_var.get(""), errors)
        return _error_response(400, "validation_error", "Invalid request", {"errors": errors})

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        logger.warning("[%s] Conflict: %s", request_id_var.get(""), exc.message)
        return _error_response(400, "conflict", exc.message, exc.context)

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        return _error_response(401, "unauthorized", exc.message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(404, "not_found", exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        error = "not_found" if exc.status_code == 404 else "http_error"
        return _error_response(exc.status_code, error, str(exc.detail))

    @app.exception_handler(FileStorageError)
    async def handle_file_storage_error(request: Request, exc: FileStorageError):
        rid = request_id_var.get("")
        logger.error("[%s] File storage error: %s | Context: %s", rid, exc.message, exc.context)
        return _error_response(500, "server_error", exc.message)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return _error_response(
            500, "server_error", "An internal error occurred. Please try again later."
        )

    @app.exception_handler(IdeaFlowError)
    async def handle_application_error(request: Request, exc: IdeaFlowError):
        rid = request_id_var.get("")
        logger.error("[%s] Application error: %s | Context: %s", rid, exc.message, exc.context)
        return _error_response(500, "server_error", exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", request_id_var.get(""), str(exc), exc_info=True)
        return _error_response(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    database: Optional[Database] = None,
    storage: Optional[FileStorage] = None,
    caller_resolver: Optional[CallerResolver] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Anything passed in is placed on app.state immediately, so the app is
    usable even by clients that never run the lifespan (httpx ASGITransport).
    """
    app = FastAPI(
        title="IdeaFlow API",
        description=(
            "Freelance marketplace backend: users post cases, executors accept "
            "and complete them, and participants review each other."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.state.db = database
    app.state.storage = storage
    app.state.caller_resolver = caller_resolver or HeaderCallerResolver()

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → NoCache → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(NoCacheMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(cases.router)
    app.include_router(processed_cases.router)
    app.include_router(projects.router)
    app.include_router(reviews.router)

    uploads_root = storage.root if isinstance(storage, LocalFileStorage) else Path(settings.uploads_dir)
    app.mount(
        UPLOADS_URL_PREFIX,
        StaticFiles(directory=str(uploads_root), check_dir=False),
        name="uploads",
    )

    # Catch-all: must stay last
    app.include_router(frontend.router)

    return app


app = create_app()
