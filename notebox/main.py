"""
NoteBox: FastAPI Application Factory
=======================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes middleware registration, route mounting, error mapping
       and lifecycle management in one place.
How:   create_app(settings) builds a fresh app with its own Database,
       NoteStore and router. There is no module-level app; uvicorn is
       started in factory mode (see run()).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌──────────────┐ ┌─────────────────┐  │
    │  │ Req ID   │→│  Logging     │→│ Security Headers│  │
    │  └──────────┘ └──────────────┘ └─────────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  POST /add  POST /get  POST /update                 │
    │  GET /all   DELETE /delete   GET /health            │
    │                                                     │
    │  Exception Handlers:                                │
    │  Validation→400 │ NotFound→500/404 │ Persistence→500│
    │  Unmatched route→404 text │ Anything else→500 text  │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, database probe, optional schema creation
    Shutdown: dispose the engine (close pooled connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from notebox import __version__
from notebox.config import Settings, get_settings
from notebox.database import Database
from notebox.exceptions import (
    ErrorMessage,
    NotFoundError,
    PersistenceError,
    ValidationError,
    status_for,
)
from notebox.middleware.errors import UnhandledErrorMiddleware
from notebox.middleware.logging import RequestLoggingMiddleware
from notebox.middleware.request_id import RequestIDMiddleware, request_id_var
from notebox.middleware.security_headers import SecurityHeadersMiddleware
from notebox.routes import health
from notebox.routes.notes import create_notes_router
from notebox.services.note_store import NoteStore

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S"


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(settings: Settings) -> None:
    """
    Configure logging for the entire application.

    Handlers:
        - stdout: every record at the configured level
        - <log_dir>/all.log: same records, when log_dir is set
        - <log_dir>/error.log: ERROR and above only, when log_dir is set
    """
    level = getattr(logging, settings.log_level, logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if settings.log_dir:
        log_dir = Path(settings.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        handlers.append(logging.FileHandler(log_dir / "all.log", encoding="utf-8"))

        error_handler = logging.FileHandler(log_dir / "error.log", encoding="utf-8")
        error_handler.setLevel(logging.ERROR)
        handlers.append(error_handler)

    for handler in handlers:
        handler.setFormatter(formatter)

    logging.basicConfig(level=level, handlers=handlers, force=True)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:
        1. Setup logging
        2. Probe the database (failure is logged, the server still starts)
        3. Create tables when DB_CREATE_SCHEMA is on

    Shutdown:
        1. Dispose the engine
    """
    settings: Settings = app.state.settings
    database: Database = app.state.database

    setup_logging(settings)
    logger.info("NoteBox %s starting up...", __version__)

    if await database.connect() and settings.db_create_schema:
        await database.create_schema()
        logger.info("Database schema ensured")

    logger.info("Server ready at http://%s:%d%s", settings.host, settings.port, settings.notes_prefix)

    yield

    logger.info("NoteBox shutting down...")
    await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    """
    Map exceptions to responses.

    Handler table:
        ValidationError         → 400 {"message": ...}
        RequestValidationError  → 400 {"message": "Invalid request body"}
        NotFoundError           → status_for(NOT_FOUND), empty body
        PersistenceError        → 500, empty body
        404/405 from routing    → 404 "Not found"
        Exception (fallback)    → 500 "Server error"

    Security: database errors and stack traces are logged, never returned.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error on %s: %s", rid, request.url.path, exc.message)
        return JSONResponse(status_code=400, content={"message": exc.message})

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Malformed body on %s: %s", rid, request.url.path, exc.errors())
        return JSONResponse(
            status_code=400,
            content={"message": ErrorMessage.INVALID_BODY.value},
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        rid = request_id_var.get("")
        logger.error("[%s] %s | Context: %s", rid, exc.message, exc.context)
        return Response(status_code=status_for(exc.kind, settings.surface_not_found))

    @app.exception_handler(PersistenceError)
    async def handle_persistence_error(request: Request, exc: PersistenceError):
        rid = request_id_var.get("")
        logger.error(
            "[%s] %s | Context: %s",
            rid,
            exc.message,
            exc.context,
            exc_info=exc.__cause__ or exc,
        )
        return Response(status_code=status_for(exc.kind))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        # Unknown path and known path with the wrong method are both "not found"
        if exc.status_code in (404, 405):
            return PlainTextResponse(ErrorMessage.NOT_FOUND.value, status_code=404)
        return await http_exception_handler(request, exc)

    # Only reached for failures outside UnhandledErrorMiddleware
    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=exc)
        return PlainTextResponse(ErrorMessage.SERVER_ERROR.value, status_code=500)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Every call builds its own Database, NoteStore and router, so tests can
    run isolated apps side by side. Pass `database` to share an engine
    that the caller manages.
    """
    settings = settings or get_settings()
    database = database or Database(settings)

    app = FastAPI(
        title="NoteBox API",
        description="Create, read, update and delete short text notes.",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.database = database
    app.state.note_store = NoteStore(database.session_factory)

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → SecurityHeaders → UnhandledError → routes
    app.add_middleware(UnhandledErrorMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app, settings)

    app.include_router(create_notes_router(prefix=settings.notes_prefix))
    app.include_router(health.router)

    return app


def run() -> None:
    """Console entry point: serve create_app() on HOST:PORT."""
    settings = get_settings()
    uvicorn.run(
        "notebox.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_config=None,
    )
