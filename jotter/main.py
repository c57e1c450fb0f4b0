"""
Jotter — FastAPI Application Factory
=====================================

What:  Creates and configures the FastAPI application instance.
How:   create_app(settings) builds the engine and session factory, stores
       them on `app.state`, registers middleware, exception handlers and
       routes. uvicorn serves the module-level `app` (jotter.main:app).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌──────────┐ ┌─────────┐ ┌────────┐  │
    │  │  Req ID  │→│ Logging  │→│ Session │→│  GZip  │  │
    │  └──────────┘ └──────────┘ └─────────┘ └────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────────────────┐ ┌─────────────────┐  │
    │  │ /notes ... (HTML pages)  │ │ GET /health     │  │
    │  └──────────────────────────┘ └─────────────────┘  │
    │                                                     │
    │  Exception Handlers (HTML error pages):             │
    │  ┌──────────────────────────────────────────────┐  │
    │  │ NotFound→404 │ HTTPException→status │ DB→500 │  │
    │  └──────────────────────────────────────────────┘  │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, configuration check, optional create_all
    Shutdown: dispose the engine (close pooled connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.gzip import GZipMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from jotter import __version__
from jotter.config import Settings, settings as default_settings
from jotter.database import build_engine, build_session_factory, create_tables
from jotter.exceptions import JotterError, NotFoundError, PersistenceError
from jotter.middleware.logging import RequestLoggingMiddleware
from jotter.middleware.request_id import RequestIDMiddleware, request_id_var
from jotter.rendering import render_error
from jotter.routes import health, notes

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(log_level: str = "INFO") -> None:
    """
    Configure the root logger once at startup.

    Format: 2024-01-15T12:00:00 [INFO] jotter.access: GET /notes 200 ...
    """
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers that are chatty at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    app_settings: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(app_settings.log_level)
    logger.info("Jotter %s starting up...", __version__)

    try:
        app_settings.validate_required_for_production()
    except ValueError as e:
        logger.warning("Configuration warning: %s", str(e))

    if app_settings.auto_create_tables:
        await create_tables(app.state.engine)
        logger.info("Database tables ensured (auto_create_tables=True)")

    logger.info("Server ready at http://%s:%d", app_settings.backend_host, app_settings.backend_port)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Jotter shutting down...")
    await app.state.engine.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to HTML error pages.

    Handler hierarchy:
        NotFoundError           → 404
        RequestValidationError  → 404 (malformed ids such as /notes/abc)
        StarletteHTTPException  → its own status (unknown path 404, 405, 419)
        PersistenceError        → 500, generic message
        JotterError (base)      → 500
        Exception (fallback)    → 500

    ValidationError never reaches these handlers: the note routes recover
    from it by re-rendering the form.
    """

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return render_error(request, 404, "Not Found", exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        logger.info("[%s] Rejected request parameters on %s: %s", rid, request.url.path, exc.errors())
        return render_error(request, 404, "Not Found", "The requested page was not found.")

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        titles = {404: "Not Found", 405: "Method Not Allowed", 419: "Page Expired"}
        title = titles.get(exc.status_code, "Error")
        message = exc.detail if isinstance(exc.detail, str) else title
        if exc.status_code == 404:
            message = "The requested page was not found."
        elif exc.status_code == 419:
            message = "Your session has expired. Please reload the form and try again."
        response = render_error(request, exc.status_code, title, message)
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(PersistenceError)
    async def handle_persistence_error(request: Request, exc: PersistenceError):
        rid = request_id_var.get("")
        logger.error("[%s] Persistence error: %s | Context: %s", rid, exc.message, exc.context)
        return render_error(
            request,
            500,
            "Something went wrong",
            "We could not reach the note store. Please try again later.",
        )

    @app.exception_handler(JotterError)
    async def handle_jotter_error(request: Request, exc: JotterError):
        rid = request_id_var.get("")
        logger.error("[%s] Application error: %s | Context: %s", rid, exc.message, exc.context)
        return render_error(request, 500, "Something went wrong", exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return render_error(
            request,
            500,
            "Something went wrong",
            "An unexpected error occurred. Please try again.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        app_settings: configuration to use; defaults to the environment-loaded
                      singleton. Tests pass their own (e.g. a temp SQLite URL).
    """
    app_settings = app_settings or default_settings

    app = FastAPI(
        title="Jotter",
        description="Server-rendered note-taking application.",
        version=__version__,
        docs_url="/docs",
        redoc_url=None,
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Persistence handles injected through app.state, read by get_db_session
    engine = build_engine(app_settings)
    app.state.settings = app_settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added = first to execute
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(
        SessionMiddleware,
        secret_key=app_settings.secret_key,
        session_cookie="jotter_session",
        same_site="lax",
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(notes.router)
    app.include_router(health.router)

    return app


app = create_app()
