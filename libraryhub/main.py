"""
LibraryHub Backend — FastAPI Application Factory
==================================================

What:  Creates and configures the FastAPI application instance.
Who:   uvicorn (`uvicorn libraryhub.main:app`) and the test client.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware Chain:                                       │
    │  ┌──────────┐ ┌──────────┐ ┌──────┐ ┌──────┐             │
    │  │  Req ID  │→│ Logging  │→│ GZip │→│ CORS │             │
    │  └──────────┘ └──────────┘ └──────┘ └──────┘             │
    │                                                          │
    │  Routes:                                                 │
    │  /api/categories  /api/search  /api/home  /api/loans     │
    │  /api/students/{account}  /api/recommendations  /health  │
    │                                                          │
    │  Exception Handlers:                                     │
    │  Validation→400 │ Auth→401 │ NotFound→404 │ DB→500       │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, configuration check (logged, never fatal)
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from libraryhub import __version__
from libraryhub.config import settings
from libraryhub.database import dispose_engine
from libraryhub.exceptions import (
    AuthenticationError,
    DatabaseError,
    LibraryError,
    NotFoundError,
    ValidationError,
)
from libraryhub.middleware.logging import AccessLogMiddleware
from libraryhub.middleware.request_id import RequestIDMiddleware, request_id_var
from libraryhub.routes import categories, health, recommendations, search, students

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once, before anything else logs.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    The request id is added by the access-log middleware and by the
    exception handlers, not by the formatter.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # uvicorn's access log duplicates AccessLogMiddleware
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: logging and configuration check. Shutdown: close the pool."""
    setup_logging()
    logger.info("=" * 60)
    logger.info("LibraryHub Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving so /health and the docs stay reachable.
        logger.error("Configuration error: %s", str(e))

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("LibraryHub Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(
    status_code: int,
    error: str,
    message: str,
    details: dict = None,
) -> JSONResponse:
    content = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map LibraryError subclasses to HTTP responses.

    Handler hierarchy:
        ValidationError      → 400
        AuthenticationError  → 401
        NotFoundError        → 404
        DatabaseError        → 500 (generic message, context logged)
        LibraryError (base)  → 500
        Exception (fallback) → 500 (traceback logged)
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error_response(400, exc.error_code, exc.message, exc.context)

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        logger.info("[%s] Rejected request to %s: %s", request_id_var.get(""), request.url.path, exc.message)
        return _error_response(401, exc.error_code, exc.message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(404, exc.error_code, exc.message)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return _error_response(500, exc.error_code, "An internal error occurred. Please try again later.")

    @app.exception_handler(LibraryError)
    async def handle_library_error(request: Request, exc: LibraryError):
        logger.error("[%s] Unhandled library error: %s", request_id_var.get(""), exc.message)
        return _error_response(500, exc.error_code, exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return _error_response(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """Assemble middleware, exception handlers and routers into a new app."""
    app = FastAPI(
        title="LibraryHub API",
        description=(
            "Read side of the library system: category tree, book search, "
            "student home page, loan history and recommendations."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Middleware runs in reverse order of addition: RequestID first.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,  # session cookie
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Total-Count"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(categories.router)
    app.include_router(search.router)
    app.include_router(students.router)
    app.include_router(recommendations.router)
    app.include_router(health.router)

    return app


app = create_app()
