"""
Blog API — FastAPI Application Factory
======================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires middleware, exception handlers and the /posts
       router around a `Database` handle kept on `app.state.database`.
Who:   `blog_api.server.run_server()` (which connects storage first),
       uvicorn (`uvicorn blog_api.main:app`), and the tests.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────────┐ ┌──────────────────────────────┐  │
    │  │  Req ID      │→│  Logging                     │  │
    │  └──────────────┘ └──────────────────────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ GET/POST /posts   GET/PUT/DELETE /posts/{id} │   │
    │  └──────────────────────────────────────────────┘   │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ Validation→400 │ Unmatched→404 │ Database→500 │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Storage ownership:
    If the app starts with a connected Database (run_server, tests), the
    caller owns it. Otherwise the lifespan connects it on startup and
    disposes it on shutdown.
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from blog_api import __version__
from blog_api.config import settings
from blog_api.database import Database
from blog_api.exceptions import BlogApiError, DatabaseError, ValidationError
from blog_api.middleware.logging import RequestLoggingMiddleware
from blog_api.middleware.request_id import RequestIDMiddleware, request_id_var
from blog_api.routes import posts

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"
NOT_FOUND_MESSAGE = "Not Found"


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once by the process entry point before anything else logs.
    """
    log_format = (
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    )

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
        force=True,
    )

    # blog_api.access already covers every request
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Connect storage on startup and dispose it on shutdown, unless whoever
    built the app already connected it.
    """
    database: Database = app.state.database
    owns_database = not database.is_connected

    if owns_database:
        setup_logging()
        logger.info("Blog API %s starting up...", __version__)
        await database.connect()

    yield

    if owns_database:
        logger.info("Blog API shutting down...")
        await database.disconnect()
        logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request body"
    first = errors[0]
    if first.get("type") == "json_invalid":
        return "Request body is not valid JSON"
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    if location:
        return f"Invalid request body: `{location}` {first.get('msg', 'is invalid')}"
    return f"Invalid request body: {first.get('msg', 'is invalid')}"


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to status codes and `{"message": ...}` bodies.

    Handler hierarchy:
        ValidationError          → 400 (message returned verbatim)
        RequestValidationError   → 400 (body did not parse)
        HTTPException 404/405    → 404 "Not Found"
        HTTPException (other)    → its own status, detail as message
        DatabaseError            → 500 "Internal server error"
        BlogApiError (base)      → 500 "Internal server error"
        Exception (fallback)     → 500 "Internal server error"

    Storage details are logged server-side only.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error: %s", rid, exc.message)
        return JSONResponse(status_code=400, content={"message": exc.message})

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        message = _describe_validation_error(exc)
        logger.warning("[%s] Rejected request body: %s", rid, message)
        return JSONResponse(status_code=400, content={"message": message})

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        # Unknown paths and unsupported methods share the catch-all answer.
        if exc.status_code in (404, 405):
            return JSONResponse(status_code=404, content={"message": NOT_FOUND_MESSAGE})
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(status_code=500, content={"message": INTERNAL_ERROR_MESSAGE})

    @app.exception_handler(BlogApiError)
    async def handle_application_error(request: Request, exc: BlogApiError):
        rid = request_id_var.get("")
        logger.error("[%s] Application error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(status_code=500, content={"message": INTERNAL_ERROR_MESSAGE})

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(status_code=500, content={"message": INTERNAL_ERROR_MESSAGE})


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(database: Optional[Database] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        database: Storage handle to serve from. Defaults to an unconnected
                  handle for `settings.database_url`, connected by the lifespan.

    The interactive docs are disabled: every path outside /posts answers
    with the catch-all 404.
    """
    app = FastAPI(
        title="Blog API",
        description="Create, read, update and delete blog posts.",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )
    app.state.database = database or Database(settings.database_url)

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → routes
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(posts.router)

    return app


# uvicorn expects `blog_api.main:app` to be importable; nothing connects
# until the lifespan runs.
app = create_app()
