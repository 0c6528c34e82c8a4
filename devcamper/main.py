"""
DevCamper Backend — FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() assembles middleware, exception handlers and routers
       around the lifespan below.
Who:   uvicorn (`uvicorn devcamper.main:app`) and the test suite.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────────┐ ┌──────────┐ ┌─────────────────┐  │
    │  │  Rate Limit  │→│ Req ID   │→│  Logging        │  │
    │  └──────────────┘ └──────────┘ └─────────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────────┐ ┌───────────┐ ┌────────────┐  │
    │  │ /api/v1/bootcamps│ │ /uploads  │ │ /health    │  │
    │  └──────────────────┘ └───────────┘ └────────────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌───────────────────────────────────────────────┐  │
    │  │ DevCamperError.status_code → error envelope   │  │
    │  └───────────────────────────────────────────────┘  │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, configuration check, upload directory
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from devcamper import __version__
from devcamper.config import settings
from devcamper.database import dispose_engine
from devcamper.exceptions import (
    AuthenticationError,
    DatabaseError,
    DevCamperError,
    FileStorageError,
    ForbiddenError,
    GeocodingError,
    NotFoundError,
    ValidationError,
)
from devcamper.middleware.logging import RequestLoggingMiddleware
from devcamper.middleware.rate_limit import RateLimitMiddleware
from devcamper.middleware.request_id import RequestIDMiddleware, request_id_var
from devcamper.routes import bootcamps, health, uploads

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the whole application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s, to stdout.
    Called once from the lifespan, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Chatty third-party loggers
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:
        1. Setup logging
        2. Validate configuration (logged, not fatal: public reads still work)
        3. Create the upload directory
    Shutdown:
        1. Dispose the database engine
    """
    setup_logging()
    logger.info("=" * 60)
    logger.info("DevCamper Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))

    uploads_dir = Path(settings.file_upload_path)
    uploads_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Upload directory: %s", uploads_dir.resolve())

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("DevCamper Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _request_id(request: Request) -> str:
    return request_id_var.get("") or getattr(request.state, "request_id", "")


def error_response(
    request: Request,
    status_code: int,
    message: str,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """The `{"success": false, "error": ..., "request_id": ...}` envelope."""
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": message,
            "request_id": _request_id(request),
        },
        headers=headers,
    )


def _format_validation_errors(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        # loc is ("body", "name") / ("path", "distance"); the first part is noise
        field = ".".join(str(part) for part in error.get("loc", ())[1:])
        msg = error.get("msg", "Invalid value")
        messages.append(f"{field}: {msg}" if field else msg)
    return ", ".join(messages) or "Invalid request"


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to the error envelope.

    Handler hierarchy:
        ValidationError         → 400 (413 for FileTooLargeError)
        RequestValidationError  → 400
        AuthenticationError     → 401
        ForbiddenError          → 403
        NotFoundError           → 404
        RateLimitExceededError  → 429 (rendered by RateLimitMiddleware)
        FileStorageError        → 500
        DatabaseError           → 500 (generic message)
        GeocodingError          → 503
        DevCamperError (base)   → its status_code
        HTTPException           → its status code (unknown routes, bad methods)
        Exception (fallback)    → 500 (generic message)

    Context dicts are logged, never returned.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", _request_id(request), exc.message)
        return error_response(request, exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        message = _format_validation_errors(exc)
        logger.warning("[%s] Request validation failed: %s", _request_id(request), message)
        return error_response(request, 400, message)

    @app.exception_handler(AuthenticationError)
    async def handle_authentication(request: Request, exc: AuthenticationError):
        logger.info("[%s] Authentication failed: %s", _request_id(request), exc.context)
        return error_response(request, 401, exc.message)

    @app.exception_handler(ForbiddenError)
    async def handle_forbidden(request: Request, exc: ForbiddenError):
        logger.warning("[%s] Forbidden: %s", _request_id(request), exc.message)
        return error_response(request, 403, exc.message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return error_response(request, 404, exc.message)

    @app.exception_handler(FileStorageError)
    async def handle_file_storage(request: Request, exc: FileStorageError):
        logger.error("[%s] File storage error: %s | %s", _request_id(request), exc.message, exc.context)
        return error_response(request, 500, exc.message)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error("[%s] Database error: %s | %s", _request_id(request), exc.message, exc.context)
        return error_response(request, 500, "A database error occurred. Please try again.")

    @app.exception_handler(GeocodingError)
    async def handle_geocoding_error(request: Request, exc: GeocodingError):
        logger.error("[%s] Geocoding error: %s | %s", _request_id(request), exc.message, exc.context)
        return error_response(request, 503, exc.message)

    @app.exception_handler(DevCamperError)
    async def handle_devcamper_error(request: Request, exc: DevCamperError):
        logger.error("[%s] %s: %s", _request_id(request), type(exc).__name__, exc.message)
        return error_response(request, exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return error_response(request, exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("[%s] Unhandled exception: %s", _request_id(request), type(exc).__name__)
        return error_response(request, 500, "An unexpected error occurred.")


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """Assemble middleware, exception handlers and routers around the lifespan."""
    app = FastAPI(
        title="DevCamper API",
        description=(
            "Bootcamp directory: browse, search by distance, and let publishers "
            "manage their own bootcamp and its photo."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Middleware executes in REVERSE order of addition:
    # RateLimit → RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RateLimitMiddleware)

    register_exception_handlers(app)

    app.include_router(bootcamps.router)
    app.include_router(uploads.router)
    app.include_router(health.router)

    return app


app = create_app()
