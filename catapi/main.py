"""
Cat Registry API — FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes app configuration, middleware registration, route mounting,
       and lifecycle management in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn catapi.main:app).

Application Architecture:
    ┌──────────────────────────────────────────────────────┐
    │                    FastAPI App                       │
    │                                                      │
    │  Middleware Chain:                                   │
    │  ┌──────────────┐ ┌──────────┐ ┌─────────────────┐   │
    │  │  Req ID      │→│ Logging  │→│  Rate Limit     │   │
    │  └──────────────┘ └──────────┘ └─────────────────┘   │
    │                                                      │
    │  Routes:                                             │
    │  ┌──────────┐ ┌───────────┐ ┌──────────┐ ┌────────┐  │
    │  │/api/cats │ │/api/users │ │/api/auth │ │/health │  │
    │  └──────────┘ └───────────┘ └──────────┘ └────────┘  │
    │                                                      │
    │  Boundary Reporter:                                  │
    │  ┌────────────────────────────────────────────────┐  │
    │  │ CatApiError → its status_code │ other → 500    │  │
    │  └────────────────────────────────────────────────┘  │
    └──────────────────────────────────────────────────────┘

Error Envelope:
    {"message": "...", "error": "validation_error", "request_id": "a1b2c3d4"}
    plus "stack" when DEBUG is enabled.
"""

import logging
import sys
import traceback
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from catapi import __version__
from catapi.config import settings
from catapi.database import dispose_engine
from catapi.exceptions import CatApiError, ValidationError
from catapi.middleware.logging import RequestLoggingMiddleware
from catapi.middleware.rate_limit import RateLimitMiddleware
from catapi.middleware.request_id import RequestIDMiddleware, request_id_var
from catapi.routes import auth, cats, health, uploads, users

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during app startup, before any other initialization.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party libraries log every operation at DEBUG/INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("multipart").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:  logging, configuration check, storage directory.
    Shutdown: dispose the database engine.
    """
    setup_logging()
    logger.info("=" * 60)
    logger.info("Cat Registry API %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # The server still starts so /health can report; the problem is logged loudly
        logger.error("Configuration error: %s", str(e))

    storage = Path(settings.storage_root)
    storage.mkdir(parents=True, exist_ok=True)
    logger.info("Storage directory: %s", storage.resolve())

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Cat Registry API shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Boundary Reporter (Exception Handlers)
# ══════════════════════════════════════════════════════════════════════════

def _envelope(
    message: str,
    error: str,
    exc: Optional[BaseException] = None,
) -> Dict[str, str]:
    """The one error body every failure is reported with."""
    content = {
        "message": message,
        "error": error,
        "request_id": request_id_var.get(""),
    }
    if settings.debug and exc is not None:
        content["stack"] = "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        )
    return content


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler hierarchy:
        CatApiError (and subclasses) → exc.status_code, exc.message
        RequestValidationError       → 400, aggregated "<msg>: <field>" list
        Exception (fallback)         → 500, generic message

    Server errors (5xx) never expose their internal message; the detail is
    logged with the request ID instead.
    """

    @app.exception_handler(CatApiError)
    async def handle_app_error(request: Request, exc: CatApiError):
        rid = request_id_var.get("")
        headers = {}
        message = exc.message

        if exc.status_code >= 500:
            logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
            message = "An internal error occurred. Please try again later."
        else:
            logger.warning("[%s] %s: %s", rid, type(exc).__name__, exc.message)

        if exc.status_code == 401:
            headers["WWW-Authenticate"] = "Bearer"
        if exc.status_code == 429:
            headers["Retry-After"] = str(exc.context.get("retry_after", 60))

        return JSONResponse(
            status_code=exc.status_code,
            content=_envelope(message, exc.error_code, exc),
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        """Body, query and path errors are folded into one 400 message."""
        error = ValidationError.from_field_errors(exc.errors())
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), error.message)
        return JSONResponse(
            status_code=error.status_code,
            content=_envelope(error.message, error.error_code, exc),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=_envelope(
                "An unexpected error occurred. Please try again or contact support.",
                "internal_server_error",
                exc,
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """Assemble middleware, exception handlers and routers into a FastAPI app."""
    app = FastAPI(
        title="Cat Registry API",
        description=(
            "Register cats with a photo, weight, birthdate and location. "
            "Owners manage their own cats; admins manage every cat."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Executed in reverse order of addition: RequestID → Logging → RateLimit → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(cats.router)
    app.include_router(users.router)
    app.include_router(auth.router)
    app.include_router(uploads.router)
    app.include_router(health.router)

    return app


# uvicorn expects `catapi.main:app` to be importable
app = create_app()
