"""
Memorial Backend - FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() assembles middleware, exception handlers and routers.
Who:   uvicorn (`uvicorn memorial.main:app`) and the test client.

Application Architecture:
    ┌─────────────────────────────────────────────────────────┐
    │                      FastAPI App                        │
    │                                                         │
    │  Middleware:   Request ID → Logging → GZip → CORS       │
    │                                                         │
    │  Routes:                                                │
    │  ┌────────────────────┐ ┌──────────────────┐ ┌────────┐ │
    │  │ POST get-engagers  │ │ POST generate-.. │ │ /health│ │
    │  └────────────────────┘ └──────────────────┘ └────────┘ │
    │                                                         │
    │  Exception Handlers:                                    │
    │  Validation→400 │ Pinning→500 │ Unexpected→500          │
    └─────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Run the credential check; log a warning and keep starting if
       anything is missing
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from memorial import __version__
from memorial.config import settings
from memorial.exceptions import MemorialError, PinningServiceError, ValidationError
from memorial.middleware.logging import RequestLoggingMiddleware
from memorial.middleware.request_id import RequestIDMiddleware, request_id_var
from memorial.routes import engagers, generate, health

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: 2024-01-15T12:00:00 [INFO] memorial.services.tile_service: message
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Per-request noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("PIL").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("=" * 60)
    logger.info("Memorial Backend %s starting up...", __version__)

    credential_warning = settings.check_required_credentials()
    if credential_warning is not None:
        logger.warning("Configuration warning: %s", credential_warning.message)

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Memorial Backend shutting down.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _describe_validation_errors(exc: RequestValidationError) -> tuple:
    """Reduce pydantic's error list to (message, details) for a 400 body."""
    errors = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        errors.append({"field": ".".join(loc) or "body", "message": error.get("msg", "")})

    if not errors:
        return "Invalid request body", {}
    first = errors[0]
    return f"Field '{first['field']}': {first['message']}", {
        "field": first["field"],
        "errors": errors,
    }


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and one error body format:
    {"error", "message", "details", "request_id"}.

        RequestValidationError  → 400 (schema check failed)
        ValidationError         → 400 (business rule failed)
        PinningServiceError     → 500 (upload failed, not retried)
        MemorialError (base)    → 500
        Exception (fallback)    → 500

    Stack traces and upstream response bodies are logged, never returned.
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        message, details = _describe_validation_errors(exc)
        logger.warning("[%s] Request validation failed: %s", rid, message)
        return JSONResponse(
            status_code=400,
            content={
                "error": "validation_error",
                "message": message,
                "details": details,
                "request_id": rid,
            },
        )

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error: %s", rid, exc.message)
        return JSONResponse(
            status_code=400,
            content={
                "error": "validation_error",
                "message": exc.message,
                "details": exc.context,
                "request_id": rid,
            },
        )

    @app.exception_handler(PinningServiceError)
    async def handle_pinning_error(request: Request, exc: PinningServiceError):
        rid = request_id_var.get("")
        logger.error("[%s] Pinning error: %s | Context: %s", rid, exc.message, exc.context)
        details = {"operation": exc.operation}
        if exc.status_code is not None:
            details["status_code"] = exc.status_code
        return JSONResponse(
            status_code=500,
            content={
                "error": "pinning_error",
                "message": exc.message,
                "details": details,
                "request_id": rid,
            },
        )

    @app.exception_handler(MemorialError)
    async def handle_memorial_error(request: Request, exc: MemorialError):
        rid = request_id_var.get("")
        logger.error("[%s] Application error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again later.",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="Memorial API",
        description=(
            "Looks up the top engagers of a social handle and turns their "
            "profile pictures into a pinned memorial grid image with metadata."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Middleware executes in REVERSE order of addition (last added runs first)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(engagers.router)
    app.include_router(generate.router)
    app.include_router(health.router)

    return app


app = create_app()
