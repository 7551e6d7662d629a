"""
Customer API — FastAPI Application Factory
===========================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn customer_api.main:app).
When:  Once at server startup; the returned app handles all subsequent requests.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌──────────┐ ┌────────┐ ┌──────────┐  │
    │  │ Req ID   │→│ Logging  │→│ GZip   │→│ CORS     │  │
    │  └──────────┘ └──────────┘ └────────┘ └──────────┘  │
    │                                                     │
    │  Routes (one router per registered resource):       │
    │  ┌──────────────────────────┐ ┌──────────────────┐  │
    │  │ /api/customers[/{id}]    │ │ GET /health      │  │
    │  └──────────────────────────┘ └──────────────────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ Validation→400 │ Auth→401 │ NotFound→404     │   │
    │  │ StoreUnavailable→500 │ Unexpected→500        │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, assemble the OpenAPI document
    Shutdown: dispose the database engine (close all pooled connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncEngine

from customer_api import __version__
from customer_api.config import settings
from customer_api.database import create_engine_from_settings, create_session_factory, dispose_engine
from customer_api.exceptions import (
    AuthenticationError,
    CustomerApiError,
    InvalidIdentifierError,
    NotFoundError,
    StoreUnavailableError,
    ValidationError,
    field_errors,
)
from customer_api.middleware.logging import RequestLoggingMiddleware
from customer_api.middleware.request_id import RequestIDMiddleware, request_id_var
from customer_api.openapi import install_api_description
from customer_api.resources import RESOURCES
from customer_api.routes import health
from customer_api.routes.resources import build_resource_router

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during app startup, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party libraries log every operation at INFO/DEBUG
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: logging + API description. Shutdown: dispose the engine."""
    setup_logging()
    logger.info("=" * 60)
    logger.info("Customer API %s starting up...", __version__)

    # Assemble the API description now; it is read-only afterwards
    app.openapi()

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Customer API shutting down...")
    await dispose_engine(app.state.engine)
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(error: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {
        "error": error,
        "message": message,
        "details": details,
        "request_id": request_id_var.get(""),
    }


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and the shared error envelope.

    Handler hierarchy:
        RequestValidationError  → 400 (FastAPI body/path validation)
        InvalidIdentifierError  → 400
        ValidationError         → 400
        AuthenticationError     → 401
        NotFoundError           → 404
        StoreUnavailableError   → 500 (generic message, context logged)
        CustomerApiError (base) → 500
        Exception (fallback)    → 500

    Responses never include stack traces, SQL, or driver messages.
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        """Body or parameter didn't match the declared schema."""
        errors = field_errors(exc.errors())
        logger.warning(
            "[%s] Request validation failed on %s: %s",
            request_id_var.get(""), request.url.path, errors,
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_error_body("validation_error", "Request payload failed validation", {"errors": errors}),
        )

    @app.exception_handler(InvalidIdentifierError)
    async def handle_invalid_identifier(request: Request, exc: InvalidIdentifierError):
        logger.warning("[%s] Invalid identifier: %r", request_id_var.get(""), exc.value)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_error_body("invalid_identifier", exc.message, {"errors": exc.errors}),
        )

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        """Client sent invalid input; tell them which fields are wrong."""
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_error_body("validation_error", exc.message, {"errors": exc.errors}),
        )

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content=_error_body("unauthorized", exc.message),
            headers={"WWW-Authenticate": "ApiKey"},
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=_error_body("not_found", exc.message),
        )

    @app.exception_handler(StoreUnavailableError)
    async def handle_store_unavailable(request: Request, exc: StoreUnavailableError):
        """Generic message to the client, details logged server-side."""
        logger.error(
            "[%s] Store unavailable: %s | Context: %s",
            request_id_var.get(""), exc.message, exc.context,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body("server_error", "An internal error occurred. Please try again later."),
        )

    @app.exception_handler(CustomerApiError)
    async def handle_api_error(request: Request, exc: CustomerApiError):
        logger.error(
            "[%s] Unhandled application error: %s | Context: %s",
            request_id_var.get(""), exc.message, exc.context,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body("server_error", "An internal error occurred. Please try again later."),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Catch-all; the stack trace is logged, never returned."""
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""), str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again or contact support.",
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(engine: Optional[AsyncEngine] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        engine: Async engine to serve from. Defaults to one built from
                settings; tests pass an in-memory SQLite engine.

    The engine and its session factory live on `app.state`, and each request
    gets a session through `get_db_session`.
    """
    app = FastAPI(
        title="Customer API",
        description=(
            "CRUD REST API over the customer collection. Resources are addressed by "
            "canonical lowercase UUID identifiers; updates merge only the supplied fields."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.state.engine = engine if engine is not None else create_engine_from_settings(settings)
    app.state.session_factory = create_session_factory(app.state.engine)

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition (last added = outermost)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    routers = [build_resource_router(resource) for resource in RESOURCES]
    routers.append(health.router)
    for router in routers:
        app.include_router(router)
    app.state.routers = routers

    install_api_description(app)
    return app


app = create_app()
