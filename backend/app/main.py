"""
Employees API — FastAPI Application Factory
==============================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes app configuration, middleware registration, route mounting,
       and lifecycle management in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn app.main:app).

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
    │  ┌──────────────────────────┐ ┌─────────────────┐   │
    │  │ /employees (5 CRUD)      │ │ GET /health     │   │
    │  └──────────────────────────┘ └─────────────────┘   │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ Validation→422 │ NotFound→404 │ Database→500 │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict, List

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app import __version__
from app.config import settings
from app.database import create_tables, dispose_engine
from app.exceptions import (
    VALIDATION_FAILED_MESSAGE,
    DatabaseError,
    EmployeesAPIError,
    EmptyCollectionError,
    NotFoundError,
    ValidationError,
)
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.rate_limit import RateLimitMiddleware
from app.middleware.request_id import RequestIDMiddleware, request_id_var
from app.routes import employees, health
from app.schemas.employee import (
    EmptyListResponse,
    ErrorResponse,
    ValidationErrorResponse,
)

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Error interno del servidor"


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

    # Per-operation chatter from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:  logging, optional table creation (dev databases).
    Shutdown: dispose the database engine.
    """
    setup_logging()
    logger.info("Employees API %s starting up...", __version__)

    if settings.db_create_tables:
        await create_tables()
        logger.info("Database tables ensured (DB_CREATE_TABLES)")

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("Employees API shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _request_errors_by_field(exc: RequestValidationError) -> Dict[str, List[str]]:
    """Group FastAPI's request errors as field → [messages], like the rule table does."""
    errors: Dict[str, List[str]] = {}
    for err in exc.errors():
        loc = [part for part in err.get("loc", ()) if part not in ("body", "path", "query")]
        field = str(loc[-1]) if loc else "body"
        errors.setdefault(field, []).append(err.get("msg", "Invalid value"))
    return errors


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map application exceptions to the API's JSON envelopes.

    Handler hierarchy:
        ValidationError         → 422 {status, message, errors}
        RequestValidationError  → 422 {status, message, errors}
        EmptyCollectionError    → 404 {error, code: 200}
        NotFoundError           → 404 {status, message}
        DatabaseError           → 500 {status, message, error}
        EmployeesAPIError       → 500 {status, message}
        Exception (fallback)    → 500 {status, message, error}
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation failed on fields: %s", rid, ", ".join(exc.errors))
        body = ValidationErrorResponse(message=exc.message, errors=exc.errors)
        return JSONResponse(status_code=422, content=body.model_dump())

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        errors = _request_errors_by_field(exc)
        logger.warning("[%s] Malformed request: %s", rid, errors)
        body = ValidationErrorResponse(message=VALIDATION_FAILED_MESSAGE, errors=errors)
        return JSONResponse(status_code=422, content=body.model_dump())

    @app.exception_handler(EmptyCollectionError)
    async def handle_empty_collection(request: Request, exc: EmptyCollectionError):
        body = EmptyListResponse(error=exc.message)
        return JSONResponse(status_code=404, content=body.model_dump())

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        body = ErrorResponse(message=exc.message)
        return JSONResponse(status_code=404, content=body.model_dump(exclude_none=True))

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | %s | Context: %s", rid, exc.message, exc.error, exc.context)
        body = ErrorResponse(message=exc.message, error=exc.error)
        return JSONResponse(status_code=500, content=body.model_dump())

    @app.exception_handler(EmployeesAPIError)
    async def handle_app_error(request: Request, exc: EmployeesAPIError):
        rid = request_id_var.get("")
        logger.error("[%s] Application error: %s | Context: %s", rid, exc.message, exc.context)
        body = ErrorResponse(message=exc.message)
        return JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        body = ErrorResponse(message=INTERNAL_ERROR_MESSAGE, error=str(exc))
        return JSONResponse(status_code=500, content=body.model_dump())


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Middleware executes in REVERSE order of addition:
    RateLimit → RequestID → Logging → CORS → routes.
    """
    app = FastAPI(
        title="Employees API",
        description="CRUD API for employee records: list, get, create, update, delete.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    if settings.rate_limit_enabled:
        app.add_middleware(RateLimitMiddleware)

    register_exception_handlers(app)

    app.include_router(employees.router)
    app.include_router(health.router)

    return app


# uvicorn expects `app.main:app` to be importable
app = create_app()
