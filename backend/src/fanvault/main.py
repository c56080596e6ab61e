"""FanVault Moderation Backend - Main FastAPI Application

Content moderation pipeline for user-submitted gallery images.

This module creates and configures the main FastAPI application, including:
- API routers (uploads, review, retention)
- Middleware (request ID correlation, CORS)
- Exception handlers (moderation errors, validation, database)
- Health endpoint
"""

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import get_settings
from .database import init_db
from .domain.submissions.errors import ModerationError
from .observability.logging_config import configure_logging
from .observability.middleware import RequestIDMiddleware
from .retention.router import router as retention_router
from .review.router import router as review_router
from .uploads.router import router as uploads_router

settings = get_settings()

configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler.

    - Startup: create missing tables
    - Shutdown: log only (connections are pooled by SQLAlchemy)
    """
    logger.info("FanVault moderation API starting up...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    init_db()

    yield

    logger.info("FanVault moderation API shutting down...")


app = FastAPI(
    title="FanVault Moderation API",
    description="Staging, human review and retention for user-submitted images",
    version="0.1.0",
    docs_url="/docs" if settings.ENVIRONMENT != "production" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT != "production" else None,
    openapi_url="/openapi.json" if settings.ENVIRONMENT != "production" else None,
    lifespan=lifespan,
)


# =============================================================================
# MIDDLEWARE CONFIGURATION
# =============================================================================

app.add_middleware(RequestIDMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://localhost:8080"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

@app.exception_handler(ModerationError)
async def moderation_exception_handler(
    request: Request,
    exc: ModerationError
) -> JSONResponse:
    """Map moderation errors to their HTTP status with a stable error code."""
    log = logger.error if exc.http_status >= 500 else logger.info
    log(
        f"{exc.code} on {request.method} {request.url.path}: {exc.message}",
        extra={"error_code": exc.code},
    )
    return JSONResponse(
        status_code=exc.http_status,
        content={
            "error": exc.code,
            "message": exc.message,
        },
    )


HTTP_ERROR_CODES = {
    status.HTTP_401_UNAUTHORIZED: "unauthorized",
    status.HTTP_403_FORBIDDEN: "forbidden",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
}


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException
) -> JSONResponse:
    """Render auth and routing errors in the same shape as moderation errors."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": HTTP_ERROR_CODES.get(exc.status_code, "http_error"),
            "message": str(exc.detail),
        },
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors with field-level details.

    Only loc, msg and type are returned; raw inputs may be upload bodies.
    """
    details = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]
    logger.warning(
        f"Validation error on {request.method} {request.url.path}",
        extra={"errors": details}
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "validation_error",
            "message": "Request validation failed",
            "details": details,
        },
    )


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(
    request: Request,
    exc: SQLAlchemyError
) -> JSONResponse:
    """Handle database errors without leaking details to the client."""
    logger.error(
        f"Database error on {request.method} {request.url.path}",
        exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "database_error",
            "message": "A database error occurred. Please try again later.",
        },
    )


@app.exception_handler(Exception)
async def generic_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Handle uncaught exceptions with a generic response."""
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}",
        exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "message": "An unexpected error occurred. Please try again later.",
        },
    )


# =============================================================================
# ROUTER REGISTRATION
# =============================================================================

app.include_router(uploads_router, prefix="/api/v1")
app.include_router(review_router, prefix="/api/v1")
app.include_router(retention_router, prefix="/api/v1")


@app.get("/health", tags=["Health"])
async def health() -> dict[str, Any]:
    """Liveness probe."""
    return {"status": "ok", "version": "0.1.0"}


def create_app() -> FastAPI:
    """Application factory for tests and ASGI servers."""
    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "fanvault.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
