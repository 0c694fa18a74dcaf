"""
FastAPI Application Entry Point

This module creates and configures the FastAPI application.

Key Concepts:
=============

1. Application Factory Pattern
   - create_app() returns a configured app
   - Tests can build their own instance

2. Middleware Stack
   - Rate limiting (slowapi)
   - CORS

3. Exception Handlers
   - Every error response has the shape {"error": ...}
   - Store errors map to 404 / 409 / 500
   - Field validation failures map to 422 with a field → message mapping
   - Malformed request bodies map to 400
   - Unexpected exceptions are logged and hidden behind a generic 500
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from bookshelf import __version__
from bookshelf.config import get_settings
from bookshelf.errors import (
    EditConflictError,
    FailedValidationError,
    RecordNotFoundError,
    StoreError,
    describe_decode_error,
)
from bookshelf.routers import books_router
from bookshelf.services.rate_limiter import limiter, rate_limit_exceeded_handler

# =============================================================================
# Logging Configuration
# =============================================================================
settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "the requested resource could not be found"
EDIT_CONFLICT_MESSAGE = (
    "unable to update the record due to an edit conflict, please try again"
)
SERVER_ERROR_MESSAGE = (
    "the server encountered a problem and could not process your request"
)


# =============================================================================
# Lifespan Events
# =============================================================================
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Code before yield runs on startup, code after yield on shutdown.
    """
    logger.info(f"Starting {settings.app_name}...")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"API version: {settings.api_version}")
    if not settings.api_key_enabled:
        logger.warning("API key authentication is DISABLED")

    yield

    logger.info(f"Shutting down {settings.app_name}...")


def error_response(status_code: int, error, headers: dict | None = None) -> JSONResponse:
    """Render {"error": error} with the given status."""
    return JSONResponse(
        status_code=status_code,
        content={"error": error},
        headers=headers,
    )


# =============================================================================
# Exception Handlers
# =============================================================================
def register_exception_handlers(app: FastAPI) -> None:
    """Attach the handlers that turn errors into JSON responses."""

    @app.exception_handler(RequestValidationError)
    async def bad_request_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Malformed body, unknown key or wrong JSON type → 400."""
        return error_response(
            status.HTTP_400_BAD_REQUEST,
            describe_decode_error(exc.errors()),
        )

    @app.exception_handler(FailedValidationError)
    async def failed_validation_handler(
        request: Request,
        exc: FailedValidationError,
    ) -> JSONResponse:
        return error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, exc.errors)

    @app.exception_handler(RecordNotFoundError)
    async def not_found_handler(
        request: Request,
        exc: RecordNotFoundError,
    ) -> JSONResponse:
        return error_response(status.HTTP_404_NOT_FOUND, NOT_FOUND_MESSAGE)

    @app.exception_handler(EditConflictError)
    async def edit_conflict_handler(
        request: Request,
        exc: EditConflictError,
    ) -> JSONResponse:
        logger.info(f"Edit conflict on {request.method} {request.url.path}: {exc}")
        return error_response(status.HTTP_409_CONFLICT, EDIT_CONFLICT_MESSAGE)

    @app.exception_handler(StoreError)
    async def store_error_handler(
        request: Request,
        exc: StoreError,
    ) -> JSONResponse:
        """
        Generic store failure.

        The cause is logged; the client only gets an opaque message.
        """
        logger.error(
            f"Store error on {request.method} {request.url.path}: {exc!r} "
            f"(cause: {exc.__cause__!r})"
        )
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, SERVER_ERROR_MESSAGE)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request,
        exc: StarletteHTTPException,
    ) -> JSONResponse:
        """Auth failures, unknown routes and unsupported methods."""
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            message = NOT_FOUND_MESSAGE
        elif exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
            message = f"the {request.method} method is not supported for this resource"
        else:
            message = exc.detail
        return error_response(exc.status_code, message, headers=exc.headers)

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """
        Catch-all exception handler.

        In production, hide internal errors from users.
        In debug mode, show more details.
        """
        logger.error(f"Unhandled error: {exc}", exc_info=True)

        if settings.debug:
            return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, SERVER_ERROR_MESSAGE)


# =============================================================================
# Application Factory
# =============================================================================
def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title=settings.app_name,
        description="""
## Bookshelf API

A JSON API for managing a catalogue of books.

### Concurrency
Every book carries a `version`. Updates only succeed against the version
that was read; a 409 response means the book changed in the meantime and
should be fetched again.

### Authentication
Send an API key in the `X-API-Key` header. Reads need `books:read`,
writes need `books:write`.
        """,
        version=__version__,
        lifespan=lifespan,
    )

    # -------------------------------------------------------------------------
    # Rate Limiting
    # -------------------------------------------------------------------------
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # -------------------------------------------------------------------------
    # CORS Middleware
    # -------------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # -------------------------------------------------------------------------
    # Register Routers
    # -------------------------------------------------------------------------
    api_prefix = f"/{settings.api_version}"
    app.include_router(books_router, prefix=api_prefix)

    # -------------------------------------------------------------------------
    # Health Check Endpoint
    # -------------------------------------------------------------------------
    @app.get(
        f"{api_prefix}/healthcheck",
        tags=["Health"],
        summary="Health check",
        description="Check if the API is running.",
    )
    @limiter.exempt
    async def health_check(request: Request) -> dict:
        """Used by load balancers and monitoring; needs no API key."""
        return {
            "status": "available",
            "system_info": {
                "environment": settings.environment,
                "version": __version__,
            },
        }

    return app


# =============================================================================
# Application Instance
# =============================================================================
# This is what uvicorn imports: uvicorn bookshelf.main:app
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "bookshelf.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
