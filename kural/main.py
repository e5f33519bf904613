"""FastAPI main application for the Kural voter backend."""

from contextlib import asynccontextmanager
import time

from fastapi import APIRouter, FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pymongo.errors import PyMongoError
from starlette.middleware.base import BaseHTTPMiddleware

from kural.api.routes import categories, voters
from kural.core.config import settings
from kural.core.database import close_db_client, init_db_client, ping_database
from kural.core.exceptions import (
    InvalidPartNumberError,
    NoSearchCriteriaError,
    RecordNotFoundError,
    StoreUnavailableError,
    UnsupportedFieldError,
)
from kural.core.logging_config import get_logger, setup_logging
from kural.core.rate_limiting import client_rate_limiter
from kural.core.responses import error_body, error_response_dict, success_response

# Setup logging
setup_logging()
logger = get_logger(__name__)

RATE_LIMIT_EXEMPT_PATHS = frozenset({"/health", "/docs", "/redoc", "/openapi.json"})


class NoCacheHeadersMiddleware(BaseHTTPMiddleware):
    """Voter data changes underneath the clients; never let them cache it."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate"
        response.headers["Pragma"] = "no-cache"
        response.headers["Expires"] = "0"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Per-client-IP request limit with a Retry-After hint."""

    async def dispatch(self, request: Request, call_next):
        exempt = request.url.path in RATE_LIMIT_EXEMPT_PATHS
        if not settings.RATE_LIMIT_ENABLED or exempt:
            return await call_next(request)

        ip_address = request.client.host if request.client else "unknown"
        allowed, retry_after = client_rate_limiter.check_request_allowed(ip_address)
        if not allowed:
            logger.warning(f"Rate limit exceeded for {ip_address}")
            return error_response_dict(
                error_body(
                    f"Too many requests. Try again in {retry_after} seconds.",
                    "rate_limited",
                ),
                status.HTTP_429_TOO_MANY_REQUESTS,
                headers={"Retry-After": str(retry_after)},
            )
        return await call_next(request)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager - runs on startup and shutdown."""
    # Startup
    logger.info("Starting Kural backend...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")

    # The test suite supplies its own store through dependency overrides
    if settings.ENVIRONMENT != "test":
        await init_db_client(settings)

    yield

    # Shutdown
    if settings.ENVIRONMENT != "test":
        await close_db_client()
    logger.info("Shutting down Kural backend...")


# Create FastAPI app
app = FastAPI(
    title="Kural Backend",
    description="""
    **Kural Backend** - read-only query service over the electoral roll

    Features:
    - Paginated listings of the general roll and its derived categories
      (60+, 80+, fatherless, transgender, mobile-linked, soon-to-be voters)
    - Free-text and structured search across every stored key variant
    - Gender summary of the whole filtered set with every listing page
    - Single voter lookup by id or EPIC number
    - Part-level listings, gender statistics and part names

    ## Authentication

    A bearer token is optional. When sent, it must be valid:

    ```
    Authorization: Bearer <your_jwt_token>
    ```

    ## API Versioning

    - `/v1/*` - Version 1 (current stable)
    - `/*` - Latest version (may change)
    """,
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(NoCacheHeadersMiddleware)
app.add_middleware(RateLimitMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    # credentials cannot be combined with a wildcard origin
    allow_credentials="*" not in settings.cors_origins_list,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


# Exception handlers
def _domain_error(exc: Exception, status_code: int):
    return error_response_dict(error_body(str(exc), exc.code), status_code)


@app.exception_handler(UnsupportedFieldError)
async def unsupported_field_handler(request: Request, exc: UnsupportedFieldError):
    return _domain_error(exc, status.HTTP_400_BAD_REQUEST)


@app.exception_handler(NoSearchCriteriaError)
async def no_search_criteria_handler(request: Request, exc: NoSearchCriteriaError):
    return _domain_error(exc, status.HTTP_400_BAD_REQUEST)


@app.exception_handler(InvalidPartNumberError)
async def invalid_part_number_handler(request: Request, exc: InvalidPartNumberError):
    return _domain_error(exc, status.HTTP_400_BAD_REQUEST)


@app.exception_handler(RecordNotFoundError)
async def not_found_handler(request: Request, exc: RecordNotFoundError):
    return _domain_error(exc, status.HTTP_404_NOT_FOUND)


@app.exception_handler(StoreUnavailableError)
async def store_unavailable_handler(request: Request, exc: StoreUnavailableError):
    """The store failed mid-request; no partial page is ever returned."""
    return _domain_error(exc, status.HTTP_500_INTERNAL_SERVER_ERROR)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions with standardized error responses."""
    # If the detail is already a dict (from our error_response), use it directly
    if isinstance(exc.detail, dict):
        return error_response_dict(exc.detail, exc.status_code, exc.headers)
    return error_response_dict(
        error_body(str(exc.detail), "http_error"), exc.status_code, exc.headers
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle Pydantic validation errors."""
    errors = {}
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"])
        errors[field] = error["msg"]

    return error_response_dict(
        error_body("Validation failed", "validation_error", errors=errors),
        422,
    )


@app.exception_handler(PyMongoError)
async def database_exception_handler(request: Request, exc: PyMongoError):
    """Handle store errors that escaped the service layer."""
    logger.error(f"Document store error: {exc}", exc_info=True)
    return error_response_dict(
        error_body("Document store error occurred", "store_unavailable"),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected errors."""
    logger.error(f"Unexpected error: {exc}", exc_info=True)
    return error_response_dict(
        error_body("An unexpected error occurred", "internal_error"),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


# Create versioned API router
v1_router = APIRouter(prefix="/v1")

# Listing routers first: /voters/list must win over /voters/{voter_id}
for listing_router in categories.routers:
    v1_router.include_router(listing_router)
v1_router.include_router(voters.router)

# Include versioned router
app.include_router(v1_router)

# Also include routers at root level (latest version)
for listing_router in categories.routers:
    app.include_router(listing_router)
app.include_router(voters.router)


@app.get("/health")
async def health_check():
    """
    Health check endpoint for monitoring and load balancers.

    Returns 200 when the document store answers a ping, 503 otherwise.
    """
    health_status = {"status": "healthy", "timestamp": time.time(), "checks": {}}
    health_status["checks"]["api"] = {"status": "healthy", "message": "API is running"}

    try:
        await ping_database()
        health_status["checks"]["database"] = {
            "status": "healthy",
            "message": "Document store is accessible",
        }
    except (PyMongoError, RuntimeError) as e:
        logger.error(f"Health check failed: {e}")
        health_status["status"] = "unhealthy"
        health_status["checks"]["database"] = {
            "status": "unhealthy",
            "message": f"Document store error: {e}",
        }
        return error_response_dict(
            error_body(
                "Service unhealthy", "store_unavailable", data=health_status
            ),
            status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    return success_response(data=health_status, message="Service healthy")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Kural Backend API",
        "version": "1.0.0",
        "docs": "/docs",
    }
