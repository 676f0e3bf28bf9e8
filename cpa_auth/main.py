"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from urllib.parse import urlencode

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError as PydanticValidationError
from starlette.responses import Response

from cpa_auth.api import health
from cpa_auth.api.oauth import router as oauth_router
from cpa_auth.config import get_settings
from cpa_auth.core.exceptions import (
    InvalidRequestError,
    LoginRequiredError,
    OAuthError,
    RedirectError,
    ServerError,
)
from cpa_auth.core.guards import describe_validation_error
from cpa_auth.core.logging import configure_logging, get_logger
from cpa_auth.core.responses import error_response, redirect_error_response, redirect_response
from cpa_auth.db.base import db_manager
from cpa_auth.middleware import LoggingMiddleware, RequestIDMiddleware

logger = get_logger(__name__)


def make_logger():
    """Initialize logging configuration."""
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("logger_initialized", log_level=settings.log_level)


def make_database():
    """Initialize database connection."""
    settings = get_settings()
    db_manager.init(
        database_url=str(settings.database.url),
        pool_size=settings.database.pool_size,
        max_overflow=settings.database.max_overflow,
        pool_timeout=settings.database.pool_timeout,
        echo=settings.database.echo,
    )
    logger.info("database_initialized")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings = get_settings()

    # Startup
    make_logger()
    logger.info("startup", app=settings.app_name, version=settings.version)

    make_database()
    app.state.database_session_manager = db_manager

    yield

    # Shutdown
    logger.info("shutdown_started")
    await db_manager.close()
    logger.info("shutdown_complete")


app = FastAPI(
    title="CPA Authorization Server",
    description=(
        "OAuth 2.0 authorization server for EBU Tech 3366 Cross-Platform Authentication: "
        "device pairing, client credentials, authorization code, implicit and refresh "
        "token flows."
    ),
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    contact={
        "name": "CPA Authorization Server",
    },
    license_info={
        "name": "MIT",
    },
)


# Register custom middleware (order matters: last added = outermost layer)
app.add_middleware(LoggingMiddleware)
app.add_middleware(RequestIDMiddleware)


def configure_cors():
    """Enable cross-origin token requests when configured."""
    settings = get_settings()
    if not settings.cors.enabled:
        return
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.origins,
        allow_credentials=settings.cors.allow_credentials,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )
    logger.info("cors_enabled", origins=settings.cors.origins)


# Settings may be incomplete when the module is imported by tooling
try:
    configure_cors()
except PydanticValidationError as e:
    logger.warning("cors_not_configured", error=str(e))


@app.exception_handler(OAuthError)
async def oauth_error_handler(request: Request, exc: OAuthError) -> Response:
    """Return protocol errors directly as JSON."""
    log = logger.error if exc.status_code >= 500 else logger.info
    log(exc.error, error=exc.description, path=str(request.url.path))
    return error_response(exc)


@app.exception_handler(RedirectError)
async def redirect_error_handler(request: Request, exc: RedirectError) -> Response:
    """Deliver protocol errors to the client's redirect URI."""
    logger.info(
        "redirect_error",
        error=exc.error.error,
        description=exc.error.description,
        path=str(request.url.path),
    )
    return redirect_error_response(exc)


@app.exception_handler(LoginRequiredError)
async def login_required_handler(request: Request, exc: LoginRequiredError) -> Response:
    """Send the user agent to the login page, returning here afterwards."""
    login_url = get_settings().session.login_url
    return redirect_response(f"{login_url}?{urlencode({'next': exc.next_url})}")


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> Response:
    """Handle FastAPI request validation errors."""
    logger.error("validation_error", path=str(request.url.path), errors=exc.errors())
    messages = [f"Invalid {'.'.join(str(p) for p in err['loc'])}" for err in exc.errors()]
    return error_response(InvalidRequestError("; ".join(messages) or "Invalid request"))


@app.exception_handler(PydanticValidationError)
async def pydantic_validation_error_handler(
    request: Request, exc: PydanticValidationError
) -> Response:
    """Handle Pydantic validation errors."""
    logger.error("validation_error", path=str(request.url.path), errors=exc.errors())
    return error_response(InvalidRequestError(describe_validation_error(exc)))


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle all other unhandled exceptions."""
    logger.exception(
        "unhandled_exception", error_type=type(exc).__name__, path=str(request.url.path)
    )
    return error_response(ServerError("Internal server error"))


# Register API routes
app.include_router(health.router)
app.include_router(oauth_router, tags=["oauth"])


@app.get("/", tags=["root"])
async def root():
    """
    Root endpoint providing basic service information.

    Returns:
        dict: Service name, version and the URIs devices and clients need
    """
    settings = get_settings()
    return {
        "message": settings.app_name,
        "version": settings.version,
        "status": "running",
        "verification_uri": settings.oauth.verification_uri,
        "registration_client_uri": settings.oauth.registration_client_uri,
    }
