"""
AuthHub - credential issuance and session lifecycle service

Main FastAPI application with security hardening.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Callable, Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import select, text
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from authhub import __version__
from authhub.api.v1.api import api_router
from authhub.auth.jwt import TokenSigner
from authhub.auth.password import SecretHasher
from authhub.core import database
from authhub.core.config import Settings
from authhub.core.logging import configure_logging, get_logger, set_request_id
from authhub.models.user import User, UserRole
from authhub.schemas.common import ErrorResponse, HealthResponse
from authhub.services.errors import AuthError

logger = get_logger(__name__)


# =============================================================================
# Application Lifespan (startup/shutdown)
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup/shutdown events."""
    settings: Settings = app.state.settings
    logger.info("authhub_starting", environment=settings.environment)

    database.init_engine(settings.database_url, echo=settings.sql_debug)
    await database.init_db()
    logger.info("database_initialized")

    await create_admin_if_configured(settings, app.state.hasher)

    yield

    logger.info("authhub_stopping")
    await database.close_db()


async def create_admin_if_configured(settings: Settings, hasher: SecretHasher) -> None:
    """Create the admin account from ADMIN_EMAIL/ADMIN_PASSWORD if it does not exist."""
    if not settings.admin_email or not settings.admin_password:
        return

    async with database.get_session_maker()() as session:
        result = await session.execute(select(User).where(User.email == settings.admin_email))
        if result.scalars().first() is not None:
            return

        admin = User(
            first_name="Admin",
            last_name="Account",
            email=settings.admin_email,
            password_hash=hasher.hash(settings.admin_password),
            role=UserRole.ADMIN,
            email_verified=True,
        )
        session.add(admin)
        await session.commit()
        logger.info("admin_account_created", account_id=str(admin.id))


# =============================================================================
# Security Middleware
# =============================================================================

class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    def __init__(self, app, enable_hsts: bool = False):
        super().__init__(app)
        self.enable_hsts = enable_hsts

    async def dispatch(self, request: Request, call_next: Callable):
        response = await call_next(request)

        # Prevent clickjacking
        response.headers["X-Frame-Options"] = "DENY"

        # Prevent MIME type sniffing
        response.headers["X-Content-Type-Options"] = "nosniff"

        # Referrer policy
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        # Token responses must never be cached
        if request.url.path.startswith("/v1/auth"):
            response.headers["Cache-Control"] = "no-store"

        # Strict CSP for API endpoints
        if not request.url.path.startswith(("/docs", "/redoc")):
            response.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none'"

        # HSTS (only enable in production with HTTPS)
        if self.enable_hsts:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        return response


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Add unique request ID for tracing."""

    async def dispatch(self, request: Request, call_next: Callable):
        request_id = set_request_id(request.headers.get("X-Request-ID"))
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id

        return response


# =============================================================================
# Error Handlers
# =============================================================================

HTTP_ERROR_CODES = {
    status.HTTP_401_UNAUTHORIZED: "not_authenticated",
    status.HTTP_403_FORBIDDEN: "forbidden",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
}


def register_exception_handlers(app: FastAPI) -> None:
    """Map session lifecycle errors to HTTP responses."""

    @app.exception_handler(AuthError)
    async def auth_error_handler(request: Request, exc: AuthError):
        request_id = getattr(request.state, "request_id", None)
        logger.info(
            "auth_error",
            path=request.url.path,
            status_code=exc.status_code,
            error_code=exc.error_code,
        )
        body = ErrorResponse(error=exc.error_code, message=exc.message, request_id=request_id)
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None
        return JSONResponse(status_code=exc.status_code, content=body.model_dump(), headers=headers)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        request_id = getattr(request.state, "request_id", None)
        error_code = HTTP_ERROR_CODES.get(exc.status_code, "http_error")
        body = ErrorResponse(error=error_code, message=str(exc.detail), request_id=request_id)
        return JSONResponse(status_code=exc.status_code, content=body.model_dump(), headers=exc.headers)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler to prevent information leakage."""
        request_id = getattr(request.state, "request_id", "unknown")
        logger.exception(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error_type=type(exc).__name__,
        )

        # Return sanitized error to client
        body = ErrorResponse(error="server_error", message="An internal error occurred", request_id=request_id)
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body.model_dump())


# =============================================================================
# FastAPI Application
# =============================================================================

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application.

    The token signer is constructed here, so a missing signing key raises
    ConfigurationMissing at process start rather than on the first request.
    """
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level, settings.log_json)

    app = FastAPI(
        title="AuthHub API",
        version=__version__,
        description="Credential issuance and session lifecycle",
        lifespan=lifespan,
        docs_url="/docs" if settings.enable_docs else None,
        redoc_url="/redoc" if settings.enable_docs else None,
    )
    app.state.settings = settings
    app.state.signer = TokenSigner(settings)
    app.state.hasher = SecretHasher.from_settings(settings)

    # Middleware (order matters - last added = first executed)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    # Trusted hosts (prevent host header attacks)
    if "*" not in settings.trusted_hosts:
        app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.trusted_hosts)

    app.add_middleware(SecurityHeadersMiddleware, enable_hsts=settings.enable_hsts)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    @app.get("/", tags=["root"])
    def home():
        """Root endpoint."""
        return {
            "name": "AuthHub",
            "version": __version__,
            "docs": "/docs" if settings.enable_docs else None,
        }

    @app.get("/health", tags=["health"], response_model=HealthResponse)
    async def health_check():
        """Health check endpoint for load balancers and monitoring."""
        db_status = "connected"
        try:
            async with database.get_session_maker()() as session:
                await session.execute(text("SELECT 1"))
        except Exception as e:
            db_status = f"unhealthy: {type(e).__name__}"

        return HealthResponse(
            status="healthy" if db_status == "connected" else "degraded",
            version=__version__,
            database=db_status,
            timestamp=datetime.now(timezone.utc),
        )

    app.include_router(api_router, prefix="/v1")

    return app


app = create_app()


# =============================================================================
# Development Server
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "authhub.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info",
    )
