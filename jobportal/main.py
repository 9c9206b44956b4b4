"""Main FastAPI application"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional
import logging
import time
import traceback
import uuid

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from jobportal.config import Settings, get_settings
from jobportal.core.database import Database
from jobportal.core.exceptions import BaseAPIException, UnauthorizedError
from jobportal.core.metrics import REQUEST_COUNT, REQUEST_LATENCY
from jobportal.core.security import PasswordHasher
from jobportal.api.v1 import auth, users, jobs, applications, admin
from jobportal.repositories.sqlalchemy_store import SQLAlchemyCredentialStore
from jobportal.schemas.response import HealthResponse
from jobportal.services.token_service import TokenService
from jobportal.services.user_service import UserService

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"
UNMATCHED_PATH = "<unmatched>"


def configure_logging(settings: Settings) -> None:
    """Configure root logging - ensure log directory exists"""
    log_file = settings.get_log_file()
    Path(log_file).parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler()
        ]
    )


def _route_template(request: Request) -> str:
    """Matched route path (e.g. /api/v1/jobs/{job_id}) for metric labels"""
    route = request.scope.get("route")
    return getattr(route, "path", None) or UNMATCHED_PATH


def _envelope(message: str, errors=None) -> dict:
    content = {"success": False, "message": message}
    if errors:
        content["errors"] = errors
    return content


def _install_exception_handlers(app: FastAPI, settings: Settings) -> None:

    @app.exception_handler(BaseAPIException)
    async def api_exception_handler(request: Request, exc: BaseAPIException):
        """Handle domain errors; message and status pass through unchanged"""
        extra = {
            "status_code": exc.status_code,
            "path": request.url.path,
            "method": request.method,
        }
        if isinstance(exc, UnauthorizedError) and exc.reason is not None:
            extra["reason"] = exc.reason.value
        logger.warning(f"API Exception: {exc.message}", extra=extra)

        return JSONResponse(
            status_code=exc.status_code,
            content=_envelope(exc.message, exc.details),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle Pydantic validation errors"""
        errors = []
        for error in exc.errors():
            errors.append({
                "field": ".".join(str(loc) for loc in error["loc"]),
                "message": error["msg"],
                "type": error["type"]
            })

        logger.warning(
            f"Validation error: {errors}",
            extra={"path": request.url.path, "method": request.method}
        )

        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_envelope("Validation failed", errors),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Routing errors (unknown path, wrong method) in the API envelope"""
        return JSONResponse(
            status_code=exc.status_code,
            content=_envelope(str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_exception_handler(request: Request, exc: SQLAlchemyError):
        """Handle database errors"""
        logger.error(
            f"Database error: {str(exc)}",
            extra={
                "path": request.url.path,
                "method": request.method,
                "traceback": traceback.format_exc()
            }
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_envelope("A database error occurred. Please try again later."),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle all other exceptions"""
        logger.critical(
            f"Unhandled exception: {str(exc)}",
            extra={
                "path": request.url.path,
                "method": request.method,
                "traceback": traceback.format_exc()
            }
        )

        message = str(exc) if settings.is_development else "An unexpected error occurred"
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_envelope(message or "An unexpected error occurred"),
        )


def _bootstrap_admin(app: FastAPI) -> None:
    """Create the configured administrator if it does not exist yet"""
    settings: Settings = app.state.settings
    if not settings.ADMIN_EMAIL or not settings.ADMIN_PASSWORD:
        return

    db = app.state.database.SessionLocal()
    try:
        service = UserService(SQLAlchemyCredentialStore(db))
        admin_user, created = service.ensure_admin(
            settings.ADMIN_EMAIL,
            settings.ADMIN_PASSWORD,
            app.state.password_hasher,
            full_name=settings.ADMIN_FULL_NAME,
        )
        if created:
            logger.info(f"Created admin user: {admin_user.email}")
    finally:
        db.close()


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """
    Build the application and its long-lived collaborators

    Args:
        settings: Settings to use; defaults to the environment
        database: Database to use; defaults to one built from settings

    Returns:
        Configured FastAPI app
    """
    settings = settings or get_settings()
    settings.validate_security_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        docs_url="/api/docs" if settings.DEBUG else None,
        redoc_url="/api/redoc" if settings.DEBUG else None
    )

    app.state.settings = settings
    app.state.database = database or Database.from_settings(settings)
    app.state.password_hasher = PasswordHasher(rounds=settings.BCRYPT_ROUNDS)
    app.state.token_service = TokenService.from_settings(settings)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Security headers + request timing middleware
    @app.middleware("http")
    async def add_headers_and_timing(request: Request, call_next):
        """Add security headers and log slow requests"""
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        start = time.time()
        response = await call_next(request)
        duration = time.time() - start

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["X-Request-ID"] = request_id

        path = _route_template(request)
        REQUEST_COUNT.labels(request.method, path, str(response.status_code)).inc()
        REQUEST_LATENCY.labels(request.method, path).observe(duration)

        if duration > 1.0:
            logger.warning(
                "Slow request: %s %s took %.2fs request_id=%s",
                request.method,
                request.url.path,
                duration,
                request_id,
            )

        return response

    _install_exception_handlers(app, settings)

    @app.on_event("startup")
    async def startup_event():
        """Initialize application on startup"""
        logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
        logger.info(f"Environment: {settings.ENVIRONMENT}")

        try:
            app.state.database.init(settings.DB_INIT_MODE, settings.DB_REQUIRE_HEAD)
            logger.info("Database initialized successfully")
        except Exception as e:
            logger.error(f"Failed to initialize database: {e}")
            raise

        _bootstrap_admin(app)

    @app.on_event("shutdown")
    async def shutdown_event():
        """Cleanup on shutdown"""
        app.state.database.dispose()
        logger.info(f"Shutting down {settings.APP_NAME}")

    @app.get("/health", response_model=HealthResponse)
    def health_check():
        """Health check endpoint"""
        db_ok = True
        db_error = None
        try:
            app.state.database.ping()
        except Exception as exc:
            db_ok = False
            db_error = str(exc)

        return {
            "status": "healthy" if db_ok else "degraded",
            "version": settings.APP_VERSION,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "readiness": {"database": {"ok": db_ok, "error": db_error}},
        }

    @app.get("/metrics")
    async def metrics():
        """Prometheus metrics endpoint."""
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "status": "running",
            "docs": "/api/docs" if settings.DEBUG else "disabled"
        }

    # Include routers
    app.include_router(auth.router, prefix=f"{API_PREFIX}/auth", tags=["Authentication"])
    app.include_router(users.router, prefix=f"{API_PREFIX}/users", tags=["Users"])
    app.include_router(jobs.router, prefix=f"{API_PREFIX}/jobs", tags=["Jobs"])
    app.include_router(applications.router, prefix=f"{API_PREFIX}/applications", tags=["Applications"])
    app.include_router(admin.router, prefix=f"{API_PREFIX}/admin", tags=["Admin"])

    return app


if __name__ == "__main__":
    import uvicorn
    _settings = get_settings()
    uvicorn.run(
        "jobportal.main:create_app",
        factory=True,
        host=_settings.HOST,
        port=_settings.PORT,
        reload=_settings.DEBUG,
        workers=1 if _settings.DEBUG else _settings.WORKERS
    )
