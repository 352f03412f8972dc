"""FastAPI application factory for TicketDesk."""

import logging
import time
import uuid
from pathlib import Path

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.auth import general_rate_limit
from src.c1_database_session import get_db_manager
from src.core.config import get_settings
from src.core.logging_config import configure_logging, request_id_var

# C3 Routes (Application Layer)
from src.c3_health_routes import router as health_router
from src.c3_auth_routes import create_auth_router
from src.c3_user_routes import create_user_router
from src.c3_ticket_routes import create_ticket_router
from src.c3_document_routes import create_document_router
from src.c3_reminder_routes import create_reminder_router
from src.c3_manual_routes import create_manual_router
from src.c3_workflow_routes import create_workflow_router
from src.c3_report_routes import create_report_router
from src.c3_chat_routes import create_chat_router

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-Id"

CONTENT_SECURITY_POLICY = "; ".join(
    [
        "default-src 'self'",
        "style-src 'self' 'unsafe-inline'",
        "script-src 'self'",
        "img-src 'self' data: blob: https:",
        "connect-src 'self' https://www.googleapis.com https://api.github.com",
        "font-src 'self' https: data:",
        "object-src 'none'",
        "frame-src 'none'",
    ]
)


def _error_response(status_code: int, message, headers=None, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra}, headers=headers)


def _install_middleware(app: FastAPI, settings) -> None:
    if settings.is_production and settings.server.cors_origins:
        origins = settings.server.cors_origins
    else:
        origins = ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER, "Retry-After"],
    )

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        response.headers.setdefault("Cross-Origin-Resource-Policy", "cross-origin")
        response.headers.setdefault("Content-Security-Policy", CONTENT_SECURITY_POLICY)
        if settings.is_production:
            response.headers.setdefault("Strict-Transport-Security", "max-age=15552000; includeSubDomains")
        return response

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        """Tag the request with an id and write the access log."""
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        token = request_id_var.set(request_id)
        started = time.perf_counter()
        try:
            logger.debug(f"--> {request.method} {request.url.path}")
            response = await call_next(request)
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.info(f"{request.method} {request.url.path} {response.status_code} {elapsed_ms:.1f}ms")
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            request_id_var.reset(token)


def _install_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return _error_response(exc.status_code, exc.detail, headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        details = [
            {"field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"), "message": error.get("msg")}
            for error in exc.errors()
        ]
        return _error_response(400, "Invalid request", details=details)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        return _error_response(500, "Internal server error")


def _api_router() -> APIRouter:
    """Every ``/api`` route, behind the general rate limit."""
    api = APIRouter(prefix="/api", dependencies=[Depends(general_rate_limit)])

    auth_router = create_auth_router()
    api.include_router(auth_router, prefix="/auth")
    api.include_router(auth_router, include_in_schema=False)

    api.include_router(create_ticket_router())
    api.include_router(create_document_router())
    api.include_router(create_report_router())
    api.include_router(create_reminder_router())
    api.include_router(create_manual_router())
    api.include_router(create_workflow_router())
    api.include_router(create_chat_router())
    api.include_router(create_user_router())
    return api


def create_app() -> FastAPI:
    """Build the TicketDesk API application from the current settings."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="TicketDesk API",
        description="Ticket management, Kanban board, reports and team tools",
        version="1.0.0",
        debug=settings.debug,
    )

    _install_middleware(app, settings)
    _install_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(_api_router())

    avatars_dir = Path(settings.upload.uploads_dir) / "avatars"
    avatars_dir.mkdir(parents=True, exist_ok=True)
    app.mount("/uploads/avatars", StaticFiles(directory=str(avatars_dir)), name="avatars")

    @app.on_event("startup")
    async def startup_event():
        """Create missing tables on startup."""
        logger.info(f"Starting TicketDesk API ({settings.environment})")
        get_db_manager().create_tables()

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("Shutting down TicketDesk API")

    return app
