"""
FastAPI application entry point for sitecheck.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from sitecheck.api.router import api_router
from sitecheck.config import Settings, settings
from sitecheck.core.exceptions import APIError
from sitecheck.logging_config import setup_logging
from sitecheck.schemas.common import HealthResponse
from sitecheck.services.audit_service import AuditService

logger = logging.getLogger(__name__)


def _validation_details(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "Invalid value")
        messages.append(f"{location}: {message}" if location else message)
    return "; ".join(messages) or "Invalid request"


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = _validation_details(exc)
    logger.info(f"Rejected {request.method} {request.url.path}: {details}")
    return JSONResponse(status_code=400, content={"error": "Invalid request", "details": details})


def create_app(app_settings: Settings | None = None, audit_service: AuditService | None = None) -> FastAPI:
    """Build the application. The audit service is created once and shared by requests."""
    app_settings = app_settings or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler."""
        setup_logging(app_settings.LOG_LEVEL)
        browser = app_settings.browser_config()
        logger.info(
            f"{app_settings.PROJECT_NAME} {app_settings.VERSION} starting "
            f"(renderer {'enabled' if browser.enabled else 'disabled'}, "
            f"browser {browser.executable_path or 'bundled chromium'})"
        )
        yield
        logger.info(f"{app_settings.PROJECT_NAME} shutting down")

    app = FastAPI(
        title=app_settings.PROJECT_NAME,
        version=app_settings.VERSION,
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.audit_service = audit_service or AuditService.from_settings(app_settings)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    app.include_router(api_router)

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        """Health check endpoint."""
        return HealthResponse(status="healthy", version=app_settings.VERSION)

    return app


app = create_app()
