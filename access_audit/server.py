"""
FastAPI application exposing the audit service over HTTP.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

import structlog
from fastapi import APIRouter, Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from . import __version__
from .collectors.scanner import ScanExecutor
from .collectors.session import BrowserPool, ChromeDriverFactory
from .config import Settings, get_settings
from .errors import AuditError, InvalidUrl
from .logging import setup_logging
from .pipeline import AuditService

logger = structlog.get_logger(__name__)


class AuditRequest(BaseModel):
    """Body of ``POST /audit``."""

    url: Optional[str] = Field(default=None, description="Absolute http(s) URL to audit")


class ErrorDetail(BaseModel):
    code: str = Field(..., description="Semantic error code")
    message: str = Field(..., description="Human-readable error message")
    url: Optional[str] = Field(None, description="URL the error relates to")


class ErrorResponse(BaseModel):
    """Standard error response format."""

    error: ErrorDetail

    @classmethod
    def create(cls, code: str, message: str, url: Optional[str] = None) -> "ErrorResponse":
        return cls(error=ErrorDetail(code=code, message=message, url=url))


def build_audit_service(settings: Settings) -> AuditService:
    """Wire an AuditService from settings."""
    pool = BrowserPool(
        ChromeDriverFactory(
            chrome_binary=settings.chrome_binary,
            chromedriver_path=settings.chromedriver_path,
            headless=settings.headless,
            window_size=settings.window_dimensions,
        ),
        max_sessions=settings.max_concurrent_sessions,
        acquire_timeout=settings.session_acquire_timeout,
    )
    scan_executor = ScanExecutor(
        navigation_timeout=settings.navigation_timeout,
        settle_delay=settings.settle_delay,
    )
    return AuditService(pool, scan_executor, audit_timeout=settings.audit_timeout)


def get_audit_service(request: Request) -> AuditService:
    return request.app.state.audit_service


router = APIRouter()


@router.get("/health")
async def health(service: AuditService = Depends(get_audit_service)) -> JSONResponse:
    """200 while a browser slot is free, 503 when every slot is in use."""
    active = service.pool.active_sessions
    ready = active < service.pool.capacity
    payload: Dict[str, Any] = {
        "status": "healthy" if ready else "busy",
        "version": __version__,
        "active_sessions": active,
        "capacity": service.pool.capacity,
    }
    return JSONResponse(
        status_code=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content=payload,
    )


@router.post("/audit")
@router.post("/api/audit", include_in_schema=False)
async def run_audit(body: AuditRequest, service: AuditService = Depends(get_audit_service)) -> JSONResponse:
    report = await service.audit(body.url)
    return JSONResponse(content=report.to_dict())


async def audit_error_handler(request: Request, exc: AuditError) -> JSONResponse:
    """Translate typed audit errors into error responses."""
    logger.warning(
        "Audit request failed",
        path=request.url.path,
        code=exc.code,
        detail=exc.message,
        url=exc.url,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse.create(exc.code, exc.message, exc.url).model_dump(),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies are reported the same way as a bad URL."""
    messages = [str(error.get("msg", "")) for error in exc.errors()]
    logger.warning("Validation error", path=request.url.path, errors=messages)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ErrorResponse.create(
            InvalidUrl.code, "Request body must be a JSON object with a 'url' string"
        ).model_dump(),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions with a sanitized response."""
    logger.error(
        "Unhandled exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse.create("INTERNAL_ERROR", "Failed to run accessibility audit").model_dump(),
    )


def create_app(service: Optional[AuditService] = None, settings: Optional[Settings] = None) -> FastAPI:
    """Build the FastAPI application; a prepared service may be injected for tests."""
    app_settings = settings or get_settings()
    audit_service = service or build_audit_service(app_settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        setup_logging(app_settings.log_level, app_settings.log_json)
        logger.info("Audit service ready", capacity=audit_service.pool.capacity)
        yield
        audit_service.close()
        logger.info("Audit service stopped")

    app = FastAPI(title="Accessibility Audit Service", version=__version__, lifespan=lifespan)
    app.state.audit_service = audit_service
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    app.add_exception_handler(AuditError, audit_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
    app.include_router(router)
    return app
