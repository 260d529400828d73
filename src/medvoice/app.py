"""
FastAPI application factory and main app configuration.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.errors import APIError, ConflictError, DownstreamError, NotFoundError, RateLimitError, ValidationError
from .api.routers import consultations, health
from .api.utils.responses import fail
from .core.config import get_settings
from .core.exceptions import (
    ConfigurationError,
    InvalidAudioFormatError,
    InvalidAudioPayloadError,
    MedVoiceException,
    RateLimitExceededError,
    StageFailedError,
)
from .core.structured_logger import configure_logging
from .domain.errors import (
    ConsultationNotFoundError,
    ConsultationResetError,
    DomainError,
    InvalidSessionStateError,
)
from .middleware.performance_middleware import PerformanceMiddleware

logger = logging.getLogger("medvoice")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    settings = get_settings()
    configure_logging(settings.logging)
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.app_env}")
    logger.info(f"Debug mode: {settings.debug}")
    if not (settings.ai.endpoint and settings.ai.api_key):
        logger.warning("AI service is not configured (AI_ENDPOINT / AI_API_KEY); processing will fail")

    yield

    logger.info(f"Shutting down {settings.app_name}")


def _error_response(request: Request, status_code: int, error: str, message: str, details: dict = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=fail(request, error, message, details).model_dump(),
    )


def _stage_failure_to_api_error(exc: StageFailedError) -> APIError:
    if exc.is_quota:
        return RateLimitError(exc.message, exc.details)
    if isinstance(exc.cause, (InvalidAudioFormatError, InvalidAudioPayloadError)):
        return ValidationError(exc.message, exc.details)
    return DownstreamError(exc.message, exc.details)


def _domain_error_to_api_error(exc: DomainError) -> APIError:
    code = exc.error_code or "DOMAIN_ERROR"
    if isinstance(exc, ConsultationNotFoundError):
        return NotFoundError(exc.message, exc.details)
    if isinstance(exc, (InvalidSessionStateError, ConsultationResetError)):
        error = ConflictError(exc.message, exc.details)
        error.code = code
        return error
    return APIError(code, exc.message, 400, exc.details)


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Voice-to-clinical-document pipeline: transcription, entity extraction and structured reports",
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Process-Time"],
    )
    app.add_middleware(PerformanceMiddleware)

    # Include routers
    app.include_router(health.router)
    app.include_router(consultations.router)

    @app.get("/", tags=["health"])
    async def root():
        """Root endpoint with API information."""
        return {
            "service": settings.app_name,
            "version": settings.app_version,
            "environment": settings.app_env,
            "status": "running",
            "docs": "/docs",
            "endpoints": {
                "health": "/health",
                "create_consultation": "POST /consultations",
                "get_consultation": "GET /consultations/{consultation_id}",
                "process_audio": "POST /consultations/{consultation_id}/audio",
                "regenerate": "POST /consultations/{consultation_id}/regenerate",
                "update_report": "PUT /consultations/{consultation_id}/report",
                "validate": "POST /consultations/{consultation_id}/validate",
                "update_entities": "PATCH /consultations/{consultation_id}/entities",
                "extract_entities": "POST /consultations/{consultation_id}/entities/extract",
                "update_transcript": "PUT /consultations/{consultation_id}/transcript",
                "correct_transcript": "POST /consultations/{consultation_id}/transcript/correct",
                "assistant": "POST /consultations/{consultation_id}/assistant",
                "reset": "POST /consultations/{consultation_id}/reset",
                "delete": "DELETE /consultations/{consultation_id}",
            },
        }

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError):
        req_id = getattr(request.state, "request_id", None)
        logger.error(f"APIError: {exc.code} ({exc.http_status}) {exc.message} | request_id={req_id}")
        return _error_response(request, exc.http_status, exc.code, exc.message, exc.details)

    @app.exception_handler(StageFailedError)
    async def stage_failed_handler(request: Request, exc: StageFailedError):
        return await api_error_handler(request, _stage_failure_to_api_error(exc))

    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError):
        return await api_error_handler(request, _domain_error_to_api_error(exc))

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(request: Request, exc: ConfigurationError):
        logger.error(f"ConfigurationError: {exc.message}")
        return _error_response(request, 503, exc.error_code or "CONFIGURATION_ERROR", exc.message, exc.details)

    @app.exception_handler(MedVoiceException)
    async def service_error_handler(request: Request, exc: MedVoiceException):
        if isinstance(exc, RateLimitExceededError):
            return await api_error_handler(request, RateLimitError(exc.message, exc.details))
        return await api_error_handler(request, DownstreamError(exc.message, exc.details))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        req_id = getattr(request.state, "request_id", None)
        error_details = exc.errors()
        logger.error(f"ValidationError on {request.method} {request.url.path}: {error_details} | request_id={req_id}")

        error_messages = []
        for error in error_details:
            loc = " -> ".join(str(x) for x in error.get("loc", []))
            msg = error.get("msg", "Validation error")
            error_messages.append(f"{loc}: {msg}")

        return _error_response(
            request,
            422,
            "INVALID_INPUT",
            "; ".join(error_messages) if error_messages else "Invalid request data",
            {"validation_errors": [{"loc": [str(x) for x in e.get("loc", [])], "msg": e.get("msg")} for e in error_details]},
        )

    # Covers pydantic model validation of clinician edits as well
    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        return _error_response(request, 422, "VALIDATION_ERROR", str(exc))

    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception):
        req_id = getattr(request.state, "request_id", None)
        logger.error(f"Unhandled error: {type(exc).__name__}: {exc} | request_id={req_id}", exc_info=exc)
        return _error_response(
            request,
            500,
            "INTERNAL_ERROR",
            "An unexpected error has occurred. Please try again later.",
        )

    return app


# Create the app instance
app = create_app()
