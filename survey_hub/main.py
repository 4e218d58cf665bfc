"""FastAPI application entry point for the survey service.

This module initializes the FastAPI application, sets up logging,
registers routers, and maps domain errors to HTTP responses.
"""

import uuid
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from survey_hub.config import get_settings
from survey_hub.logging_config import setup_logging, get_logger, request_id_var
from survey_hub.routes import access, health, reports, responses, setup, surveys
from survey_hub.services.access_link import QRCodeGenerationError
from survey_hub.services.export import ExportGenerationError
from survey_hub.services.survey_loader import SurveyDefinitionError, SurveyDefinitionNotFoundError
from survey_hub.services.survey_repository import (
    ResponseNotFoundError,
    StoreError,
    SubmissionValidationError,
    SurveyNotFoundError,
)

# Initialize logger (will be configured during startup)
logger = get_logger(__name__)

SERVICE_NAME = "Survey Hub"
SERVICE_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Configures logging on startup and logs startup/shutdown events.

    Args:
        app: FastAPI application instance

    Yields:
        None
    """
    settings = get_settings()
    setup_logging()

    logger.info(
        f"{SERVICE_NAME} starting - "
        f"Environment: {settings.environment}, "
        f"Log Level: {settings.log_level}, "
        f"Database: {settings.database_url.split('@')[-1] if '@' in settings.database_url else 'configured'}, "
        f"Version: {settings.git_commit_sha}"
    )

    yield

    logger.info(f"{SERVICE_NAME} shutting down")


# Initialize FastAPI application
app = FastAPI(
    title=SERVICE_NAME,
    description="Rated multi-segment surveys with analytics, spreadsheet export and QR access links",
    version=SERVICE_VERSION,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().get_allowed_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition", "X-Request-ID"],
)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """Tag every log record emitted during a request with its request id."""
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    token = request_id_var.set(request_id)
    try:
        response = await call_next(request)
    finally:
        request_id_var.reset(token)
    response.headers["X-Request-ID"] = request_id
    return response


# Root endpoint
@app.get("/")
async def root() -> dict:
    """Root endpoint with basic API information.

    Returns:
        dict: API information and status
    """
    settings = get_settings()
    return {
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "environment": settings.environment,
        "status": "operational"
    }


# Register routers
app.include_router(health.router, tags=["Health"])
app.include_router(surveys.router, tags=["Surveys"])
app.include_router(responses.router, tags=["Responses"])
app.include_router(reports.router, tags=["Reports"])
app.include_router(access.router, tags=["Access"])
app.include_router(setup.router, tags=["Setup"])


def error_response(status_code: int, error: str, message: str, **extra) -> JSONResponse:
    """Uniform error body: {"error": <kind>, "message": <detail>, ...}."""
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "message": message, **extra},
    )


@app.exception_handler(SurveyNotFoundError)
async def survey_not_found_handler(request: Request, exc: SurveyNotFoundError) -> JSONResponse:
    """Unknown survey id."""
    logger.info(f"Survey not found for {request.method} {request.url.path}", extra={"survey_id": exc.survey_id})
    return error_response(404, "Survey not found", str(exc))


@app.exception_handler(ResponseNotFoundError)
async def response_not_found_handler(request: Request, exc: ResponseNotFoundError) -> JSONResponse:
    """Unknown response id."""
    logger.info(f"Response not found for {request.method} {request.url.path}", extra={"response_id": exc.response_id})
    return error_response(404, "Response not found", str(exc))


@app.exception_handler(SubmissionValidationError)
async def submission_validation_handler(request: Request, exc: SubmissionValidationError) -> JSONResponse:
    """Submission rejected before anything was written."""
    logger.info(f"Rejected submission for {request.url.path}: {exc}")
    return error_response(422, "Validation failed", str(exc))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed payload or query parameters."""
    logger.info(f"Invalid request for {request.method} {request.url.path}")
    return error_response(
        422,
        "Validation failed",
        "The request payload is invalid",
        detail=jsonable_encoder(exc.errors()),
    )


@app.exception_handler(QRCodeGenerationError)
async def qr_code_failure_handler(request: Request, exc: QRCodeGenerationError) -> JSONResponse:
    """QR code encoder failed."""
    logger.error(f"QR code generation failed for {request.url.path}: {exc}")
    return error_response(500, "QR code generation failed", str(exc))


@app.exception_handler(ExportGenerationError)
async def export_failure_handler(request: Request, exc: ExportGenerationError) -> JSONResponse:
    """Spreadsheet encoder failed."""
    logger.error(f"Export generation failed for {request.url.path}: {exc}")
    return error_response(500, "Export generation failed", str(exc))


@app.exception_handler(SurveyDefinitionError)
@app.exception_handler(SurveyDefinitionNotFoundError)
async def survey_definition_handler(request: Request, exc: Exception) -> JSONResponse:
    """Bundled default survey file is missing or does not validate."""
    logger.error(f"Default survey definition failed for {request.url.path}: {exc}")
    return error_response(500, "Survey definition invalid", str(exc))


@app.exception_handler(StoreError)
async def store_failure_handler(request: Request, exc: StoreError) -> JSONResponse:
    """Database unreachable or failing; details stay in the logs."""
    logger.error(f"Store failure for {request.method} {request.url.path}: {exc}")
    return error_response(500, "Internal store failure", "The data store is unavailable. Please try again later.")


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler for unhandled exceptions.

    Logs all unhandled exceptions and returns a generic error response
    to prevent leaking sensitive information.

    Args:
        request: FastAPI request object
        exc: Exception that was raised

    Returns:
        JSONResponse: Generic error response
    """
    logger.error(
        f"Unhandled exception for {request.method} {request.url}: {exc}",
        exc_info=True
    )

    return error_response(
        500,
        "Internal server error",
        "An unexpected error occurred. Please try again later."
    )
