"""
Exception handlers for the high score API.
"""
import logging
from fastapi import Request, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core.exceptions import (
    ScoreException, ScoreValidationError, SubmissionLimitExceeded, ScoreClearDisabled
)

logger = logging.getLogger(__name__)


def create_error_response(status_code: int, error: str, error_code: str, headers: dict = None) -> JSONResponse:
    """Create a standardized error response."""
    return JSONResponse(
        status_code=status_code,
        content={
            "error": error,
            "error_code": error_code
        },
        headers=headers
    )


async def score_validation_handler(request: Request, exc: ScoreValidationError) -> JSONResponse:
    """Handle rejected score submissions."""
    logger.info(f"Rejected score from {request.client.host if request.client else 'unknown'}: {exc}")
    return create_error_response(400, str(exc), "VALIDATION_ERROR")


async def submission_limit_handler(request: Request, exc: SubmissionLimitExceeded) -> JSONResponse:
    """Handle origins over the hourly submission limit."""
    logger.warning(f"Submission limit reached for {request.client.host if request.client else 'unknown'}")
    return create_error_response(400, str(exc), "SUBMISSION_LIMIT")


async def score_clear_disabled_handler(request: Request, exc: ScoreClearDisabled) -> JSONResponse:
    return create_error_response(403, str(exc), "CLEAR_DISABLED")


async def score_exception_handler(request: Request, exc: ScoreException) -> JSONResponse:
    """Handle generic score exceptions."""
    return create_error_response(400, str(exc), "SCORE_ERROR")


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle malformed request bodies."""
    errors = []
    for error in exc.errors():
        errors.append({
            "field": ".".join(str(x) for x in error["loc"][1:]),
            "message": error["msg"],
            "type": error["type"]
        })

    return JSONResponse(
        status_code=400,
        content={
            "error": "Invalid request body",
            "errors": errors,
            "error_code": "INVALID_BODY"
        }
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle generic HTTP exceptions."""
    return create_error_response(exc.status_code, exc.detail, f"HTTP_{exc.status_code}", getattr(exc, "headers", None))


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error(f"Unexpected error: {exc}", exc_info=True)

    # Raw error text only in debug deployments
    if settings.DEBUG:
        detail = str(exc)
    else:
        detail = "Internal server error"

    return create_error_response(500, detail, "INTERNAL_ERROR")


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(ScoreValidationError, score_validation_handler)
    app.add_exception_handler(SubmissionLimitExceeded, submission_limit_handler)
    app.add_exception_handler(ScoreClearDisabled, score_clear_disabled_handler)
    app.add_exception_handler(ScoreException, score_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
