"""
Exception handlers for the API.

Every error leaves the API in the same envelope (see ErrorResponse):
    {"error": {"code": "...", "message": "...", "details": [...] | null}}

Services raise ValueError (or its RecordNotFoundError and RecordExistsError
subclasses) for broken business rules; endpoints turn those
into APIError subclasses with from_value_error().
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from ..services.exceptions import RecordExistsError, RecordNotFoundError
from .schemas import ErrorBody, ErrorDetail, ErrorResponse

logger = logging.getLogger(__name__)


# =============================================================================
# CUSTOM EXCEPTIONS
# =============================================================================


class APIError(Exception):
    """
    Base class for API errors.

        raise APIError(code="NOT_FOUND", message="Article not found", status_code=404)
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        details: list[dict] | None = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class NotFoundError(APIError):
    """404: the article, tag or link does not exist."""

    def __init__(self, message: str):
        super().__init__(
            code="NOT_FOUND", message=message, status_code=status.HTTP_404_NOT_FOUND
        )


class AlreadyExistsError(APIError):
    """409: a tag name or an (article_id, tag_id) pair is already taken."""

    def __init__(self, message: str):
        super().__init__(
            code="ALREADY_EXISTS", message=message, status_code=status.HTTP_409_CONFLICT
        )


class ValidationError_(APIError):
    """400: a business rule rejected the request."""

    def __init__(self, message: str, details: list[dict] | None = None):
        super().__init__(
            code="VALIDATION_ERROR",
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details,
        )


def from_value_error(exc: ValueError) -> APIError:
    """
    Pick the API error matching a service ValueError by its type.

        RecordNotFoundError  -> NotFoundError
        RecordExistsError    -> AlreadyExistsError
        any other ValueError -> ValidationError_
    """
    message = str(exc)
    if isinstance(exc, RecordNotFoundError):
        return NotFoundError(message)
    if isinstance(exc, RecordExistsError):
        return AlreadyExistsError(message)
    return ValidationError_(message)


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================


def _error_response(
    status_code: int, code: str, message: str, details: list[ErrorDetail] | None = None
) -> JSONResponse:
    body = ErrorResponse(error=ErrorBody(code=code, message=message, details=details))
    return JSONResponse(status_code=status_code, content=body.model_dump())


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    logger.warning(
        "API error", extra={"code": exc.code, "error_message": exc.message, "path": request.url.path}
    )

    details = None
    if exc.details:
        details = [ErrorDetail(field=d["field"], message=d["message"]) for d in exc.details]

    return _error_response(exc.status_code, exc.code, exc.message, details)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Reshape Pydantic's 422 errors.

    {"detail": [{"loc": ["body", "title"], "msg": "..."}]}
    becomes
    {"error": {"code": "VALIDATION_ERROR", "details": [{"field": "title", "message": "..."}]}}
    """
    logger.warning("Request validation failed", extra={"errors": exc.errors()})

    details = []
    for error in exc.errors():
        loc = error.get("loc", [])
        # ["body", "tag_names", 0] -> "tag_names.0", ["query", "limit"] -> "limit"
        if len(loc) > 1 and loc[0] == "body":
            field = ".".join(str(part) for part in loc[1:])
        else:
            field = str(loc[-1]) if loc else "unknown"
        details.append(ErrorDetail(field=field, message=error.get("msg", "Invalid value")))

    return _error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "VALIDATION_ERROR",
        "Request validation failed",
        details,
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """A constraint the service did not catch first (e.g. two concurrent links)."""
    logger.warning("Integrity error", extra={"error": str(exc.orig), "path": request.url.path})
    return _error_response(
        status.HTTP_409_CONFLICT,
        "INTEGRITY_ERROR",
        "The request conflicts with existing data",
    )


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """500 without internals; the traceback only goes to the log."""
    logger.error(f"Internal error: {type(exc).__name__}: {exc}", exc_info=True)
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR", "Internal server error"
    )


# =============================================================================
# REGISTRATION
# =============================================================================


def register_error_handlers(app: FastAPI, hide_internal_errors: bool = True) -> None:
    """
    Register every handler on the app.

    hide_internal_errors=False keeps stack traces visible (debug mode).
    """
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)

    if hide_internal_errors:
        app.add_exception_handler(Exception, generic_error_handler)

    logger.info("Error handlers registered")
