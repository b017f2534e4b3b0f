"""
Error taxonomy and the central HTTP translation for it
"""

import traceback

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from parking_qr.core.config import get_settings

logger = structlog.get_logger(__name__)


class AppError(Exception):
    """Base class for failures that map onto an HTTP status"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str = "Resource"):
        super().__init__(f"{resource} not found")


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class UpstreamError(AppError):
    """A third-party call failed. Provider detail is logged, never returned."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Call could not be initiated"


class ProviderUnavailableError(AppError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Telephony service not available"


def error_body(message: str, **extra) -> dict:
    return {"success": False, "message": message, **extra}


def _validation_message(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        msg = error.get("msg", "Invalid value")
        # pydantic prefixes custom validator messages
        msg = msg.removeprefix("Value error, ")
        field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        if error.get("type") == "missing" and field:
            msg = f"{field} is required"
        messages.append(msg)
    return ", ".join(messages) or "Invalid request"


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    logger.warning(f"Request failed: {request.method} {request.url.path} -> {exc.status_code} {exc.message}")
    return JSONResponse(error_body(exc.message), status_code=exc.status_code)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = _validation_message(exc)
    logger.info(f"Invalid request to {request.url.path}: {message}")
    return JSONResponse(error_body(message), status_code=status.HTTP_400_BAD_REQUEST)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        error_body(str(exc.detail)),
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    extra = {}
    if get_settings().is_development:
        extra = {
            "error": str(exc),
            "stack": traceback.format_exception(type(exc), exc, exc.__traceback__),
        }
    return JSONResponse(
        error_body("Internal server error", **extra),
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
