"""
Error types and the central error handler.

Every failure that is not answered by the route itself ends up in
``central_error_response``: not-found messages map to 404, everything else to
400, and development mode attaches the stack trace under ``errors.stack``.
"""

import logging
import traceback
from typing import Sequence

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .responses import error_response
from .schemas import FieldError, StackTrace

logger = logging.getLogger("ecommerce.api")

NOT_FOUND_MARKER = "not found"
VALIDATION_FAILED = "validation failed"
FALLBACK_MESSAGE = "internal server error"


class ApiError(Exception):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(ApiError):
    pass


class RouteNotFoundError(NotFoundError):
    def __init__(self, path: str) -> None:
        super().__init__(f"Route {path} not found")
        self.path = path


class RequestValidationFailed(ApiError):
    def __init__(self, errors: Sequence[FieldError]) -> None:
        super().__init__(VALIDATION_FAILED)
        self.errors = list(errors)


def status_for_message(message: str) -> int:
    if NOT_FOUND_MARKER in message.lower():
        return status.HTTP_404_NOT_FOUND
    return status.HTTP_400_BAD_REQUEST


def _is_development(request: Request) -> bool:
    settings = getattr(request.app.state, "settings", None)
    return bool(settings and settings.is_development)


def central_error_response(request: Request, exc: BaseException) -> JSONResponse:
    message = str(exc) or FALLBACK_MESSAGE
    status_code = status_for_message(message)
    logger.error(
        "%s %s failed: %s",
        request.method,
        request.url.path,
        message,
        exc_info=None if isinstance(exc, ApiError) else exc,
    )

    errors = None
    if _is_development(request):
        stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        errors = StackTrace(stack=stack)
    return error_response(message, status_code, errors)


def validation_failed_response(errors: Sequence[FieldError]) -> JSONResponse:
    return error_response(VALIDATION_FAILED, status.HTTP_400_BAD_REQUEST, list(errors))


async def catch_unhandled_errors(request: Request, call_next):
    """Backstop middleware: anything that escapes the exception handlers lands here."""
    try:
        return await call_next(request)
    except Exception as exc:  # noqa: BLE001
        return central_error_response(request, exc)


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationFailed)
    async def rule_validation_handler(request: Request, exc: RequestValidationFailed):
        logger.warning("Validation failed on %s: %d error(s)", request.url.path, len(exc.errors))
        return validation_failed_response(exc.errors)

    @app.exception_handler(RequestValidationError)
    async def schema_validation_handler(request: Request, exc: RequestValidationError):
        logger.warning("Validation error on %s: %s", request.url.path, exc.errors())
        return validation_failed_response(
            [
                FieldError(field=".".join(str(loc) for loc in e["loc"]), message=e["msg"])
                for e in exc.errors()
            ]
        )

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        return central_error_response(request, exc)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
            return central_error_response(request, RouteNotFoundError(request.url.path))
        return central_error_response(request, ApiError(str(exc.detail)))
