"""
API Error Handling

Every failure leaves the API as the same envelope the success path uses:

    {"success": false, "message": "...", "code": "NOT_FOUND", "errors": [...]}

Route handlers raise AppError (or one of the helpers below); FastAPI's own
HTTPException and request validation errors are re-shaped by the handlers
registered in `register_exception_handlers`.
"""

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from simhire.schemas.envelope import error_response

logger = logging.getLogger(__name__)

STATUS_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    409: "ALREADY_EXISTS",
    422: "VALIDATION_ERROR",
}


class AppError(Exception):
    def __init__(
        self,
        message: str,
        status_code: int = 500,
        code: Optional[str] = None,
        errors: Optional[list[Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code or STATUS_CODES.get(status_code, "INTERNAL_SERVER_ERROR")
        self.errors = errors


def bad_request(message: str, code: str = "BAD_REQUEST") -> AppError:
    return AppError(message, 400, code)


def validation_error(message: str, errors: Optional[list[Any]] = None) -> AppError:
    return AppError(message, 400, "VALIDATION_ERROR", errors)


def unauthorized(message: str = "Access denied. Please login.") -> AppError:
    return AppError(message, 401, "UNAUTHORIZED")


def forbidden(message: str = "You do not have permission to access this resource.") -> AppError:
    return AppError(message, 403, "FORBIDDEN")


def not_found(resource: str = "Resource") -> AppError:
    return AppError(f"{resource} not found.", 404, "NOT_FOUND")


def already_exists(message: str) -> AppError:
    return AppError(message, 409, "ALREADY_EXISTS")


def _field_errors(exc: RequestValidationError) -> list[dict]:
    errors = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part != "body"]
        errors.append({"field": ".".join(location), "message": error.get("msg", "Invalid value")})
    return errors


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(exc.message, exc.code, exc.errors),
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(message, STATUS_CODES.get(exc.status_code)),
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content=error_response("Validation failed", "VALIDATION_ERROR", _field_errors(exc)),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content=error_response(
            "Internal server error. Please try again later.", "INTERNAL_SERVER_ERROR"
        ),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
