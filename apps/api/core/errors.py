"""Map failures to HTTP responses at the application boundary."""

from __future__ import annotations

import logging
import traceback
from typing import Any, Iterable

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from catalogdb.errors import AppError, ValidationError

from .config import settings
from .responses import error_response

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "An unexpected error occurred"

_LOCATIONS = ("body", "query", "path")


def _request_context(request: Request) -> dict:
    return {
        "requestId": getattr(request.state, "request_id", None),
        "method": request.method,
        "path": request.url.path,
    }


def _field_name(err: dict[str, Any]) -> str:
    """Top-level request field an error belongs to (list positions fold into their field)."""
    if err.get("type") == "json_invalid":
        return "body"
    parts = [part for part in err.get("loc", ()) if part not in _LOCATIONS]
    if not parts or not isinstance(parts[0], str):
        return "body"
    return parts[0]


def field_errors(errors: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    """Translate pydantic errors to ``{field, message, value}``, first error per field, in order."""
    result: list[dict[str, Any]] = []
    seen: set[str] = set()
    for err in errors:
        field = _field_name(err)
        if field in seen:
            continue
        seen.add(field)
        if err.get("type") == "missing":
            result.append({"field": field, "message": f"{field} is required", "value": None})
        else:
            result.append({"field": field, "message": err.get("msg"), "value": err.get("input")})
    return result


async def handle_app_error(request: Request, exc: AppError):
    context = _request_context(request)
    logger.warning("[%s] %s %s", exc.code, exc.message, context)
    return error_response(exc.status_code, exc.to_dict(), request_id=context["requestId"])


async def handle_request_validation_error(request: Request, exc: RequestValidationError):
    context = _request_context(request)
    error = ValidationError("Validation failed", field_errors(exc.errors()))
    logger.warning("[%s] %s %s", error.code, error.errors, context)
    return error_response(error.status_code, error.to_dict(), request_id=context["requestId"])


async def handle_http_exception(request: Request, exc: StarletteHTTPException):
    context = _request_context(request)
    code = "NOT_FOUND" if exc.status_code == status.HTTP_404_NOT_FOUND else "HTTP_ERROR"
    logger.warning("[%s] %s %s", code, exc.detail, context)
    error = AppError(str(exc.detail), status_code=exc.status_code, code=code)
    return error_response(exc.status_code, error.to_dict(), request_id=context["requestId"])


async def handle_unexpected_error(request: Request, exc: Exception):
    context = _request_context(request)
    logger.exception("Unhandled error: %s %s", exc, context)
    message = GENERIC_ERROR_MESSAGE if settings.is_production else (str(exc) or GENERIC_ERROR_MESSAGE)
    error = AppError(message).to_dict()
    if settings.ENVIRONMENT == "development":
        error["stack"] = "".join(traceback.format_exception(exc))
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        error,
        request_id=context["requestId"],
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, handle_app_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected_error)
