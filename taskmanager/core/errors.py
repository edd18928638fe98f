"""Application error taxonomy and the FastAPI handlers that render it."""

import logging
from collections.abc import Mapping
from http import HTTPStatus
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

GENERIC_UNAUTHENTICATED_MESSAGE = "Not authenticated"
GENERIC_INTERNAL_MESSAGE = "Internal server error"


class AppError(Exception):
    """Base error carrying a machine-readable kind, an HTTP status, and a caller-safe message."""

    kind: str = "error"
    status_code: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        *,
        details: list[dict[str, Any]] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        self.message = message
        self.details = details
        self.headers = dict(headers) if headers else None
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "success": False,
            "kind": self.kind,
            "message": self.message,
        }
        if self.details:
            payload["details"] = self.details
        return payload


class UnauthenticatedError(AppError):
    kind = "unauthenticated"
    status_code = HTTPStatus.UNAUTHORIZED

    def __init__(self, message: str = GENERIC_UNAUTHENTICATED_MESSAGE) -> None:
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class NotFoundError(AppError):
    """Resource absent or owned by someone else; the two cases are never distinguished."""

    kind = "not_found"
    status_code = HTTPStatus.NOT_FOUND


class ValidationError(AppError):
    kind = "validation_error"
    status_code = HTTPStatus.BAD_REQUEST


class ConflictError(AppError):
    kind = "conflict"
    status_code = HTTPStatus.BAD_REQUEST


class InternalError(AppError):
    kind = "internal"
    status_code = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str = GENERIC_INTERNAL_MESSAGE) -> None:
        super().__init__(message)


def _error_response(error: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=int(error.status_code),
        content=error.to_dict(),
        headers=error.headers,
    )


def _format_validation_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    """Flatten pydantic errors to [{field, message}], dropping the body/query location prefix."""
    details = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ())]
        if loc and loc[0] in ("body", "query", "path", "header"):
            loc = loc[1:]
        details.append(
            {"field": ".".join(loc) or None, "message": err.get("msg", "Invalid value")}
        )
    return details


async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    if isinstance(exc, InternalError):
        logger.error("Internal error on %s %s: %s", request.method, request.url.path, exc)
    return _error_response(exc)


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    error = ValidationError("Validation error", details=_format_validation_errors(exc))
    return _error_response(error)


async def handle_http_exception(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Framework-raised errors (unknown route, wrong method) in the same {kind, message} shape."""
    kind = "not_found" if exc.status_code == HTTPStatus.NOT_FOUND else "http_error"
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "kind": kind, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled exception: %s on %s %s",
        type(exc).__name__,
        request.method,
        request.url.path,
    )
    return _error_response(InternalError())


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the error taxonomy to the app so every failure renders as {kind, message}."""
    app.add_exception_handler(AppError, handle_app_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected_error)
