"""Application error kinds and their single mapping to HTTP responses."""

import logging
from enum import StrEnum

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ErrorKind(StrEnum):
    """Closed set of failure categories raised by services and dependencies."""

    BAD_REQUEST = "bad_request"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"


ERROR_STATUS_CODES: dict[ErrorKind, int] = {
    ErrorKind.BAD_REQUEST: status.HTTP_400_BAD_REQUEST,
    ErrorKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    # Duplicate registrations are reported as plain bad requests
    ErrorKind.CONFLICT: status.HTTP_400_BAD_REQUEST,
}


class AppException(Exception):
    """Base application exception.

    Subclasses pick a ``kind``; the HTTP status is derived from it in one place.
    """

    kind: ErrorKind = ErrorKind.BAD_REQUEST

    def __init__(self, detail: str = "Bad request", kind: ErrorKind | None = None):
        super().__init__(detail)
        self.detail = detail
        if kind is not None:
            self.kind = kind

    @property
    def status_code(self) -> int:
        return ERROR_STATUS_CODES[self.kind]


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Render an AppException as ``{"detail": ...}`` with its mapped status."""
    headers = {"WWW-Authenticate": "Bearer"} if exc.kind == ErrorKind.UNAUTHORIZED else None
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies and parameters as 400."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unexpected failures (persistence errors included) and answer 500."""
    logger.error(f"[Error]: {exc}", exc_info=exc, extra={"path": request.url.path, "method": request.method})
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": "Server Error"})


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the error handlers to the application."""
    app.add_exception_handler(AppException, app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_exception_handler)
