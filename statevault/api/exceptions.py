"""Custom exceptions and envelope handlers for FastAPI application."""

import logging

from fastapi import FastAPI, HTTPException, Request
from starlette.exceptions import HTTPException as StarletteHTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_413_REQUEST_ENTITY_TOO_LARGE,
    HTTP_422_UNPROCESSABLE_ENTITY,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from statevault.backup.exceptions import NotFoundError, ParseError, StatevaultError

logger = logging.getLogger(__name__)


class EnvelopeError(HTTPException):
    """Base exception for API errors rendered as a failure envelope."""
    pass


class BackupNotFoundError(EnvelopeError):
    def __init__(self, message: str = "No backups found"):
        super().__init__(HTTP_404_NOT_FOUND, message)


class InvalidBackupError(EnvelopeError):
    def __init__(self, message: str):
        super().__init__(HTTP_400_BAD_REQUEST, message)


class StorageFailedError(EnvelopeError):
    def __init__(self, message: str):
        super().__init__(HTTP_500_INTERNAL_SERVER_ERROR, message)


class PayloadTooLargeError(EnvelopeError):
    def __init__(self, max_bytes: int):
        super().__init__(HTTP_413_REQUEST_ENTITY_TOO_LARGE, "Request body too large")
        self.max_bytes = max_bytes


def to_envelope_error(error: StatevaultError, message: str) -> EnvelopeError:
    """Map a storage error to the envelope error returned to the client.

    ``message`` is the client-facing text; the error detail is only logged.
    """
    if isinstance(error, NotFoundError):
        return BackupNotFoundError(message)
    if isinstance(error, ParseError):
        return InvalidBackupError(message)
    return StorageFailedError(message)


def envelope_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message},
    )


async def envelope_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return envelope_response(exc.status_code, str(exc.detail))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning(f"Invalid request to {request.url.path}: {exc.errors()}")
    return envelope_response(HTTP_422_UNPROCESSABLE_ENTITY, "Invalid request")


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return envelope_response(HTTP_500_INTERNAL_SERVER_ERROR, "Something broke!")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, envelope_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
