"""Gateway exceptions and the FastAPI handlers that turn them into JSON error bodies."""
import logging
from typing import Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse

from files_gateway.schemas import ErrorResponse

logger = logging.getLogger(__name__)


class GatewayError(Exception):
    """Base class for errors the gateway knows how to report."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(GatewayError):
    """Required configuration is missing or invalid. Fatal at startup."""


class RequestMalformedError(GatewayError):
    """The upload request is not a usable multipart body with a typed `file` part."""

    status_code = status.HTTP_400_BAD_REQUEST


class StorageError(GatewayError):
    """
    Any failure reported by the storage backend or the transport to it.

    Not-found, access-denied and connection failures all land here and are
    reported as 500. `code` keeps the backend's error code for logs.
    """

    def __init__(self, message: str, key: Optional[str] = None, code: Optional[str] = None):
        super().__init__(message)
        self.key = key
        self.code = code


async def handle_gateway_error(request: Request, exc: GatewayError) -> JSONResponse:
    """Convert a GatewayError into `{"error": <message>}` with the error's status code."""
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=exc.message).model_dump(),
    )


async def handle_broad_exceptions(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle any exception that goes unhandled by a more specific exception handler.

    Registered as an exception handler rather than an HTTP middleware so that
    streamed downloads are not wrapped.
    """
    logger.error(
        "Unhandled error on %s %s",
        request.method,
        request.url.path,
        exc_info=(type(exc), exc, exc.__traceback__),
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(error="Internal server error").model_dump(),
    )


class UploadCancelled(StorageError):
    """The client went away while its upload was being streamed to the backend."""
