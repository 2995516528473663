"""Error handling for the FastAPI application.

Converts storage errors, use-case validation errors and request parsing
errors into JSON responses of the form ``{"code": ..., "message": ...}``.
"""

from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from kvstorage.observability.logging import get_logger
from kvstorage.storage.errors import ErrorKind, StorageError
from kvstorage.usecase.crud import InvalidValueError

logger = get_logger(__name__)

# Storage error kind -> HTTP status; kinds not listed are internal errors
STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.ALREADY_EXISTS: status.HTTP_409_CONFLICT,
    ErrorKind.CONNECTION_FAILED: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def status_for(kind: ErrorKind) -> int:
    """Map a storage error kind to an HTTP status code."""
    return STATUS_BY_KIND.get(kind, status.HTTP_500_INTERNAL_SERVER_ERROR)


def _format_errors(errors: list[Any]) -> list[dict[str, Any]]:
    formatted: list[dict[str, Any]] = []
    for error in errors:
        field = ".".join(str(loc) for loc in error.get("loc", ()))
        formatted.append({"field": field, "message": error.get("msg", "")})
    return formatted


def setup_error_handlers(app: FastAPI) -> None:
    """Configure exception handlers for the FastAPI application.

    Args:
        app: The FastAPI application instance to configure
    """

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError) -> JSONResponse:
        """Handle StorageError exceptions and subclasses.

        Expected outcomes (not found, conflict) are returned with their own
        message. Anything else is logged with its cause and hidden behind a
        generic internal error.
        """
        status_code = status_for(exc.kind)
        if status_code < status.HTTP_500_INTERNAL_SERVER_ERROR:
            return JSONResponse(
                status_code=status_code,
                content={"code": exc.code, "message": exc.message},
            )

        logger.warning(
            "storage_request_failed",
            method=request.method,
            path=request.url.path,
            kind=exc.kind.value,
            error=exc.message,
            cause=repr(exc.__cause__) if exc.__cause__ else None,
        )
        if exc.kind is ErrorKind.CONNECTION_FAILED:
            message = "Storage is unavailable"
        else:
            message = "An internal server error occurred"
        return JSONResponse(
            status_code=status_code,
            content={"code": exc.code, "message": message},
        )

    @app.exception_handler(InvalidValueError)
    async def handle_invalid_value(request: Request, exc: InvalidValueError) -> JSONResponse:
        """Handle values rejected by the use-case layer."""
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"code": "invalid_value", "message": exc.message},
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle malformed request bodies and parameters.

        Covers invalid JSON, missing ``key``/``value`` fields and extra fields
        in an update body.
        """
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "code": "validation_error",
                "message": "invalid request format",
                "errors": _format_errors(list(exc.errors())),
            },
        )

    @app.exception_handler(PydanticValidationError)
    async def handle_validation_error(
        request: Request, exc: PydanticValidationError
    ) -> JSONResponse:
        """Handle Pydantic validation errors raised inside handlers."""
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "code": "validation_error",
                "message": "Request validation failed",
                "errors": _format_errors(list(exc.errors())),
            },
        )

    @app.exception_handler(Exception)
    async def handle_generic_error(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions with a generic error response.

        Engine transport errors raised by a select reach this handler.
        """
        logger.exception(
            "unexpected_error",
            method=request.method,
            path=request.url.path,
            error=str(exc),
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"code": "internal_error", "message": "An internal server error occurred"},
        )
