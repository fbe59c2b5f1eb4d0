"""Exception handlers for the ClipForge API.

Domain exceptions are translated into HTTP statuses here so the media core
stays free of transport concerns. Every handled error uses the same envelope.
"""

import logging
from http import HTTPStatus
from typing import Any, Dict, Optional, Tuple, Type

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..domain.exceptions import (
    EncodingFailureError,
    ExportError,
    InputMissingError,
    InvalidDeviceError,
    MediaError,
    NoActiveRecordingError,
    PermissionDeniedError,
    ProbeError,
    RecordingConflictError,
    RecordingError,
    ToolUnavailableError,
)

logger = logging.getLogger(__name__)

# Checked in order, so subclasses come before their bases
MEDIA_ERROR_STATUS: Tuple[Tuple[Type[MediaError], int, str], ...] = (
    (RecordingConflictError, status.HTTP_409_CONFLICT, "RECORDING_CONFLICT"),
    (NoActiveRecordingError, status.HTTP_409_CONFLICT, "NO_ACTIVE_RECORDING"),
    (InputMissingError, status.HTTP_404_NOT_FOUND, "INPUT_MISSING"),
    (ToolUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE, "TOOL_UNAVAILABLE"),
    (PermissionDeniedError, status.HTTP_403_FORBIDDEN, "PERMISSION_DENIED"),
    (InvalidDeviceError, status.HTTP_422_UNPROCESSABLE_ENTITY, "INVALID_DEVICE"),
    (ProbeError, status.HTTP_422_UNPROCESSABLE_ENTITY, "PROBE_FAILED"),
    (EncodingFailureError, status.HTTP_422_UNPROCESSABLE_ENTITY, "ENCODING_FAILED"),
    (ExportError, status.HTTP_422_UNPROCESSABLE_ENTITY, "INVALID_EXPORT"),
    (RecordingError, status.HTTP_500_INTERNAL_SERVER_ERROR, "RECORDING_FAILED"),
)


def status_for_media_error(exc: MediaError) -> Tuple[int, str]:
    """HTTP status and error code for a domain exception."""
    for error_class, status_code, error_code in MEDIA_ERROR_STATUS:
        if isinstance(exc, error_class):
            return status_code, error_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR, "MEDIA_ERROR"


def _http_error_code(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).name
    except ValueError:
        return "HTTP_ERROR"


def create_error_response(
    status_code: int,
    message: str,
    error_code: str = "ERROR",
    details: Optional[Dict[str, Any]] = None,
    request_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Build the error envelope shared by every handled failure.

    ``details`` and ``request_id`` are only present when they carry a value.
    """
    error: Dict[str, Any] = {
        "code": error_code,
        "message": message,
        "status_code": status_code,
    }
    if details:
        error["details"] = details

    body: Dict[str, Any] = {"error": error, "success": False}
    if request_id:
        body["request_id"] = request_id
    return body


def _envelope(
    request: Request,
    status_code: int,
    message: str,
    error_code: str,
    details: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=create_error_response(
            status_code,
            message,
            error_code=error_code,
            details=details,
            request_id=getattr(request.state, "request_id", None),
        ),
    )


async def media_exception_handler(request: Request, exc: MediaError) -> JSONResponse:
    """Translate a media core exception into its HTTP status."""
    status_code, error_code = status_for_media_error(exc)
    logger.error(
        f"{error_code} on {request.method} {request.url.path}: {exc.message}",
        extra={
            "request_id": getattr(request.state, "request_id", None),
            "status_code": status_code,
        },
    )
    return _envelope(
        request, status_code, exc.message, error_code, details=exc.context.to_dict()
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    error_code = _http_error_code(exc.status_code)
    logger.warning(f"{error_code} on {request.method} {request.url.path}: {exc.detail}")
    return _envelope(request, exc.status_code, str(exc.detail), error_code)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report invalid request bodies and parameters field by field."""
    field_errors = {
        ".".join(str(part) for part in error["loc"]): {
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    }
    logger.warning(f"Rejected {request.method} {request.url.path}: {field_errors}")
    return _envelope(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Request validation failed",
        "VALIDATION_ERROR",
        details={"field_errors": field_errors},
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the application."""
    app.add_exception_handler(MediaError, media_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
