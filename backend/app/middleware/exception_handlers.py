"""Global exception handlers for standardized error responses.

Every failure leaves the API as
``{"success": false, "error": <message>, "code", "request_id", "timestamp"}``
plus ``details`` for rejected request parameters.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from app.middleware.error_codes import ErrorCode, get_error_code
from app.services.errors import PersistenceError, ServiceError, UpstreamError

logger = logging.getLogger("app.exception")

SERVICE_ERROR_CODES = {
    UpstreamError: ErrorCode.UPSTREAM_ERROR,
    PersistenceError: ErrorCode.PERSISTENCE_ERROR,
}


def _request_id(request: Request) -> Optional[str]:
    return getattr(request.state, "request_id", None)


def build_error_response(
    request: Request,
    status_code: int,
    code: ErrorCode,
    message: str,
    details: list[dict[str, Any]] | None = None,
) -> JSONResponse:
    body: dict[str, Any] = {
        "success": False,
        "error": message,
        "code": code.value,
        "request_id": _request_id(request),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if details:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=body)


async def service_exception_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Map service-layer errors to their HTTP status."""
    code = SERVICE_ERROR_CODES.get(type(exc)) or get_error_code(exc.status_code)

    if exc.status_code >= 500:
        logger.error(
            "%s on %s: %s request_id=%s",
            exc.__class__.__name__,
            request.url.path,
            exc.message,
            _request_id(request),
        )

    return build_error_response(request, exc.status_code, code, exc.message)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Unknown routes, disallowed methods and explicit HTTPExceptions."""
    return build_error_response(
        request, exc.status_code, get_error_code(exc.status_code), str(exc.detail)
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Reject malformed request parameters as a 400 with field-level details."""
    details = [
        {
            "field": " -> ".join(str(part) for part in error.get("loc", [])),
            "message": error.get("msg", "Invalid value"),
            "type": error.get("type", "value_error"),
        }
        for error in exc.errors()
    ]

    message = "Invalid request parameters"
    if details:
        message = f"Invalid {details[0]['field']}: {details[0]['message']}"

    return build_error_response(
        request, 400, ErrorCode.VALIDATION_ERROR, message, details=details
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Anything unhandled becomes a 500 without internal detail."""
    logger.exception(
        "Unhandled exception on %s request_id=%s", request.url.path, _request_id(request)
    )
    return build_error_response(
        request,
        500,
        ErrorCode.INTERNAL_ERROR,
        "An unexpected error occurred. Please try again later.",
    )
