"""Exception handlers mapping service errors onto HTTP responses.

Every error body has the shape ``{"message": str, "field": str | null}``;
``field`` is null when the error is not tied to one input.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from case_care_service.exceptions import (
    NotFoundError,
    StorageError,
    UpstreamServiceError,
    ValidationError,
)
from case_care_service.models import ErrorResponse

logger = logging.getLogger(__name__)

# Location prefixes FastAPI adds in front of the parameter name
_LOCATION_PREFIXES = {"body", "path", "query", "header", "cookie"}


def _error_response(status_code: int, message: str, field: Optional[str] = None) -> JSONResponse:
    content = ErrorResponse(message=message, field=field).model_dump()
    return JSONResponse(status_code=status_code, content=content)


async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """Report the first schema violation as 400 instead of FastAPI's 422."""
    errors = exc.errors()
    if not errors:
        return _error_response(status.HTTP_400_BAD_REQUEST, "Invalid request")

    first = errors[0]
    loc = [str(part) for part in first.get("loc", ())]
    if loc and loc[0] in _LOCATION_PREFIXES:
        loc = loc[1:]
    field = ".".join(loc) or None

    return _error_response(status.HTTP_400_BAD_REQUEST, first.get("msg", "Invalid request"), field)


async def validation_error_handler(request: Request, exc: ValidationError):
    return _error_response(status.HTTP_400_BAD_REQUEST, exc.message, exc.field)


async def not_found_error_handler(request: Request, exc: NotFoundError):
    return _error_response(status.HTTP_404_NOT_FOUND, exc.message)


async def upstream_error_handler(request: Request, exc: UpstreamServiceError):
    logger.error(f"Upstream failure on {request.method} {request.url.path}: {exc.message}")
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc.message)


async def storage_error_handler(request: Request, exc: StorageError):
    logger.error(f"Storage failure on {request.method} {request.url.path}: {exc.message}")
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(NotFoundError, not_found_error_handler)
    app.add_exception_handler(UpstreamServiceError, upstream_error_handler)
    app.add_exception_handler(StorageError, storage_error_handler)
