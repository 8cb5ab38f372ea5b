"""Failure responses for the list API.

Every failure uses one body shape:

    {"success": false, "error": "...", "code": "NotFound", "statusCode": 404,
     "timestamp": "...", "path": "/api/mylist/remove/x", "method": "DELETE"}

The status code comes from ``STATUS_BY_KIND`` and is never derived from
message text.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from pydantic import BaseModel, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from mylist.core.errors import ErrorKind, MyListError

logger = logging.getLogger(__name__)

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.ALREADY_EXISTS: 409,
    ErrorKind.DEPENDENCY_UNAVAILABLE: 500,
}


class ErrorBody(BaseModel):
    """Failure response body."""

    model_config = {"extra": "forbid", "populate_by_name": True}

    success: bool = False
    error: str
    code: str
    status_code: int = Field(alias="statusCode")
    timestamp: str
    path: str
    method: str


def error_response(request: Request, status_code: int, code: str, text: str) -> ORJSONResponse:
    body = ErrorBody(
        error=text,
        code=code,
        status_code=status_code,
        timestamp=datetime.now(UTC).isoformat(),
        path=request.url.path,
        method=request.method,
    )
    return ORJSONResponse(status_code=status_code, content=body.model_dump(by_alias=True))


async def mylist_exception_handler(request: Request, exc: MyListError) -> ORJSONResponse:
    """Map a list error to its status code."""
    status_code = STATUS_BY_KIND[exc.kind]
    if status_code >= 500:
        logger.error(f"{exc.kind.value} on {request.method} {request.url.path}: {exc.message}")
    return error_response(request, status_code, exc.kind.value, exc.message)


def _describe_validation(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(p) for p in error.get("loc", ()) if p != "body")
        message = error.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "Invalid request"


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> ORJSONResponse:
    """Malformed query parameters or bodies are validation failures (400)."""
    kind = ErrorKind.VALIDATION
    return error_response(request, STATUS_BY_KIND[kind], kind.value, _describe_validation(exc))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> ORJSONResponse:
    """Framework errors such as unknown routes (404) and wrong methods (405)."""
    code = ErrorKind.NOT_FOUND.value if exc.status_code == 404 else "HTTPError"
    text = "Route not found" if exc.status_code == 404 else str(exc.detail)
    return error_response(request, exc.status_code, code, text)


async def generic_exception_handler(request: Request, exc: Exception) -> ORJSONResponse:
    """Exception handler for unexpected errors."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return error_response(request, 500, "InternalServerError", "Internal Server Error")
