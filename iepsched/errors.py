"""Error types shared by the scheduling core and the HTTP layer.

The core raises three kinds of failure and the handlers below turn each into
a JSON body with a fixed status code:

* BadRequestError (400): malformed input, e.g. an inverted date range
* NotFoundError (404): unknown meeting, proposal or member ID
* ConflictError (409): the meeting's state forbids the operation

Usage:
    from iepsched.errors import NotFoundError

    if meeting is None:
        raise NotFoundError(detail=f"Meeting {meeting_id} not found", meeting_id=meeting_id)

Keyword arguments other than ``detail`` and ``error_code`` end up in the
response's ``context`` object.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class ErrorResponse(BaseModel):
    """Body returned for every handled error."""

    error: str
    detail: str | None = None
    error_code: str | None = None
    context: dict[str, Any] | None = None


class APIError(Exception):
    """Base class for scheduling errors."""

    status_code: int = 500
    error: str = "internal_error"
    detail: str = "An unexpected error occurred"

    def __init__(self, detail: str | None = None, error_code: str | None = None, **context: Any) -> None:
        self.detail = detail or type(self).detail
        self.error_code = error_code
        self.context = context or None
        super().__init__(self.detail)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            error=self.error,
            detail=self.detail,
            error_code=self.error_code,
            context=self.context,
        )


class BadRequestError(APIError):
    """Invalid input error (400)."""

    status_code = 400
    error = "bad_request"
    detail = "Invalid request"


class NotFoundError(APIError):
    """Unknown meeting, proposal or member ID (404)."""

    status_code = 404
    error = "not_found"
    detail = "Resource not found"


class ConflictError(APIError):
    """Business-rule violation or stale version (409)."""

    status_code = 409
    error = "conflict"
    detail = "Operation not allowed in the current state"


class ServiceUnavailableError(APIError):
    """Meeting service or directory not ready yet (503)."""

    status_code = 503
    error = "service_unavailable"
    detail = "Service temporarily unavailable"


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    logger.warning(
        "%s %s -> %d %s: %s",
        request.method,
        request.url.path,
        exc.status_code,
        exc.error_code or exc.error,
        exc.detail,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(exclude_none=True),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Schema failures (bad HH:MM strings, unknown enum values) keep FastAPI's 422."""
    body = ErrorResponse(
        error="validation_error",
        detail="Request body failed validation",
        context={"errors": jsonable_encoder(exc.errors())},
    )
    logger.info("%s %s -> 422: %d validation errors", request.method, request.url.path, len(exc.errors()))
    return JSONResponse(status_code=422, content=body.model_dump(exclude_none=True))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
