"""
Application errors and the JSON error envelope.

Every error leaves the API as `{"error": ..., "message": ...}` with the status
code carried by the exception class.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ReviewAppError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error: str = "Internal Server Error"

    def __init__(self, message: str, *, error: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if error is not None:
            self.error = error


class ValidationError(ReviewAppError):
    status_code = status.HTTP_400_BAD_REQUEST
    error = "Validation error"

    def __init__(self, message: str, field: Optional[str] = None, *, error: Optional[str] = None):
        super().__init__(message, error=error)
        self.field = field


class InvalidScoreError(ValidationError):
    """A sub-score outside the 1-5 range (or not an integer)."""

    error = "Invalid score"

    def __init__(self, field: str, value: Any):
        super().__init__(f"{field} must be an integer between 1 and 5, got {value!r}", field=field)
        self.value = value


class NotFoundError(ReviewAppError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str, message: str):
        super().__init__(message, error=f"{resource} not found")
        self.resource = resource


class ConflictError(ReviewAppError):
    status_code = status.HTTP_409_CONFLICT
    error = "Conflict"


class UpstreamError(ReviewAppError):
    """The persistence layer failed (connection, constraint, driver error)."""

    error = "Upstream error"


def error_body(error: str, message: str) -> dict:
    return {"error": error, "message": message}


async def app_error_handler(request: Request, exc: ReviewAppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.error, exc.message))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    parts = []
    for item in exc.errors():
        loc = ".".join(str(p) for p in item.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {item.get('msg')}" if loc else str(item.get("msg")))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("Validation error", "; ".join(parts) or "Invalid request"),
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        message = f"Route {request.method} {request.url.path} not found"
        return JSONResponse(status_code=404, content=error_body("Not Found", message))
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body("HTTP error", str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=UpstreamError.status_code,
        content=error_body(UpstreamError.error, "Database operation failed"),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("Internal Server Error", "Something went wrong"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ReviewAppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
