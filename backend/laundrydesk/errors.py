# Overview: Error taxonomy and Flask error handlers.

"""
Typed API errors.

Every error that reaches a client is rendered as
``{"success": false, "error": {"code", "message", "details?"}}`` with a
stable ``code``. Domain code raises one of the classes below; persistence
failures are classified into DatabaseError; anything else becomes a
500 SERVER_ERROR.
"""

from __future__ import annotations

import traceback
from typing import Any

from flask import current_app, request
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError, SQLAlchemyError
from werkzeug.exceptions import HTTPException

from .extensions import db
from .responses import failure


class ApiError(Exception):
    """Base class for errors with an HTTP status and a machine-readable code."""
    status_code = 500
    code = "SERVER_ERROR"

    def __init__(self, message: str, *, code: str | None = None, details: Any = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.details = details


class ValidationError(ApiError):
    """400-level input problem."""
    status_code = 400
    code = "VALIDATION_ERROR"


class NotFoundError(ApiError):
    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, message: str, resource: str | None = None):
        code = f"{resource.upper()}_NOT_FOUND" if resource else None
        super().__init__(message, code=code)
        self.resource = resource


class AuthenticationError(ApiError):
    status_code = 401
    code = "AUTHENTICATION_ERROR"


class AuthorizationError(ApiError):
    """
    403-level refusal for code outside the route guards.

    Guards never raise it: they return ``Deny`` results, which the decorators
    render directly (including the 500 AUTHORIZATION_ERROR for guard faults).
    """
    status_code = 403
    code = "AUTHORIZATION_ERROR"


class ConflictError(ApiError):
    """409-level business rule conflict (e.g., duplicate username)."""
    status_code = 409
    code = "CONFLICT"


class OrderStateError(ApiError):
    """Operation not valid for the order's current lifecycle state."""
    status_code = 400
    code = "ORDER_NOT_COMPLETED"


class DatabaseError(ApiError):
    status_code = 500
    code = "DATABASE_ERROR"

    def __init__(self, message: str, original_error: BaseException | None = None):
        super().__init__(message)
        self.original_error = original_error


class FileUploadError(ApiError):
    status_code = 400
    code = "FILE_UPLOAD_ERROR"


# PostgreSQL SQLSTATE codes
_PG_MESSAGES = {
    "23505": "Duplicate entry found",
    "23503": "Referenced record not found",
    "23502": "Required field is missing",
    "23514": "Invalid data format",
    "42P01": "Database table not found",
    "42703": "Database column not found",
}

# SQLite reports constraint failures only through the message text
_SQLITE_MESSAGES = (
    ("UNIQUE constraint failed", "Duplicate entry found"),
    ("FOREIGN KEY constraint failed", "Referenced record not found"),
    ("NOT NULL constraint failed", "Required field is missing"),
    ("CHECK constraint failed", "Invalid data format"),
    ("no such table", "Database table not found"),
    ("no such column", "Database column not found"),
)


def _classify_message(exc: BaseException) -> str | None:
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return "Database connection failed"

    orig = getattr(exc, "orig", None)
    pgcode = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if pgcode in _PG_MESSAGES:
        return _PG_MESSAGES[pgcode]

    text = str(orig if orig is not None else exc)
    for needle, message in _SQLITE_MESSAGES:
        if needle in text:
            return message

    if isinstance(exc, OperationalError):
        lowered = text.lower()
        if "could not connect" in lowered or "connection refused" in lowered or "unable to open" in lowered:
            return "Database connection failed"
        if "could not translate host name" in lowered:
            return "Database server not found"
    return None


def classify_database_error(exc: BaseException, fallback: str = "Database operation failed") -> DatabaseError:
    """
    Wrap a persistence failure as DatabaseError.

    Known constraint and connection failures get a specific message; everything
    else keeps the caller's fallback message.
    """
    return DatabaseError(_classify_message(exc) or fallback, exc)


def is_unique_violation(exc: BaseException) -> bool:
    return isinstance(exc, IntegrityError) and _classify_message(exc) == "Duplicate entry found"


def _stack_for(exc: BaseException) -> str | None:
    if not current_app.config.get("EXPOSE_ERROR_DETAILS"):
        return None
    return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))


def _render(exc: ApiError, source: BaseException):
    log = current_app.logger.error if exc.status_code >= 500 else current_app.logger.info
    log(
        "%s %s -> %s %s: %s",
        request.method, request.path, exc.status_code, exc.code, exc.message,
    )
    details = exc.details
    if details is None and current_app.config.get("EXPOSE_ERROR_DETAILS"):
        original = getattr(exc, "original_error", None)
        if original is not None:
            details = str(original)
    return failure(exc.status_code, exc.code, exc.message, details, _stack_for(source))


def register_error_handlers(app) -> None:
    """Unified error handlers producing the standard JSON envelope."""

    @app.errorhandler(ApiError)
    def handle_api_error(e: ApiError):
        return _render(e, e)

    @app.errorhandler(SQLAlchemyError)
    def handle_sqlalchemy_error(e: SQLAlchemyError):
        db.session.rollback()
        current_app.logger.exception("Unhandled database error")
        return _render(classify_database_error(e), e)

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        if e.code == 404:
            return failure(404, "ROUTE_NOT_FOUND", f"Route {request.method} {request.path} not found")
        if e.code == 405:
            return failure(405, "METHOD_NOT_ALLOWED", f"Method {request.method} not allowed for {request.path}")
        if e.code == 413:
            return failure(400, "FILE_UPLOAD_ERROR", "File size too large", {"maxSize": "5MB"})
        if e.code == 400:
            return failure(400, "VALIDATION_ERROR", "Invalid request data")
        code = (e.name or "HTTP_ERROR").upper().replace(" ", "_")
        return failure(e.code or 500, code, e.description or e.name)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        current_app.logger.exception("Unhandled exception")
        return failure(500, "SERVER_ERROR", "An unexpected error occurred", stack=_stack_for(e))
