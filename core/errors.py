"""
Application error taxonomy.

Every failure a handler can produce is one of these.  ``api.errors`` turns
them into JSON responses; nothing else is allowed to reach the caller.
"""

from __future__ import annotations

from typing import List

from utils.schemas import FieldError


class AppError(Exception):
    status_code = 500
    error = "Internal Server Error"
    default_message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailed(AppError):
    status_code = 400
    error = "Bad Request"
    default_message = "Validation failed"

    def __init__(self, field_errors: List[FieldError]) -> None:
        super().__init__()
        self.field_errors = list(field_errors)


class Conflict(AppError):
    status_code = 409
    error = "Conflict"
    default_message = "Resource already exists"


class Unauthenticated(AppError):
    status_code = 401
    error = "Unauthorized"
    default_message = "Access token required"


class Forbidden(AppError):
    status_code = 403
    error = "Forbidden"
    default_message = "Invalid token"


class NotFound(AppError):
    status_code = 404
    error = "Not Found"
    default_message = "Resource not found"


class InternalError(AppError):
    pass
