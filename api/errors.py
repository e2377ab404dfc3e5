"""
Exception handlers — map every error to a JSON body.

Nothing from an unexpected exception (message, traceback, SQL) is sent to
the client; it is logged here instead.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.errors import AppError, InternalError, ValidationFailed
from utils.schemas import ErrorCode, ErrorResponse, FieldError, ValidationReport

logger = logging.getLogger(__name__)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def validation_response(field_errors: List[FieldError]) -> JSONResponse:
    report = ValidationReport(timestamp=_timestamp(), field_errors=field_errors)
    return JSONResponse(
        status_code=400,
        content=report.model_dump(mode="json", by_alias=True),
    )


def error_response(status_code: int, error: str, message: str) -> JSONResponse:
    body = ErrorResponse(timestamp=_timestamp(), status=status_code, error=error, message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def _field_name(err) -> str:
    """Dotted field path; ``body`` when the request body as a whole is bad."""
    if err.get("type") == "json_invalid":
        return "body"
    loc = err.get("loc", ())
    # Integer parts are list indexes or JSON decode offsets, not field names.
    parts = [
        str(p) for p in loc
        if p not in ("body", "path", "query", "header") and not isinstance(p, int)
    ]
    if parts:
        return ".".join(parts)
    return str(loc[0]) if loc else "body"


def request_errors_to_fields(exc: RequestValidationError) -> List[FieldError]:
    fields: List[FieldError] = []
    for err in exc.errors():
        code = ErrorCode.REQUIRED if err.get("type") == "missing" else ErrorCode.INVALID_FORMAT
        fields.append(
            FieldError(
                field=_field_name(err),
                code=code,
                message=str(err.get("msg", "Invalid value")),
            )
        )
    return fields


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationFailed)
    async def handle_validation_failed(request: Request, exc: ValidationFailed):
        return validation_response(exc.field_errors)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        return validation_response(request_errors_to_fields(exc))

    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError):
        if isinstance(exc, InternalError):
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return error_response(exc.status_code, exc.error, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        error = {404: "Not Found", 405: "Method Not Allowed"}.get(exc.status_code, "Error")
        return error_response(exc.status_code, error, str(exc.detail))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return error_response(500, InternalError.error, InternalError.default_message)
