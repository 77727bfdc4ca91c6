"""Exception handlers translating failures into the JSON response envelope."""

from __future__ import annotations

import logging
from typing import Any, Sequence

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic.alias_generators import to_camel
from schemas import Envelope, FieldErrorOut
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..domain.errors import AccountError, FieldError, InternalError, Unauthorized, ValidationError

logger = logging.getLogger(__name__)


def error_response(
    status_code: int,
    message: str,
    errors: Sequence[FieldError] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    envelope = Envelope(
        success=False,
        message=message,
        errors=[FieldErrorOut(field=e.field, message=e.message) for e in errors] if errors else None,
    )
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(envelope, exclude_none=True),
        headers=headers,
    )


def _field_name(loc: Sequence[Any]) -> str:
    # loc looks like ("body", "fullName") or ("query", "page")
    parts = [str(part) for part in loc if part not in ("body", "query", "path", "header")]
    if not parts:
        return "body"
    return ".".join(to_camel(part) if "_" in part else part for part in parts)


def _validation_messages(exc: RequestValidationError) -> list[FieldError]:
    errors: list[FieldError] = []
    for err in exc.errors():
        if err.get("type") == "extra_forbidden":
            message = "This field cannot be changed here"
        else:
            message = str(err.get("msg", "Invalid value"))
        errors.append(FieldError(_field_name(err.get("loc", ())), message))
    return errors


async def handle_account_error(request: Request, exc: AccountError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthorized) else None
    errors = exc.errors if isinstance(exc, ValidationError) else None
    return error_response(exc.status_code, exc.message, errors, headers)


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(400, ValidationError.default_message, _validation_messages(exc))


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    if exc.status_code == 404 and message == "Not Found":
        message = "Route not found"
    return error_response(exc.status_code, message, headers=getattr(exc, "headers", None))


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return error_response(InternalError.status_code, InternalError.default_message)


def install_error_handlers(app: FastAPI) -> None:
    """Register the envelope-producing handlers on ``app``."""
    app.add_exception_handler(AccountError, handle_account_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected)
