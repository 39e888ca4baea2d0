"""Error Handlers — every failure leaves the API as a MutualAidError envelope.

Invariants:
    - Domain errors render with their own status, code and context
    - Request validation failures become InvalidInputError (400, VALIDATION_ERROR)
      naming the first offending field, with every pydantic error under "details"
    - Unhandled exceptions become InternalError (500); the traceback is logged,
      never returned

Design Decisions:
    - One renderer (_render) for all three handlers: the envelope shape and the
      log level rule (>=500 is ERROR) live in one place
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from mutual_aid.core.errors import InternalError, InvalidInputError, MutualAidError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(MutualAidError, _handle_domain_error)
    app.add_exception_handler(RequestValidationError, _handle_validation_error)
    app.add_exception_handler(Exception, _handle_unexpected_error)


def _render(
    request: Request, exc: MutualAidError, details: list[dict] | None = None,
) -> JSONResponse:
    level = logging.ERROR if exc.http_status >= 500 else logging.WARNING
    logger.log(
        level,
        f"{exc.code}: {exc.message}",
        extra={
            "error_code": exc.code,
            "path": request.url.path,
            "user_id": exc.context.user_id,
            "resource_type": exc.context.resource_type,
            "resource_id": exc.context.resource_id,
        },
    )
    body = exc.to_response()
    if details:
        body["error"]["details"] = details
    return JSONResponse(status_code=exc.http_status, content=body)


async def _handle_domain_error(request: Request, exc: MutualAidError) -> JSONResponse:
    return _render(request, exc)


def _field_path(loc: tuple) -> str:
    # Drop the "body"/"query"/"path" prefix pydantic puts first
    parts = loc[1:] if len(loc) > 1 else loc
    return ".".join(str(p) for p in parts)


async def _handle_validation_error(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    errors = exc.errors()
    details = [
        {"field": _field_path(e["loc"]), "message": e["msg"], "type": e["type"]}
        for e in errors
    ]
    error = InvalidInputError(
        "Invalid request data", "VALIDATION_ERROR",
        field=details[0]["field"] if details else None,
    )
    return _render(request, error, details)


async def _handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled exception on {request.url.path}: {exc!r}", exc_info=exc)
    return _render(request, InternalError())
