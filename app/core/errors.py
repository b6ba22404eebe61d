"""Error envelope shared by every handler the API registers."""
from typing import Any

import sentry_sdk
import structlog
from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

logger = structlog.get_logger()


class ErrorResponse(BaseModel):
    """Body of every non-2xx JSON response."""
    error: str
    message: str
    detail: Any = None
    request_id: str = "unknown"


def _request_id(request: Request) -> str:
    return request.headers.get("x-request-id", "unknown")


def _error_response(
    status_code: int,
    body: ErrorResponse,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump(), headers=headers)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort for anything a route did not translate: log, report, 500."""
    request_id = _request_id(request)
    logger.error(
        "unhandled_exception",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        method=request.method,
        request_id=request_id,
    )
    sentry_sdk.capture_exception(exc)

    return _error_response(
        500,
        ErrorResponse(
            error="internal_server_error",
            message="An unexpected error occurred. Our team has been notified.",
            request_id=request_id,
        ),
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    # Routes raise with a plain string detail; a dict detail may override the error code.
    if isinstance(exc.detail, dict):
        body = ErrorResponse(
            error=exc.detail.get("error", f"http_{exc.status_code}"),
            message=exc.detail.get("message", str(exc.detail)),
            detail=exc.detail.get("detail"),
            request_id=_request_id(request),
        )
    else:
        body = ErrorResponse(
            error=f"http_{exc.status_code}",
            message=str(exc.detail),
            detail=exc.detail,
            request_id=_request_id(request),
        )
    return _error_response(exc.status_code, body, headers=dict(exc.headers or {}))


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed submissions (non-integer year, non-object data, negative answers)."""
    errors = jsonable_errors(exc.errors())
    logger.info(
        "request_validation_failed",
        path=request.url.path,
        fields=[".".join(str(part) for part in err["loc"]) for err in errors],
    )
    return _error_response(
        422,
        ErrorResponse(
            error="validation_error",
            message="Request payload failed validation.",
            detail=errors,
            request_id=_request_id(request),
        ),
    )


def jsonable_errors(errors: Any) -> list[dict[str, Any]]:
    """Keep loc/msg/type only; pydantic's ctx may hold exception objects."""
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in errors
    ]
