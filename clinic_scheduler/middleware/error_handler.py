"""Error handlers rendering RFC 7807 problem details."""

from http import HTTPStatus
from typing import Any

import structlog
from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from clinic_scheduler.config import settings
from clinic_scheduler.core.exceptions import AppException

PROBLEM_JSON = "application/problem+json"

logger = structlog.get_logger()


def problem_response(
    request: Request,
    status_code: int,
    detail: str,
    problem_type: str | None = None,
    headers: dict[str, str] | None = None,
    **extra: Any,
) -> JSONResponse:
    """
    Build a problem details response.

    Args:
        request: Request object
        status_code: HTTP status code
        detail: Human-readable explanation of this occurrence
        problem_type: Stable problem slug; ``about:blank`` when omitted
        headers: Extra response headers
        extra: Extension members

    Returns:
        JSON problem response
    """
    content = {
        "type": f"{settings.problem_type_base}{problem_type}" if problem_type else "about:blank",
        "title": HTTPStatus(status_code).phrase,
        "status": status_code,
        "detail": detail,
        "instance": request.url.path,
        **extra,
    }
    return JSONResponse(
        status_code=status_code,
        content=content,
        media_type=PROBLEM_JSON,
        headers=headers,
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handle custom application exceptions."""
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return problem_response(
        request,
        exc.status_code,
        exc.message,
        problem_type=exc.problem_type,
        headers=headers,
    )


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException,
) -> JSONResponse:
    """Handle HTTP exceptions raised by the framework (404 routes, 405, ...)."""
    return problem_response(
        request,
        exc.status_code,
        str(exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """
    Handle validation errors.

    The pydantic error list is attached as the ``errors`` extension member.
    """
    return problem_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Request validation failed",
        problem_type="validation-error",
        errors=jsonable_encoder(exc.errors()),
    )


async def storage_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """
    Handle storage failures.

    The driver message goes to the log only; the client gets a generic detail.
    """
    connection_lost = isinstance(exc, DBAPIError) and exc.connection_invalidated
    logger.error(
        "storage_error",
        path=request.url.path,
        error_type=type(exc).__name__,
        error=str(exc),
        connection_invalidated=connection_lost,
    )
    if connection_lost or isinstance(exc, (OperationalError, InterfaceError)):
        return problem_response(
            request,
            status.HTTP_503_SERVICE_UNAVAILABLE,
            "The data store is temporarily unavailable",
            problem_type="storage-unavailable",
        )
    return problem_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "A storage error occurred",
        problem_type="storage-error",
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error("unhandled_exception", path=request.url.path, error_type=type(exc).__name__)
    return problem_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "An unexpected error occurred",
        problem_type="internal-error",
    )
