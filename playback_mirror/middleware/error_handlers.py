"""Exception handlers mapping errors onto JSON responses."""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from playback_mirror.exceptions import ErrorCode, MirrorException
from playback_mirror.logging_config import get_logger, log_with_context

logger = get_logger(__name__)


def _error_response(status_code: int, code: str, message: str, details: dict[str, Any] | None = None) -> JSONResponse:
    error: dict[str, Any] = {"code": code, "message": message}
    if details is not None:
        error["details"] = details
    return JSONResponse(status_code=status_code, content={"error": error})


async def mirror_exception_handler(request: Request, exc: MirrorException) -> JSONResponse:
    """Render a MirrorException as ``{"error": {code, message, details}}``.

    Client errors (4xx) are logged at warning, upstream and server errors at error.
    """
    log_with_context(
        logger,
        "error" if exc.status_code >= 500 else "warning",
        "Request failed",
        error_code=exc.code.value,
        error_message=exc.message,
        status_code=exc.status_code,
        method=request.method,
        url=request.url.path,
        event_type="mirror_error",
    )
    return _error_response(exc.status_code, exc.code.value, exc.message, exc.details)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log an unexpected error with its traceback and answer an opaque 500."""
    log_with_context(
        logger,
        "error",
        "Unhandled exception",
        error=str(exc),
        error_type=type(exc).__name__,
        method=request.method,
        url=request.url.path,
        event_type="unhandled_error",
    )
    logger.error("Unhandled exception traceback", exc_info=exc)

    return _error_response(500, ErrorCode.INTERNAL_ERROR.value, "Internal server error")


def register_error_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the application.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(MirrorException, mirror_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
