"""Error handling for the cmdchain HTTP surface.

Errors are returned in the W3C WebDriver shape:
``{"value": {"error": <type>, "message": <text>}}``.
"""

from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from structlog import get_logger

from cmdchain.core.errors import (
    CapabilityNotImplementedError,
    CommandChainError,
    PayloadValidationError,
    PluginConfigurationError,
    ProxyDecisionError,
    ProxyUnavailableError,
    UnknownCommandError,
)


logger = get_logger(__name__)


ERROR_STATUS_CODES: dict[type[Exception], int] = {
    CommandChainError: 500,
    PayloadValidationError: 400,
    UnknownCommandError: 404,
    CapabilityNotImplementedError: 500,
    PluginConfigurationError: 500,
    ProxyDecisionError: 500,
    ProxyUnavailableError: 502,
}


def error_body(error_type: str, message: str) -> dict[str, dict[str, str]]:
    return {"value": {"error": error_type, "message": message}}


def setup_error_handlers(app: FastAPI) -> None:
    """Setup error handlers for the FastAPI application.

    Args:
        app: FastAPI application instance
    """

    async def unified_error_handler(
        request: Request, exc: Exception, status_code: int
    ) -> JSONResponse:
        error_type = getattr(exc, "error_type", "unknown_error")
        log = logger.warning if status_code < 500 else logger.error
        log(
            "command_request_failed",
            error_type=error_type,
            error_message=str(exc),
            status_code=status_code,
            request_method=request.method,
            request_url=str(request.url.path),
        )
        return JSONResponse(
            status_code=status_code, content=error_body(error_type, str(exc))
        )

    def make_handler(
        status_code: int,
    ) -> Callable[[Request, Exception], Awaitable[JSONResponse]]:
        async def handler(request: Request, exc: Exception) -> JSONResponse:
            return await unified_error_handler(request, exc, status_code)

        return handler

    for exc_class, status_code in ERROR_STATUS_CODES.items():
        app.add_exception_handler(exc_class, make_handler(status_code))

    logger.debug("error_handlers_setup_completed", count=len(ERROR_STATUS_CODES))
