"""Middleware emitting request events to plugin listeners."""

from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from cmdchain.hooks import ListenerManager, ServerEvent


class RequestListenerMiddleware(BaseHTTPMiddleware):
    """Emits ``ServerEvent.REQUEST_RECEIVED`` before each request is routed."""

    def __init__(self, app: ASGIApp, manager: ListenerManager):
        super().__init__(app)
        self.manager = manager

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        await self.manager.emit(ServerEvent.REQUEST_RECEIVED, request=request)
        return await call_next(request)
