"""Listener execution manager.

This module provides the ListenerManager class which calls the listeners
registered for server events. Listener failures are isolated: they are logged
and never reach the request or the server lifecycle.
"""

import asyncio
from typing import Any

import structlog

from .events import ServerEvent
from .registry import Listener, ListenerRegistry


class ListenerManager:
    """Emits server events to registered listeners with error isolation."""

    def __init__(self, registry: ListenerRegistry):
        """Initialize the listener manager.

        Args:
            registry: The listener registry to read listeners from
        """
        self._registry = registry
        self._logger = structlog.get_logger(__name__)

    async def emit(self, event: ServerEvent, **data: Any) -> None:
        """Emit an event to all registered listeners.

        Listeners run in registration order. A failing listener is logged
        and the remaining listeners still run.

        Args:
            event: The event to emit
            **data: Keyword arguments passed to every listener
        """
        listeners = self._registry.get_listeners(event)
        if not listeners:
            return

        for listener in listeners:
            try:
                await self._execute_listener(listener, data)
            except Exception as e:
                self._logger.error(
                    "listener_failed",
                    listener=getattr(listener, "__qualname__", repr(listener)),
                    server_event=event.value,
                    error=str(e),
                    exc_info=e,
                )

    async def _execute_listener(
        self, listener: Listener, data: dict[str, Any]
    ) -> None:
        result = listener(**data)
        if asyncio.iscoroutine(result):
            await result
