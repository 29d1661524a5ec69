"""Central registry for server listeners"""

from collections import defaultdict
from collections.abc import Awaitable, Callable
from typing import Any

import structlog

from cmdchain.core.errors import ListenerRegistryFrozenError

from .events import ServerEvent


Listener = Callable[..., Awaitable[None] | None]


class ListenerRegistry:
    """Central registry for server listeners.

    Plugins add listeners while the server extensions are applied. Once the
    server starts accepting requests the registry is frozen.
    """

    def __init__(self) -> None:
        self._listeners: dict[ServerEvent, list[Listener]] = defaultdict(list)
        self._frozen = False
        self._logger = structlog.get_logger(__name__)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def add_listener(self, event: ServerEvent, listener: Listener) -> None:
        """Register a listener for an event"""
        if self._frozen:
            raise ListenerRegistryFrozenError(
                f"Cannot add listener for {event.value} after server startup"
            )
        self._listeners[event].append(listener)
        self._logger.debug(
            "listener_registered",
            listener=getattr(listener, "__qualname__", repr(listener)),
            server_event=event.value,
        )

    def remove_listener(self, event: ServerEvent, listener: Listener) -> None:
        """Remove a listener from an event"""
        if self._frozen:
            raise ListenerRegistryFrozenError(
                f"Cannot remove listener for {event.value} after server startup"
            )
        if listener in self._listeners[event]:
            self._listeners[event].remove(listener)

    def get_listeners(self, event: ServerEvent) -> list[Listener]:
        """Get all listeners for an event"""
        return list(self._listeners.get(event, []))

    def freeze(self) -> None:
        self._frozen = True

    def summary(self) -> dict[str, Any]:
        return {event.value: len(items) for event, items in self._listeners.items()}
