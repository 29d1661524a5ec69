"""Listener system for cmdchain.

Plugins attach protocol-level listeners to server events while the server
extensions are applied at startup.

Key components:
- ServerEvent: Enumeration of all supported events
- ListenerRegistry: Registry the plugins add listeners to
- ListenerManager: Manager for emitting events to listeners
"""

from .events import ServerEvent
from .manager import ListenerManager
from .registry import Listener, ListenerRegistry


__all__ = ["Listener", "ListenerManager", "ListenerRegistry", "ServerEvent"]
