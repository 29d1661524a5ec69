"""Event definitions for the server listener system."""

from enum import Enum


class ServerEvent(str, Enum):
    """Events plugins can attach listeners to"""

    # Server Lifecycle
    SERVER_STARTED = "server.started"
    SERVER_STOPPING = "server.stopping"

    # Request Lifecycle
    REQUEST_RECEIVED = "request.received"
