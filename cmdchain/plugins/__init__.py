"""Command interception plugins.

Plugins wrap the driver's command execution in a chain, may add routes and
listeners to the server, and vote on whether proxied requests must be handled
locally.
"""

from .base import (
    BasePlugin,
    CommandHandler,
    Continuation,
    GenericHandler,
    Handler,
    command_handler,
)
from .chain import build_chain
from .declaration import MethodSpec, PayloadParams, RouteMap, parse_route_map
from .extensions import apply_server_extensions
from .proxy import should_handle_locally
from .registry import PluginRegistration, PluginRegistry


__all__ = [
    "BasePlugin",
    "CommandHandler",
    "Continuation",
    "GenericHandler",
    "Handler",
    "MethodSpec",
    "PayloadParams",
    "PluginRegistration",
    "PluginRegistry",
    "RouteMap",
    "apply_server_extensions",
    "build_chain",
    "command_handler",
    "parse_route_map",
    "should_handle_locally",
]
