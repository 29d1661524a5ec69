"""Exception hierarchy for the command interception chain."""

from typing import Any


class CommandChainError(Exception):
    """Base exception for all cmdchain errors."""

    error_type: str = "command_chain_error"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class CapabilityNotImplementedError(CommandChainError, NotImplementedError):
    """Raised when a plugin decision hook was declared but never overridden."""

    error_type = "capability_not_implemented"


class PluginRegistrationError(CommandChainError):
    """Raised when a plugin cannot be added to the registry."""

    error_type = "plugin_registration_error"


class RouteConflictError(PluginRegistrationError):
    """Raised when two route maps bind the same path and method."""

    error_type = "route_conflict"


class PluginConfigurationError(CommandChainError):
    """Raised when plugin options fail their declared constraints."""

    error_type = "plugin_configuration_error"


class ProxyDecisionError(CommandChainError):
    """Raised when a proxy-avoidance predicate misbehaves."""

    error_type = "proxy_decision_error"


class ServerExtensionError(CommandChainError):
    """Raised when a plugin fails to extend the server at startup."""

    error_type = "server_extension_error"


class ListenerRegistryFrozenError(CommandChainError):
    """Raised when a listener is added after startup finished."""

    error_type = "listener_registry_frozen"


class UnknownCommandError(CommandChainError):
    """Raised when the driver has no implementation for a command."""

    error_type = "unknown_command"


class PayloadValidationError(CommandChainError):
    """Raised when a request body misses required payload params."""

    error_type = "invalid_argument"


class ProxyUnavailableError(CommandChainError):
    """Raised when a command should be proxied but the driver cannot proxy."""

    error_type = "proxy_unavailable"
