"""Configuration module for cmdchain."""

from .core import DriverSettings, LoggingSettings, ServerSettings
from .plugins import PluginOptions, validate_plugin_options
from .settings import ConfigurationError, Settings


__all__ = [
    "ConfigurationError",
    "DriverSettings",
    "LoggingSettings",
    "PluginOptions",
    "ServerSettings",
    "Settings",
    "validate_plugin_options",
]
