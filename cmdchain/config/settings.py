import json
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core import DriverSettings, LoggingSettings, ServerSettings


__all__ = ["Settings", "ConfigurationError"]


class ConfigurationError(Exception):
    """Raised when configuration loading or validation fails."""

    pass


class Settings(BaseSettings):
    """
    Configuration settings for the cmdchain server.

    Settings are loaded from environment variables prefixed with ``CMDCHAIN_``
    and from a ``.env`` file. Nested fields use ``__`` as delimiter, e.g.
    ``CMDCHAIN_SERVER__PORT=4724``.
    """

    model_config = SettingsConfigDict(
        env_prefix="CMDCHAIN_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__",
    )

    server: ServerSettings = Field(
        default_factory=ServerSettings,
        description="Server configuration settings",
    )

    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Centralized logging configuration",
    )

    driver: DriverSettings = Field(
        default_factory=DriverSettings,
        description="Automation driver settings",
    )

    plugins: dict[str, dict[str, Any]] = Field(
        default_factory=dict,
        description="Plugin-specific option bags keyed by plugin name",
    )

    def with_plugin_args(self, plugin_args: str | None) -> "Settings":
        """Return a copy with a ``--plugin-args`` JSON object merged in.

        Keys already present in ``plugins`` are updated per option, so
        environment-provided options survive unless overridden.
        """
        if not plugin_args:
            return self
        try:
            parsed = json.loads(plugin_args)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Plugin args are not valid JSON: {e}") from e
        if not isinstance(parsed, dict) or not all(
            isinstance(v, dict) for v in parsed.values()
        ):
            raise ConfigurationError(
                "Plugin args must map plugin names to option objects"
            )

        merged = {name: dict(opts) for name, opts in self.plugins.items()}
        for name, opts in parsed.items():
            merged.setdefault(name, {}).update(opts)
        return self.model_copy(update={"plugins": merged})
