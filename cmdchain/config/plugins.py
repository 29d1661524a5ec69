"""Validation of plugin option bags against their declared constraints."""

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, ValidationError

from cmdchain.core.errors import PluginConfigurationError


if TYPE_CHECKING:
    from cmdchain.plugins.base import BasePlugin


class PluginOptions(BaseModel):
    """Default option model: any key is accepted as-is."""

    model_config = ConfigDict(extra="allow")


def validate_plugin_options(
    plugin_name: str,
    plugin_cls: "type[BasePlugin]",
    raw_options: dict[str, Any] | None,
) -> PluginOptions:
    """Validate raw options against ``plugin_cls.args_constraints``.

    Args:
        plugin_name: Registration name, used in error messages
        plugin_cls: Plugin class declaring the constraints
        raw_options: Option bag as supplied by the user

    Returns:
        Validated option model instance

    Raises:
        PluginConfigurationError: If the options violate the constraints
    """
    constraints = plugin_cls.args_constraints
    try:
        return constraints.model_validate(raw_options or {})
    except ValidationError as e:
        raise PluginConfigurationError(
            f"Invalid options for plugin {plugin_name}",
            details={"errors": e.errors(include_url=False)},
        ) from e
