"""Process-wide registration list of plugins."""

from dataclasses import dataclass, field
from typing import Any

import structlog
from pydantic import ValidationError

from cmdchain.config.plugins import validate_plugin_options
from cmdchain.core.errors import (
    PluginConfigurationError,
    PluginRegistrationError,
    RouteConflictError,
)

from .base import BasePlugin
from .declaration import MethodSpec, RouteMap, parse_route_map, route_key


logger = structlog.get_logger(__name__)

BASE_OWNER = "<base>"


@dataclass
class PluginRegistration:
    """One registration slot: the plugin instance and the routes it added."""

    name: str
    plugin: BasePlugin
    route_map: RouteMap = field(default_factory=dict)


class PluginRegistry:
    """Ordered registry of plugins.

    Populated once at startup and frozen before the server accepts requests.
    Registration order is the order plugins wrap commands: the first
    registered plugin is the outermost link of every chain.
    """

    def __init__(self, base_route_map: dict[str, dict[str, Any]] | None = None):
        self._registrations: dict[str, PluginRegistration] = {}
        self._route_map: RouteMap = {}
        self._route_owners: dict[tuple[str, str], str] = {}
        self._frozen = False
        if base_route_map:
            self._merge_routes(BASE_OWNER, parse_route_map(base_route_map))

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def plugins(self) -> tuple[BasePlugin, ...]:
        return tuple(r.plugin for r in self._registrations.values())

    @property
    def registrations(self) -> tuple[PluginRegistration, ...]:
        return tuple(self._registrations.values())

    @property
    def route_map(self) -> RouteMap:
        return {path: dict(methods) for path, methods in self._route_map.items()}

    def list_plugins(self) -> list[str]:
        return list(self._registrations)

    def get(self, name: str) -> BasePlugin | None:
        registration = self._registrations.get(name)
        return registration.plugin if registration else None

    def route_owner(self, path: str, method: str) -> str | None:
        """Name of the plugin (or ``<base>``) that bound ``method path``."""
        return self._route_owners.get((route_key(path), method.upper()))

    def register(
        self,
        name: str,
        plugin_cls: type[BasePlugin],
        raw_options: dict[str, Any] | None = None,
    ) -> BasePlugin:
        """Validate options, instantiate the plugin and add it to the chain.

        Args:
            name: Unique registration name
            plugin_cls: Plugin class to instantiate
            raw_options: Option bag, validated against ``args_constraints``

        Returns:
            The registered plugin instance

        Raises:
            PluginRegistrationError: Duplicate name, frozen registry or bad route map
            RouteConflictError: A declared route is already bound
            PluginConfigurationError: Options violate the plugin's constraints
        """
        if self._frozen:
            raise PluginRegistrationError(
                f"Cannot register plugin {name}: registry is frozen"
            )
        if name in self._registrations:
            raise PluginRegistrationError(f"Duplicate plugin name: {name}")
        if not (isinstance(plugin_cls, type) and issubclass(plugin_cls, BasePlugin)):
            raise PluginRegistrationError(
                f"Plugin {name} must be a BasePlugin subclass, got {plugin_cls!r}"
            )

        try:
            route_map = parse_route_map(plugin_cls.new_method_map)
        except ValidationError as e:
            logger.error("plugin_rejected", plugin=name, reason="invalid_route_map")
            raise PluginRegistrationError(
                f"Plugin {name} declares an invalid route map",
                details={"errors": e.errors(include_url=False)},
            ) from e

        try:
            self._check_route_conflicts(name, route_map)
            opts = validate_plugin_options(name, plugin_cls, raw_options)
        except (RouteConflictError, PluginConfigurationError) as e:
            logger.error("plugin_rejected", plugin=name, reason=e.error_type)
            raise

        plugin = plugin_cls(name, opts)
        self._merge_routes(name, route_map)
        self._registrations[name] = PluginRegistration(
            name=name, plugin=plugin, route_map=route_map
        )
        logger.info(
            "plugin_registered",
            plugin=name,
            plugin_class=plugin_cls.__name__,
            commands=plugin_cls.handled_commands(),
            routes=sorted(route_map),
            position=len(self._registrations) - 1,
        )
        return plugin

    def freeze(self) -> None:
        self._frozen = True

    def _check_route_conflicts(self, name: str, route_map: RouteMap) -> None:
        declared: dict[tuple[str, str], str] = {}
        for path, methods in route_map.items():
            for method in methods:
                key = (route_key(path), method)
                if key in declared:
                    raise RouteConflictError(
                        f"Plugin {name} binds {method} {path} and "
                        f"{method} {declared[key]}, which match the same requests",
                        details={"plugin": name, "path": path, "method": method},
                    )
                declared[key] = path
                owner = self.route_owner(path, method)
                if owner is not None:
                    raise RouteConflictError(
                        f"Plugin {name} cannot bind {method} {path}: "
                        f"already bound by {owner}",
                        details={"plugin": name, "path": path, "method": method},
                    )

    def _merge_routes(self, owner: str, route_map: RouteMap) -> None:
        for path, methods in route_map.items():
            merged: dict[str, MethodSpec] = self._route_map.setdefault(path, {})
            for method, spec in methods.items():
                merged[method] = spec
                self._route_owners[(route_key(path), method)] = owner
