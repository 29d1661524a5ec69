"""Plugin listing API endpoint."""

from fastapi import APIRouter, Request
from pydantic import BaseModel

from cmdchain.plugins.registry import PluginRegistry


router = APIRouter(prefix="/plugins", tags=["plugins"])


class PluginRoute(BaseModel):
    """A route a plugin added to the server."""

    path: str
    method: str
    command: str


class PluginInfo(BaseModel):
    """Plugin information model."""

    name: str
    plugin_class: str
    position: int
    commands: list[str]
    routes: list[PluginRoute]


class PluginListResponse(BaseModel):
    """Response model for plugin list."""

    plugins: list[PluginInfo]
    total: int


@router.get("", response_model=PluginListResponse)
async def list_plugins(request: Request) -> PluginListResponse:
    """List registered plugins in chain order (outermost first)."""
    registry: PluginRegistry = request.app.state.plugin_registry

    plugins = [
        PluginInfo(
            name=registration.name,
            plugin_class=type(registration.plugin).__name__,
            position=position,
            commands=registration.plugin.handled_commands(),
            routes=[
                PluginRoute(path=path, method=method, command=spec.command)
                for path, methods in registration.route_map.items()
                for method, spec in methods.items()
            ],
        )
        for position, registration in enumerate(registry.registrations)
    ]
    return PluginListResponse(plugins=plugins, total=len(plugins))
