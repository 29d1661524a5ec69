"""FastAPI application factory for the cmdchain server."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from structlog import get_logger

from cmdchain import __version__
from cmdchain.api.middleware.errors import setup_error_handlers
from cmdchain.api.middleware.listeners import RequestListenerMiddleware
from cmdchain.api.routes.commands import build_command_router
from cmdchain.api.routes.method_map import BASE_ROUTE_MAP
from cmdchain.api.routes.plugins import router as plugins_router
from cmdchain.config.settings import Settings
from cmdchain.driver.base import BaseDriver
from cmdchain.hooks import ListenerManager, ListenerRegistry, ServerEvent
from cmdchain.plugins.base import BasePlugin
from cmdchain.plugins.extensions import apply_server_extensions
from cmdchain.plugins.registry import PluginRegistry
from cmdchain.services.command_executor import CommandExecutor


logger = get_logger(__name__)


def create_registry(
    settings: Settings, plugins: dict[str, type[BasePlugin]]
) -> PluginRegistry:
    """Register ``plugins`` in order, with options taken from ``settings.plugins``."""
    registry = PluginRegistry(base_route_map=BASE_ROUTE_MAP)
    for name, plugin_cls in plugins.items():
        registry.register(name, plugin_cls, settings.plugins.get(name))
    return registry


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Apply plugin server extensions before traffic starts.

    A failing extension aborts startup.
    """
    registry: PluginRegistry = app.state.plugin_registry
    listeners: ListenerRegistry = app.state.listener_registry
    manager: ListenerManager = app.state.listener_manager
    driver: BaseDriver = app.state.driver

    await apply_server_extensions(registry.plugins, app, listeners)
    registry.freeze()

    logger.info(
        "server_ready",
        plugins=registry.list_plugins(),
        listeners=listeners.summary(),
    )
    await manager.emit(ServerEvent.SERVER_STARTED, app=app)
    try:
        yield
    finally:
        await manager.emit(ServerEvent.SERVER_STOPPING, app=app)
        await driver.close()
        logger.info("server_stopped")


def create_app(
    settings: Settings, registry: PluginRegistry, driver: BaseDriver
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        settings: Server settings
        registry: Registry with all plugins already registered
        driver: Driver executing commands at the end of every chain

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="cmdchain",
        description="Automation server with a command interception plugin chain",
        version=__version__,
        lifespan=lifespan,
    )

    listeners = ListenerRegistry()
    manager = ListenerManager(listeners)

    app.state.settings = settings
    app.state.plugin_registry = registry
    app.state.listener_registry = listeners
    app.state.listener_manager = manager
    app.state.driver = driver
    app.state.command_executor = CommandExecutor(registry, driver)

    setup_error_handlers(app)
    app.add_middleware(RequestListenerMiddleware, manager=manager)

    app.include_router(plugins_router)
    app.include_router(build_command_router(registry.route_map))

    return app
