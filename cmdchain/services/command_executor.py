"""Entry point from a request to the plugin chain or the upstream proxy."""

from collections.abc import Sequence
from typing import Any

import structlog

from cmdchain.driver.base import BaseDriver
from cmdchain.plugins.chain import build_chain
from cmdchain.plugins.proxy import should_handle_locally
from cmdchain.plugins.registry import PluginRegistry


logger = structlog.get_logger(__name__)


class CommandExecutor:
    """Runs commands through the registered plugins and the driver."""

    def __init__(self, registry: PluginRegistry, driver: BaseDriver):
        self.registry = registry
        self.driver = driver

    async def execute(self, command_name: str, *args: Any) -> Any:
        """Execute a command through the plugin chain.

        The driver's ``execute_command`` is the terminal link. A fresh chain
        is built for every call.
        """
        plugins = self.registry.plugins

        async def terminal() -> Any:
            return await self.driver.execute_command(command_name, *args)

        chain = build_chain(plugins, command_name, self.driver, args, terminal)
        logger.debug(
            "command_chain_built",
            command=command_name,
            plugins=[p.name for p in plugins],
        )
        return await chain()

    async def dispatch(
        self,
        method: str,
        route: str,
        body: Any,
        command_name: str,
        args: Sequence[Any] = (),
    ) -> Any:
        """Proxy the request upstream or execute it locally, never both.

        Plugins are consulted only while the driver's proxy is active. Any
        plugin voting to avoid the proxy forces local execution.
        """
        if self.driver.is_proxy_active() and not should_handle_locally(
            self.registry.plugins, method, route, body
        ):
            logger.debug(
                "command_proxied", command=command_name, method=method, route=route
            )
            return await self.driver.proxy_command(method, route, body)
        return await self.execute(command_name, *args)
