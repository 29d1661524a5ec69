"""Startup phase in which plugins extend the server."""

from collections.abc import Sequence
from typing import TYPE_CHECKING

import structlog

from cmdchain.core.errors import ServerExtensionError

from .base import BasePlugin


if TYPE_CHECKING:
    from fastapi import FastAPI

    from cmdchain.hooks import ListenerRegistry


logger = structlog.get_logger(__name__)


async def apply_server_extensions(
    plugins: Sequence[BasePlugin],
    app: "FastAPI",
    listeners: "ListenerRegistry",
) -> None:
    """Run every plugin's ``update_server`` hook, in registration order.

    Must complete before the server accepts requests. The listener registry
    is frozen afterwards.

    Raises:
        ServerExtensionError: If any hook fails; startup must not continue
    """
    for plugin in plugins:
        try:
            await type(plugin).update_server(app, listeners)
        except Exception as e:
            logger.error(
                "server_extension_failed",
                plugin=plugin.name,
                error=str(e),
                exc_info=e,
            )
            raise ServerExtensionError(
                f"Plugin {plugin.name} failed to update the server: {e}",
                details={"plugin": plugin.name},
            ) from e
        logger.debug("server_extension_applied", plugin=plugin.name)

    listeners.freeze()
    logger.info("server_extensions_applied", count=len(plugins))
