"""Plugin vote on whether a request may be proxied."""

from collections.abc import Sequence
from typing import Any

import structlog

from cmdchain.core.errors import ProxyDecisionError

from .base import BasePlugin


logger = structlog.get_logger(__name__)


def should_handle_locally(
    plugins: Sequence[BasePlugin], method: str, route: str, body: Any
) -> bool:
    """Return True if any plugin requires local handling of the request.

    Plugins are asked in registration order and the first True wins. Errors
    raised by a predicate, including the default
    ``CapabilityNotImplementedError``, propagate to the caller.

    Raises:
        ProxyDecisionError: If a predicate returns something other than a bool
    """
    for plugin in plugins:
        vote = plugin.should_avoid_proxy(method, route, body)
        if not isinstance(vote, bool):
            raise ProxyDecisionError(
                f"Plugin {plugin.name} returned {type(vote).__name__} from "
                "should_avoid_proxy, expected bool",
                details={"plugin": plugin.name},
            )
        if vote:
            logger.debug(
                "proxy_avoided_by_plugin",
                plugin=plugin.name,
                method=method,
                route=route,
            )
            return True
    return False
