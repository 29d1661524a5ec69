"""Composition of plugin handlers around the driver's command call."""

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from .base import BasePlugin, Continuation, Handler


if TYPE_CHECKING:
    from cmdchain.driver.base import BaseDriver


def build_chain(
    plugins: Sequence[BasePlugin],
    command_name: str,
    driver: "BaseDriver",
    args: Sequence[Any],
    terminal: Continuation,
) -> Continuation:
    """Wrap ``terminal`` in the handlers of ``plugins``.

    The first plugin becomes the outermost link: it runs first and its return
    value is the final result. The terminal call is the innermost link and
    only runs if every plugin delegates. Handlers are resolved here, once per
    build.

    Args:
        plugins: Plugins in registration order
        command_name: Command being executed
        driver: Driver passed to every handler
        args: Command arguments passed to every handler
        terminal: Zero-argument coroutine function doing the real work

    Returns:
        Zero-argument coroutine function running the whole chain
    """
    call_next = terminal
    for plugin in reversed(plugins):
        call_next = _link(
            plugin.resolve_handler(command_name),
            call_next,
            driver,
            command_name,
            tuple(args),
        )
    return call_next


def _link(
    handler: Handler,
    call_next: Continuation,
    driver: "BaseDriver",
    command_name: str,
    args: tuple[Any, ...],
) -> Continuation:
    async def run() -> Any:
        return await handler(call_next, driver, command_name, *args)

    return run
