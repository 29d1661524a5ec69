"""Base class every command-interception plugin derives from.

A plugin can:

- declare new routes through ``new_method_map``, each bound to a command name
- declare the constraints its options must satisfy through ``args_constraints``
- extend the server (routes and listeners) at startup in ``update_server``
- intercept commands, either one command at a time with methods decorated by
  :func:`command_handler`, or every command through :meth:`BasePlugin.handle`
- vote on whether a proxied request must be handled locally in
  :meth:`BasePlugin.should_avoid_proxy`

Continuation contract
---------------------
Every handler receives ``call_next``, a zero-argument coroutine function that
runs the next plugin in the chain (or the driver when this is the last one).
A handler calls it at most once. A handler that does not call it replaces the
driver entirely and becomes responsible for the driver's bookkeeping, which
it takes over with::

    async with driver.take_over_bookkeeping(command_name):
        ...

Calling ``call_next`` twice, or skipping both ``call_next`` and the
bookkeeping takeover, is a bug in the plugin and is not detected.
"""

from abc import ABC
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar, TypeVar

from pydantic import BaseModel

from cmdchain.config.plugins import PluginOptions
from cmdchain.core.errors import CapabilityNotImplementedError
from cmdchain.core.logging import get_plugin_logger


if TYPE_CHECKING:
    from fastapi import FastAPI

    from cmdchain.driver.base import BaseDriver
    from cmdchain.hooks import ListenerRegistry


Continuation = Callable[[], Awaitable[Any]]

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])

_COMMANDS_ATTR = "__cmdchain_commands__"


def command_handler(*command_names: str) -> Callable[[F], F]:
    """Mark a plugin method as the handler of one or more commands.

    The decorated coroutine is called as ``handler(call_next, driver, *args)``.
    """
    if not command_names:
        raise TypeError("command_handler() needs at least one command name")

    def decorator(func: F) -> F:
        existing: tuple[str, ...] = getattr(func, _COMMANDS_ATTR, ())
        setattr(func, _COMMANDS_ATTR, existing + command_names)
        return func

    return decorator


@dataclass(frozen=True)
class CommandHandler:
    """Handler written for one specific command."""

    func: Callable[..., Awaitable[Any]]

    async def __call__(
        self,
        call_next: Continuation,
        driver: "BaseDriver",
        command_name: str,
        *args: Any,
    ) -> Any:
        return await self.func(call_next, driver, *args)


@dataclass(frozen=True)
class GenericHandler:
    """The plugin's catch-all ``handle`` method."""

    func: Callable[..., Awaitable[Any]]

    async def __call__(
        self,
        call_next: Continuation,
        driver: "BaseDriver",
        command_name: str,
        *args: Any,
    ) -> Any:
        return await self.func(call_next, driver, command_name, *args)


Handler = CommandHandler | GenericHandler


class BasePlugin(ABC):
    """Base class for command-interception plugins."""

    #: Routes added to the server, ``path -> {METHOD -> {command, payload_params}}``.
    new_method_map: ClassVar[dict[str, dict[str, Any]]] = {}

    #: Model the plugin's options are validated against before construction.
    args_constraints: ClassVar[type[BaseModel]] = PluginOptions

    #: Command name -> attribute name, collected when the subclass is defined.
    _command_handlers: ClassVar[dict[str, str]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        handlers = dict(cls._command_handlers)
        own: dict[str, str] = {}
        for attr_name, value in cls.__dict__.items():
            for command_name in getattr(value, _COMMANDS_ATTR, ()):
                if command_name in own:
                    raise TypeError(
                        f"{cls.__name__} declares two handlers for {command_name}: "
                        f"{own[command_name]} and {attr_name}"
                    )
                own[command_name] = attr_name
        handlers.update(own)
        cls._command_handlers = handlers

    def __init__(self, name: str, opts: BaseModel | None = None) -> None:
        self.name = name
        self.opts = opts if opts is not None else PluginOptions()
        self.logger = get_plugin_logger(name)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r}>"

    @classmethod
    async def update_server(
        cls, app: "FastAPI", listeners: "ListenerRegistry"
    ) -> None:
        """Optionally mutate the server before it accepts requests.

        Args:
            app: FastAPI application; routes added here are served as-is
            listeners: Registry for protocol-level listeners
        """
        return None

    @classmethod
    def handled_commands(cls) -> list[str]:
        """Names of the commands this plugin has specific handlers for."""
        return sorted(cls._command_handlers)

    def resolve_handler(self, command_name: str) -> Handler:
        """Pick the specific handler for ``command_name``, else ``handle``."""
        attr_name = self._command_handlers.get(command_name)
        if attr_name is not None:
            return CommandHandler(getattr(self, attr_name))
        return GenericHandler(self.handle)

    async def handle(
        self,
        call_next: Continuation,
        driver: "BaseDriver",
        command_name: str,
        *args: Any,
    ) -> Any:
        """Handle any command without a specific handler.

        Args:
            call_next: Runs the rest of the chain and returns its result
            driver: Driver currently handling commands
            command_name: Name of the command being handled
            *args: Arguments the command would be called with

        Returns:
            The result to send to the client
        """
        return await call_next()

    def should_avoid_proxy(self, method: str, route: str, body: Any) -> bool:
        """Decide whether a request must be handled locally instead of proxied.

        Plugins that work alongside proxying drivers override this. The
        default refuses to guess.

        Raises:
            CapabilityNotImplementedError: Always, unless overridden
        """
        raise CapabilityNotImplementedError(
            f"Plugin {self.name} does not implement should_avoid_proxy",
            details={"plugin": self.name, "capability": "should_avoid_proxy"},
        )
