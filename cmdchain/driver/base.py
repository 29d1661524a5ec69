"""Driver collaborator: runs commands and owns per-session bookkeeping."""

import asyncio
import time
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, ClassVar

from pydantic import BaseModel, Field

from cmdchain.core.errors import ProxyUnavailableError, UnknownCommandError
from cmdchain.core.logging import get_logger


class CommandHistoryEntry(BaseModel):
    """One executed command with wall-clock start and end (epoch seconds)."""

    cmd: str
    start_time: float
    end_time: float


class EventHistory(BaseModel):
    """Append-only record of commands run in a session."""

    commands: list[CommandHistoryEntry] = Field(default_factory=list)


@dataclass
class BookkeepingReceipt:
    """Acknowledges that a caller took over bookkeeping for one command.

    ``entry`` is filled in once the bookkeeping block exits.
    """

    command_name: str
    entry: CommandHistoryEntry | None = None


CommandFunc = Callable[..., Awaitable[Any]]


class BaseDriver(ABC):
    """Base class for automation drivers.

    Subclasses map command names to coroutine functions in
    :meth:`command_map`. :meth:`execute_command` is the terminal link of
    every plugin chain and performs the bookkeeping for the command:
    the idle timer is stopped while the command runs and restarted after it,
    and a history entry is appended.
    """

    #: Commands after which the idle timer is not restarted.
    session_ending_commands: ClassVar[frozenset[str]] = frozenset({"deleteSession"})

    def __init__(self, new_command_timeout: float = 60.0) -> None:
        self.new_command_timeout = new_command_timeout
        self.event_history = EventHistory()
        self.logger = get_logger(type(self).__name__)
        self._timeout_handle: asyncio.TimerHandle | None = None
        self._timeout_tasks: set[asyncio.Task[None]] = set()
        self._commands_in_flight = 0

    @abstractmethod
    def command_map(self) -> dict[str, CommandFunc]:
        """Return the commands this driver implements, keyed by name."""
        ...

    async def run_command(self, command_name: str, *args: Any) -> Any:
        """Run a command without any bookkeeping.

        Raises:
            UnknownCommandError: If the driver does not implement the command
        """
        func = self.command_map().get(command_name)
        if func is None:
            raise UnknownCommandError(
                f"Command {command_name} is not implemented by {type(self).__name__}",
                details={"command": command_name},
            )
        return await func(*args)

    async def execute_command(self, command_name: str, *args: Any) -> Any:
        """Run a command with full bookkeeping. Used as the chain terminal."""
        async with self.take_over_bookkeeping(command_name):
            return await self.run_command(command_name, *args)

    @asynccontextmanager
    async def take_over_bookkeeping(
        self, command_name: str
    ) -> AsyncIterator[BookkeepingReceipt]:
        """Do the terminal's bookkeeping around the caller's own work.

        A plugin handler that answers a command without calling ``call_next``
        wraps its work in this block. The history entry is recorded even if
        the block raises. With overlapping commands the idle timer restarts
        only once the last of them finishes.
        """
        receipt = BookkeepingReceipt(command_name=command_name)
        self.stop_new_command_timeout()
        self._commands_in_flight += 1
        start_time = time.time()
        try:
            yield receipt
        finally:
            entry = CommandHistoryEntry(
                cmd=command_name, start_time=start_time, end_time=time.time()
            )
            self.event_history.commands.append(entry)
            receipt.entry = entry
            self._commands_in_flight -= 1
            if (
                not self._commands_in_flight
                and command_name not in self.session_ending_commands
            ):
                self.start_new_command_timeout()

    # Idle timer

    @property
    def timeout_active(self) -> bool:
        return self._timeout_handle is not None

    def stop_new_command_timeout(self) -> None:
        if self._timeout_handle is not None:
            self._timeout_handle.cancel()
            self._timeout_handle = None

    def start_new_command_timeout(self) -> None:
        self.stop_new_command_timeout()
        if not self.new_command_timeout:
            return
        loop = asyncio.get_running_loop()
        self._timeout_handle = loop.call_later(
            self.new_command_timeout, self._fire_new_command_timeout
        )

    def _fire_new_command_timeout(self) -> None:
        self._timeout_handle = None
        task = asyncio.get_running_loop().create_task(self.on_new_command_timeout())
        self._timeout_tasks.add(task)
        task.add_done_callback(self._timeout_tasks.discard)

    async def on_new_command_timeout(self) -> None:
        """Called when no command arrived within ``new_command_timeout``."""
        self.logger.warning(
            "new_command_timeout_expired", timeout=self.new_command_timeout
        )

    # Proxying

    def is_proxy_active(self) -> bool:
        """Whether requests are currently forwarded to an upstream server."""
        return False

    async def proxy_command(self, method: str, route: str, body: Any) -> Any:
        """Forward a request upstream and return the upstream value."""
        raise ProxyUnavailableError(
            f"{type(self).__name__} cannot proxy {method} {route}",
            details={"method": method, "route": route},
        )

    async def close(self) -> None:
        self.stop_new_command_timeout()
        for task in list(self._timeout_tasks):
            task.cancel()
