"""Plugin test doubles."""

from typing import Any

from fastapi import FastAPI, Request
from pydantic import BaseModel, ConfigDict

from cmdchain.driver.base import BaseDriver, BookkeepingReceipt
from cmdchain.hooks import ListenerRegistry, ServerEvent
from cmdchain.plugins.base import BasePlugin, Continuation, command_handler


class LoggingPlugin(BasePlugin):
    """Delegates every command and records what it saw."""

    def __init__(self, name: str, opts: BaseModel | None = None) -> None:
        super().__init__(name, opts)
        self.log: list[str] = []
        self.results: list[Any] = []

    async def handle(
        self,
        call_next: Continuation,
        driver: BaseDriver,
        command_name: str,
        *args: Any,
    ) -> Any:
        self.log.append(f"{self.name}:before:{command_name}")
        result = await call_next()
        self.results.append(result)
        self.log.append(f"{self.name}:after:{command_name}")
        return result


class TaggingPlugin(LoggingPlugin):
    """Delegates, then wraps the result as ``name(result)``."""

    async def handle(
        self,
        call_next: Continuation,
        driver: BaseDriver,
        command_name: str,
        *args: Any,
    ) -> Any:
        result = await super().handle(call_next, driver, command_name, *args)
        return f"{self.name}({result})"


class ShortCircuitPlugin(BasePlugin):
    """Answers every command itself and takes over the driver bookkeeping."""

    def __init__(self, name: str, opts: BaseModel | None = None) -> None:
        super().__init__(name, opts)
        self.log: list[str] = []
        self.receipts: list[BookkeepingReceipt] = []

    async def handle(
        self,
        call_next: Continuation,
        driver: BaseDriver,
        command_name: str,
        *args: Any,
    ) -> Any:
        self.log.append(f"{self.name}:short:{command_name}")
        async with driver.take_over_bookkeeping(command_name) as receipt:
            self.receipts.append(receipt)
            return f"{self.name}-result"


class EchoArgsPlugin(BasePlugin):
    """Has a specific handler for ``echo`` and the generic one for the rest."""

    def __init__(self, name: str, opts: BaseModel | None = None) -> None:
        super().__init__(name, opts)
        self.seen: list[tuple[str, tuple[Any, ...]]] = []

    @command_handler("echo")
    async def echo(
        self, call_next: Continuation, driver: BaseDriver, *args: Any
    ) -> Any:
        self.seen.append(("echo", args))
        result = await call_next()
        return {"echoed": result}

    async def handle(
        self,
        call_next: Continuation,
        driver: BaseDriver,
        command_name: str,
        *args: Any,
    ) -> Any:
        self.seen.append(("handle:" + command_name, args))
        return await call_next()


class VoteOptions(BaseModel):
    model_config = ConfigDict(extra="forbid")

    vote: bool = False
    route_suffix: str | None = None


class ProxyVotingPlugin(LoggingPlugin):
    """Votes to avoid the proxy, always or for routes ending in ``route_suffix``."""

    args_constraints = VoteOptions

    def __init__(self, name: str, opts: BaseModel | None = None) -> None:
        super().__init__(name, opts)
        self.votes: list[tuple[str, str, Any]] = []

    def should_avoid_proxy(self, method: str, route: str, body: Any) -> bool:
        self.votes.append((method, route, body))
        suffix = self.opts.route_suffix
        if suffix is not None:
            return route.endswith(suffix)
        return self.opts.vote


class ExplodingVotePlugin(BasePlugin):
    def should_avoid_proxy(self, method: str, route: str, body: Any) -> bool:
        raise RuntimeError("vote failed")


class NonBoolVotePlugin(BasePlugin):
    def should_avoid_proxy(self, method: str, route: str, body: Any) -> bool:
        return "yes"  # type: ignore[return-value]


class FakeThingPlugin(BasePlugin):
    """Adds routes for a fake thing and answers them without the driver."""

    new_method_map = {
        "/session/:sessionId/fake": {
            "GET": {"command": "getFakeThing"},
            "POST": {
                "command": "setFakeThing",
                "payload_params": {"required": ["thing"]},
            },
        },
        "/session/:sessionId/fake_unhandled": {
            "GET": {"command": "getUnhandledThing"},
        },
    }

    def __init__(self, name: str, opts: BaseModel | None = None) -> None:
        super().__init__(name, opts)
        self.thing: Any = None

    @classmethod
    async def update_server(cls, app: FastAPI, listeners: ListenerRegistry) -> None:
        app.state.fake_requests = []

        async def ping() -> dict[str, str]:
            return {"pong": cls.__name__}

        def on_request(request: Request) -> None:
            app.state.fake_requests.append(request.url.path)

        app.add_api_route("/fake-plugin/ping", ping, methods=["GET"])
        listeners.add_listener(ServerEvent.REQUEST_RECEIVED, on_request)

    @command_handler("getFakeThing")
    async def get_fake_thing(
        self, call_next: Continuation, driver: BaseDriver, session_id: str
    ) -> Any:
        async with driver.take_over_bookkeeping("getFakeThing"):
            return {"thing": self.thing, "sessionId": session_id}

    @command_handler("setFakeThing")
    async def set_fake_thing(
        self, call_next: Continuation, driver: BaseDriver, thing: Any, session_id: str
    ) -> Any:
        async with driver.take_over_bookkeeping("setFakeThing"):
            self.thing = thing
            return None


class FailingServerPlugin(BasePlugin):
    @classmethod
    async def update_server(cls, app: FastAPI, listeners: ListenerRegistry) -> None:
        raise RuntimeError("cannot install routes")


class LimitOptions(BaseModel):
    model_config = ConfigDict(extra="forbid")

    limit: int
    label: str = "default"


class ConfiguredPlugin(BasePlugin):
    args_constraints = LimitOptions
