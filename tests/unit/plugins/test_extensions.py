"""Tests for applying plugin server extensions at startup."""

from typing import Any

import pytest
from fastapi import FastAPI

from cmdchain.core.errors import ListenerRegistryFrozenError, ServerExtensionError
from cmdchain.hooks import ListenerRegistry, ServerEvent
from cmdchain.plugins.base import BasePlugin
from cmdchain.plugins.extensions import apply_server_extensions
from tests.helpers.plugins import FailingServerPlugin, FakeThingPlugin


def recording_plugin(order: list[str]) -> type[BasePlugin]:
    class RecordingPlugin(BasePlugin):
        @classmethod
        async def update_server(cls, app: FastAPI, listeners: ListenerRegistry) -> Any:
            order.append(app.title)
            return "ignored"

    return RecordingPlugin


@pytest.mark.unit
async def test_extensions_run_in_order_and_freeze_listeners() -> None:
    app = FastAPI(title="x")
    listeners = ListenerRegistry()
    order: list[str] = []
    plugins = [recording_plugin(order)("one"), FakeThingPlugin("fake")]

    await apply_server_extensions(plugins, app, listeners)

    assert order == ["x"]
    assert any(getattr(r, "path", None) == "/fake-plugin/ping" for r in app.routes)
    assert len(listeners.get_listeners(ServerEvent.REQUEST_RECEIVED)) == 1
    assert listeners.frozen

    with pytest.raises(ListenerRegistryFrozenError):
        listeners.add_listener(ServerEvent.SERVER_STARTED, lambda **_: None)


@pytest.mark.unit
async def test_failing_extension_aborts_startup() -> None:
    app = FastAPI()
    listeners = ListenerRegistry()
    order: list[str] = []
    later = recording_plugin(order)("later")

    with pytest.raises(ServerExtensionError, match="broken") as exc_info:
        await apply_server_extensions(
            [FailingServerPlugin("broken"), later], app, listeners
        )

    assert exc_info.value.details == {"plugin": "broken"}
    assert isinstance(exc_info.value.__cause__, RuntimeError)
    assert order == []
    assert not listeners.frozen


@pytest.mark.unit
async def test_no_plugins_only_freezes() -> None:
    listeners = ListenerRegistry()

    await apply_server_extensions([], FastAPI(), listeners)

    assert listeners.frozen
