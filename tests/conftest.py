"""Shared fixtures for cmdchain tests.

Plugins and drivers used here live in ``tests/helpers`` so test modules can
import them directly.
"""

from collections.abc import AsyncGenerator

import pytest
from httpx import AsyncClient

from cmdchain.api.app import create_app
from cmdchain.api.routes.method_map import BASE_ROUTE_MAP
from cmdchain.config.settings import Settings
from cmdchain.core.logging import setup_logging
from cmdchain.plugins.registry import PluginRegistry
from tests.helpers.app import app_client
from tests.helpers.drivers import FakeDriver


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom settings."""
    # Use the application logging pipeline so structlog behaves as in production
    setup_logging(json_logs=False, log_level_name="DEBUG")


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def driver() -> FakeDriver:
    return FakeDriver()


@pytest.fixture
def registry() -> PluginRegistry:
    """Empty registry with the server's base routes already bound."""
    return PluginRegistry(base_route_map=BASE_ROUTE_MAP)


@pytest.fixture
async def client(
    settings: Settings, registry: PluginRegistry, driver: FakeDriver
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client for an app built from the ``registry`` fixture.

    Register plugins on ``registry`` before requesting this fixture.
    """
    async with app_client(create_app(settings, registry, driver)) as c:
        yield c
