"""Tests for settings loading and plugin option merging."""

import pytest

from cmdchain.config.settings import ConfigurationError, Settings


@pytest.mark.unit
def test_defaults() -> None:
    settings = Settings()

    assert settings.server.port == 4723
    assert settings.logging.level == "INFO"
    assert settings.driver.new_command_timeout == 60
    assert settings.plugins == {}


@pytest.mark.unit
def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CMDCHAIN_SERVER__PORT", "4800")
    monkeypatch.setenv("CMDCHAIN_LOGGING__LEVEL", "debug")
    monkeypatch.setenv("CMDCHAIN_PLUGINS", '{"images": {"threshold": 0.5}}')

    settings = Settings()

    assert settings.server.port == 4800
    assert settings.logging.level == "DEBUG"
    assert settings.plugins == {"images": {"threshold": 0.5}}


@pytest.mark.unit
def test_plugin_args_merge_per_option() -> None:
    settings = Settings(plugins={"images": {"threshold": 0.5, "mode": "fast"}})

    merged = settings.with_plugin_args(
        '{"images": {"threshold": 0.9}, "relaxed": {"strict": false}}'
    )

    assert merged.plugins == {
        "images": {"threshold": 0.9, "mode": "fast"},
        "relaxed": {"strict": False},
    }
    assert settings.plugins == {"images": {"threshold": 0.5, "mode": "fast"}}


@pytest.mark.unit
def test_empty_plugin_args_returns_same_settings() -> None:
    settings = Settings()

    assert settings.with_plugin_args(None) is settings
    assert settings.with_plugin_args("") is settings


@pytest.mark.unit
@pytest.mark.parametrize("raw", ["{not json", "[1, 2]", '{"images": 3}'])
def test_malformed_plugin_args_rejected(raw: str) -> None:
    with pytest.raises(ConfigurationError):
        Settings().with_plugin_args(raw)


@pytest.mark.unit
def test_invalid_log_level_rejected() -> None:
    with pytest.raises(ValueError, match="Invalid log level"):
        Settings(logging={"level": "LOUD"})
