"""Tests for the plugin vote on proxying."""

import pytest

from cmdchain.core.errors import CapabilityNotImplementedError, ProxyDecisionError
from cmdchain.plugins.base import BasePlugin
from cmdchain.plugins.proxy import should_handle_locally
from tests.helpers.plugins import (
    ExplodingVotePlugin,
    NonBoolVotePlugin,
    ProxyVotingPlugin,
    VoteOptions,
)


def voter(name: str, vote: bool) -> ProxyVotingPlugin:
    return ProxyVotingPlugin(name, VoteOptions(vote=vote))


@pytest.mark.unit
def test_no_plugins_means_proxy_allowed() -> None:
    assert should_handle_locally([], "GET", "/session/1/url", None) is False


@pytest.mark.unit
@pytest.mark.parametrize(
    "votes",
    [[False], [True], [False, False], [False, True], [True, False], [False, False, True]],
)
def test_local_handling_iff_any_plugin_votes(votes: list[bool]) -> None:
    plugins = [voter(f"v{i}", v) for i, v in enumerate(votes)]

    assert should_handle_locally(plugins, "POST", "/session/1/url", {}) is any(votes)


@pytest.mark.unit
def test_first_true_vote_stops_evaluation() -> None:
    first = voter("first", True)

    assert should_handle_locally([first, ExplodingVotePlugin("never")], "GET", "/", None)
    assert first.votes == [("GET", "/", None)]


@pytest.mark.unit
def test_predicate_receives_request_triple() -> None:
    plugin = voter("v", False)
    body = {"url": "https://example.com"}

    should_handle_locally([plugin], "POST", "/session/abc/url", body)

    assert plugin.votes == [("POST", "/session/abc/url", body)]


@pytest.mark.unit
def test_default_predicate_is_unimplemented() -> None:
    plugin = BasePlugin("stub")

    with pytest.raises(CapabilityNotImplementedError) as exc_info:
        plugin.should_avoid_proxy("GET", "/status", None)

    assert isinstance(exc_info.value, NotImplementedError)
    assert exc_info.value.details["plugin"] == "stub"


@pytest.mark.unit
def test_unimplemented_predicate_fails_the_decision() -> None:
    plugins = [voter("first", False), BasePlugin("stub")]

    with pytest.raises(CapabilityNotImplementedError):
        should_handle_locally(plugins, "GET", "/status", None)


@pytest.mark.unit
def test_predicate_errors_propagate() -> None:
    with pytest.raises(RuntimeError, match="vote failed"):
        should_handle_locally([ExplodingVotePlugin("boom")], "GET", "/", None)


@pytest.mark.unit
def test_non_bool_vote_is_a_configuration_error() -> None:
    with pytest.raises(ProxyDecisionError, match="expected bool"):
        should_handle_locally([NonBoolVotePlugin("odd")], "GET", "/", None)
