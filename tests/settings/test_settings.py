"""Tests for AgentSettings and environment-driven agent construction."""
from __future__ import annotations

import pytest

from bearer_agent.interceptor.agent import Agent
from bearer_agent.remote.api import DEFAULT_CONFIG_URL, DEFAULT_LOGS_URL, DEFAULT_TIMEOUT
from bearer_agent.settings import AgentSettings


def test_defaults_from_empty_environment():
    settings = AgentSettings.from_env({})
    assert settings == AgentSettings()
    assert settings.secret_key == ""
    assert not settings.authenticated
    assert settings.refresh_config_every == 0.0
    assert settings.config_url == DEFAULT_CONFIG_URL
    assert settings.logs_url == DEFAULT_LOGS_URL
    assert settings.timeout == DEFAULT_TIMEOUT


def test_reads_every_variable():
    settings = AgentSettings.from_env(
        {
            "BEARER_SECRETKEY": "sk-live",
            "BEARER_REFRESH_CONFIG_EVERY": "30",
            "BEARER_CONFIG_URL": "https://config.internal/config",
            "BEARER_LOGS_URL": "https://logs.internal/logs",
            "BEARER_TIMEOUT": "2.5",
        }
    )
    assert settings.authenticated
    assert settings.secret_key == "sk-live"
    assert settings.refresh_config_every == 30.0
    assert settings.config_url == "https://config.internal/config"
    assert settings.logs_url == "https://logs.internal/logs"
    assert settings.timeout == 2.5


@pytest.mark.parametrize("value", ["soon", "-1"])
def test_invalid_interval_names_the_variable(value):
    with pytest.raises(ValueError, match="BEARER_REFRESH_CONFIG_EVERY"):
        AgentSettings.from_env({"BEARER_REFRESH_CONFIG_EVERY": value})


def test_agent_from_env(fake_remote):
    agent = Agent.from_env(
        {
            "BEARER_SECRETKEY": "sk-env",
            "BEARER_REFRESH_CONFIG_EVERY": "120",
            "BEARER_CONFIG_URL": "https://config.test/config",
        },
        remote_transport=fake_remote.transport,
    )
    try:
        assert agent.authenticated
        assert agent.store.refresh_interval == 120.0
        agent.cached_config()
        assert fake_remote.authorization == ["Bearer sk-env"]
    finally:
        agent.close()
