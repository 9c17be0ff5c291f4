"""Tests for Config: parsing the remote document and blocklist matching."""
from __future__ import annotations

import dataclasses

import pytest

from bearer_agent.domain.config import Config


def test_from_dict_reads_blocked_domains():
    config = Config.from_dict({"BlockedDomains": ["ads.example.com", "127.0.0.1"]})
    assert config.blocked_domains == frozenset({"ads.example.com", "127.0.0.1"})


def test_from_dict_accepts_camel_case_key():
    config = Config.from_dict({"blockedDomains": ["ads.example.com"]})
    assert config.is_blocked("ads.example.com")


def test_from_dict_missing_key_blocks_nothing():
    config = Config.from_dict({"somethingElse": 1})
    assert config.blocked_domains == frozenset()
    assert not config.is_blocked("anything.example.com")


def test_from_dict_rejects_non_object():
    with pytest.raises(ValueError):
        Config.from_dict(["ads.example.com"])


def test_from_dict_rejects_non_string_entries():
    with pytest.raises(ValueError):
        Config.from_dict({"BlockedDomains": ["ok.example.com", 42]})


def test_is_blocked_is_exact_and_case_sensitive():
    config = Config.create(["api.example.com"])
    assert config.is_blocked("api.example.com")
    assert not config.is_blocked("API.example.com")
    assert not config.is_blocked("v2.api.example.com")
    assert not config.is_blocked("example.com")


def test_config_is_immutable():
    config = Config.create(["a.example.com"])
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.blocked_domains = frozenset()  # type: ignore[misc]


def test_to_dict_round_trips_through_from_dict():
    config = Config.create(["b.example.com", "a.example.com"])
    assert config.to_dict() == {"BlockedDomains": ["a.example.com", "b.example.com"]}
    assert Config.from_dict(config.to_dict()) == config
