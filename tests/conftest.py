"""Shared fixtures: an in-memory remote service and upstream doubles.

FakeRemote stands in for both remote collaborators (config endpoint and
log collector) behind an httpx.MockTransport, so no test talks to the
network. It records every call and can be told to fail or stall.
"""
from __future__ import annotations

import json
import threading
import time

import httpx
import pytest

from bearer_agent.interceptor.agent import Agent

CONFIG_URL = "https://config.test/config"
LOGS_URL = "https://logs.test/logs"
SECRET_KEY = "sk-test-123"


class FakeRemote:
    """Config endpoint + log collector, thread-safe call recording."""

    def __init__(self, blocked_domains: list[str] | None = None) -> None:
        self.config_payload: object = {"BlockedDomains": list(blocked_domains or [])}
        self.config_status = 200
        self.logs_status = 200
        self.config_delay = 0.0
        self.fail_network = False
        self.config_calls = 0
        self.log_batches: list[list[dict]] = []
        self.authorization: list[str | None] = []
        self._lock = threading.Lock()
        self.transport = httpx.MockTransport(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        with self._lock:
            self.authorization.append(request.headers.get("authorization"))
        if self.fail_network:
            raise httpx.ConnectError("connection refused", request=request)

        if request.url.path == "/config":
            with self._lock:
                self.config_calls += 1
            if self.config_delay:
                time.sleep(self.config_delay)
            if self.config_status != 200:
                return httpx.Response(self.config_status, text="config unavailable")
            return httpx.Response(200, json=self.config_payload)

        if request.url.path == "/logs":
            batch = json.loads(request.content)
            with self._lock:
                self.log_batches.append(batch)
            return httpx.Response(self.logs_status, json={"ok": self.logs_status == 200})

        return httpx.Response(404)

    @property
    def records(self) -> list[dict]:
        with self._lock:
            return [record for batch in self.log_batches for record in batch]


class Upstream:
    """The application's real server, as an httpx.MockTransport."""

    def __init__(self, handler=None) -> None:
        self.calls = 0
        self._lock = threading.Lock()
        self._handler = handler or (
            lambda request: httpx.Response(200, headers={"Hello": "World"}, text="200 OK")
        )
        self.transport = httpx.MockTransport(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        with self._lock:
            self.calls += 1
        return self._handler(request)


@pytest.fixture()
def fake_remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture()
def upstream() -> Upstream:
    return Upstream()


@pytest.fixture()
def upstream_factory():
    """Upstream with a custom handler: upstream_factory(lambda req: httpx.Response(...))."""
    return Upstream


@pytest.fixture()
def agent_factory(fake_remote):
    """Build Agents wired to fake_remote. All are closed after the test."""
    agents: list[Agent] = []

    def _create(secret_key: str = SECRET_KEY, **kwargs) -> Agent:
        kwargs.setdefault("config_url", CONFIG_URL)
        kwargs.setdefault("logs_url", LOGS_URL)
        kwargs.setdefault("remote_transport", fake_remote.transport)
        agent = Agent(secret_key, **kwargs)
        agents.append(agent)
        return agent

    yield _create

    for a in agents:
        a.close()
