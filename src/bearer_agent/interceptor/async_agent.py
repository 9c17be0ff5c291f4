"""AsyncAgent -- same interception logic as Agent, for httpx.AsyncClient.

    agent = AsyncAgent(secret_key="sk-...")
    async with httpx.AsyncClient(transport=agent) as client:
        await client.get("https://api.example.com/")

The ConfigStore and LogShipper are thread-based, so two things need
care on the event loop:
  - The very first config fetch blocks. It runs in a worker thread via
    asyncio.to_thread(); once a Config is cached the lookup is a plain
    lock-protected read and stays on the loop.
  - Report shipping already happens on the shipper's thread pool, so
    the coroutine never awaits the collector.
"""
from __future__ import annotations

import asyncio
from typing import Any

import httpx

from bearer_agent.domain.config import Config
from bearer_agent.domain.report import epoch_millis
from bearer_agent.interceptor.agent import AgentCore
from bearer_agent.interceptor.reporting import build_report
from bearer_agent.interceptor.streams import AsyncCapturingStream


class AsyncAgent(AgentCore, httpx.AsyncBaseTransport):
    """Asynchronous instrumented transport.

    Args:
        transport: The real async transport to delegate to
            (default: httpx.AsyncHTTPTransport()).
        Everything else: see AgentCore.
    """

    def __init__(
        self,
        secret_key: str = "",
        refresh_config_every: float = 0.0,
        transport: httpx.AsyncBaseTransport | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(secret_key, refresh_config_every, **kwargs)
        self._transport = (
            transport if transport is not None else httpx.AsyncHTTPTransport()
        )

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        config = await self._async_restrictions()
        self._check_blocked(request, config)

        started_at = epoch_millis()
        try:
            response = await self._transport.handle_async_request(request)
        except Exception as exc:
            self._report(build_report(request, started_at, epoch_millis(), error=exc))
            raise
        return self._instrument_response(
            request, response, started_at, epoch_millis(), AsyncCapturingStream
        )

    async def _async_restrictions(self) -> Config | None:
        # Only the first authenticated fetch does I/O; everything else
        # is a lock-protected read that can stay on the loop.
        if self._store.peek() is not None or not self._api.authenticated:
            return self._restrictions()
        return await asyncio.to_thread(self._restrictions)

    async def aclose(self) -> None:
        await self._transport.aclose()
        await asyncio.to_thread(self._close_core)
