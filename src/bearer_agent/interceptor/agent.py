"""Agent -- an httpx transport that enforces the blocklist and reports traffic.

Drop-in wherever httpx expects a transport:

    agent = Agent(secret_key="sk-...", refresh_config_every=60.0)
    client = httpx.Client(transport=agent)

Per-request flow (handle_request):
    1. Read the cached Config. Missing or unavailable = no restrictions.
    2. Blocked host -> BlockedDomainError. No network call, no report.
    3. Delegate to the wrapped transport, timing the exchange up to the
       response headers.
    4. Build a ReportLog (bodies only for parseable content types).
       A parseable body is never read ahead of the caller: the response
       stream is wrapped so each chunk is passed through and copied,
       and the report is built once the caller has finished reading.
    5. Hand the report to the LogShipper's worker pool.

The agent never retries. A transport failure is reported as
REQUEST_ERROR and then re-raised to the caller unchanged.

Thread safety: one Agent is meant to be shared by every thread using
the client. The ConfigStore is the only shared mutable state and it
guards itself; the wrapped httpx transport is thread-safe.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Sequence

import httpx

from bearer_agent.concurrency.config_store import ConfigStore
from bearer_agent.domain.config import Config
from bearer_agent.domain.errors import BlockedDomainError, ConfigFetchError
from bearer_agent.domain.report import ReportLog, epoch_millis
from bearer_agent.interceptor.reporting import build_report, decode_response_body, wants_body
from bearer_agent.interceptor.streams import CapturingStream, FinishCallback
from bearer_agent.remote.api import (
    DEFAULT_CONFIG_URL,
    DEFAULT_LOGS_URL,
    DEFAULT_TIMEOUT,
    RemoteAPI,
)
from bearer_agent.settings import AgentSettings
from bearer_agent.shipper.log_shipper import DEFAULT_MAX_PENDING, LogShipper

log = logging.getLogger(__name__)


class AgentCore:
    """State and policy shared by the sync and async transports.

    Args:
        secret_key: Credential for both remote endpoints. Empty disables
            config fetching and makes log shipping fail fast.
        refresh_config_every: Seconds between autonomous config refreshes.
        config: Optional Config to start with (skips the first fetch).
        config_url / logs_url / timeout: Remote endpoint settings.
        remote_transport: httpx transport for the remote API only.
        max_workers: Background log shipping pool size.
        max_pending: Report batches allowed to wait for the collector
            before new ones are dropped.
    """

    def __init__(
        self,
        secret_key: str = "",
        refresh_config_every: float = 0.0,
        *,
        config: Config | None = None,
        config_url: str = DEFAULT_CONFIG_URL,
        logs_url: str = DEFAULT_LOGS_URL,
        timeout: float = DEFAULT_TIMEOUT,
        remote_transport: httpx.BaseTransport | None = None,
        max_workers: int = 4,
        max_pending: int = DEFAULT_MAX_PENDING,
    ) -> None:
        self._api = RemoteAPI(
            secret_key,
            config_url=config_url,
            logs_url=logs_url,
            timeout=timeout,
            transport=remote_transport,
        )
        self._store = ConfigStore(self._api, refresh_config_every, initial=config)
        self._shipper = LogShipper(
            self._api, max_workers=max_workers, max_pending=max_pending
        )

    @classmethod
    def from_settings(cls, settings: AgentSettings, **kwargs: Any):
        return cls(
            settings.secret_key,
            settings.refresh_config_every,
            config_url=settings.config_url,
            logs_url=settings.logs_url,
            timeout=settings.timeout,
            max_workers=settings.max_workers,
            **kwargs,
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **kwargs: Any):
        return cls.from_settings(AgentSettings.from_env(environ), **kwargs)

    # -- public operations ---------------------------------------------

    @property
    def authenticated(self) -> bool:
        return self._api.authenticated

    @property
    def store(self) -> ConfigStore:
        return self._store

    @property
    def shipper(self) -> LogShipper:
        return self._shipper

    @property
    def update_count(self) -> int:
        return self._store.update_count

    def config(self) -> Config:
        """Fetch the remote Config now (no caching side effect)."""
        return self._store.fetch_config()

    def cached_config(self) -> Config | None:
        """Best-known Config; blocks only for the very first fetch."""
        return self._store.get_cached()

    def log_records(self, records: Sequence[ReportLog]) -> None:
        """Ship records synchronously. Errors propagate."""
        self._shipper.submit(records)

    # -- interception helpers ------------------------------------------

    def _restrictions(self) -> Config | None:
        try:
            return self._store.get_cached()
        except ConfigFetchError as exc:
            log.warning("Remote config unavailable, blocklist not enforced: %s", exc)
            return None

    @staticmethod
    def _check_blocked(request: httpx.Request, config: Config | None) -> None:
        if config is None:
            return
        hostname = request.url.host
        if config.is_blocked(hostname):
            log.info("Blocked %s request to %s", request.method, hostname)
            raise BlockedDomainError(hostname)

    def _report(self, report: ReportLog) -> None:
        self._shipper.submit_in_background([report])

    def _instrument_response(
        self,
        request: httpx.Request,
        response: httpx.Response,
        started_at: int,
        ended_at: int,
        stream_type: Callable[[Any, FinishCallback], Any],
    ) -> httpx.Response:
        """Report the exchange now, or once the caller has read the body."""
        if not wants_body(response.headers):
            self._report(build_report(request, started_at, ended_at, response=response))
            return response
        if response.is_stream_consumed:
            # Pre-built response (e.g. httpx.MockTransport): already in memory.
            self._report(
                build_report(
                    request, started_at, ended_at,
                    response=response, response_body=response.text,
                )
            )
            return response

        def on_finish(raw: bytes | None, error: BaseException | None) -> None:
            if error is not None:
                report = build_report(request, started_at, epoch_millis(), error=error)
            else:
                body = decode_response_body(response.headers, raw) if raw is not None else None
                report = build_report(
                    request, started_at, ended_at, response=response, response_body=body
                )
            self._report(report)

        return httpx.Response(
            status_code=response.status_code,
            headers=response.headers,
            stream=stream_type(response.stream, on_finish),
            extensions=response.extensions,
        )

    def _close_core(self) -> None:
        self._store.stop()
        self._shipper.close(wait=True)
        self._api.close()


class Agent(AgentCore, httpx.BaseTransport):
    """Synchronous instrumented transport.

    Args:
        transport: The real transport to delegate to
            (default: httpx.HTTPTransport()).
        Everything else: see AgentCore.
    """

    def __init__(
        self,
        secret_key: str = "",
        refresh_config_every: float = 0.0,
        transport: httpx.BaseTransport | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(secret_key, refresh_config_every, **kwargs)
        self._transport = transport if transport is not None else httpx.HTTPTransport()

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        config = self._restrictions()
        self._check_blocked(request, config)

        started_at = epoch_millis()
        try:
            response = self._transport.handle_request(request)
        except Exception as exc:
            self._report(build_report(request, started_at, epoch_millis(), error=exc))
            raise
        return self._instrument_response(
            request, response, started_at, epoch_millis(), CapturingStream
        )

    def close(self) -> None:
        self._transport.close()
        self._close_core()
