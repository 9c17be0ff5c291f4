"""Client for the two remote collaborators: config endpoint and log collector.

Both endpoints take the secret key as a bearer token:

    GET  {config_url}   -> {"BlockedDomains": ["ads.example.com", ...]}
    POST {logs_url}     <- [{"protocol": "https", "path": "/", ...}, ...]

The RemoteAPI owns a private httpx.Client built on a plain transport.
It must never be routed through an Agent, otherwise every log upload
would itself be intercepted and reported.

httpx failures are translated at this boundary:
    httpx.RequestError   -> TransportError
    non-2xx status       -> ServerError
    no secret key        -> UnauthenticatedError (no network call)

Thread safety: httpx.Client is safe to share across threads, and this
class keeps no other mutable state.
"""
from __future__ import annotations

import logging
from typing import Any

import httpx

from bearer_agent.domain.errors import (
    ConfigFetchError,
    ServerError,
    TransportError,
    UnauthenticatedError,
)

log = logging.getLogger(__name__)

DEFAULT_CONFIG_URL = "https://config.bearer.sh/config"
DEFAULT_LOGS_URL = "https://logs.bearer.sh/logs"
DEFAULT_TIMEOUT = 5.0

# Truncate error bodies kept on ServerError
_MAX_ERROR_BODY = 512


class RemoteAPI:
    """Authenticated access to the config endpoint and log collector.

    Args:
        secret_key: Bearer credential. Empty string means unauthenticated.
        config_url: Config endpoint.
        logs_url: Log collector endpoint.
        timeout: Per-call timeout in seconds.
        transport: Optional httpx transport (tests pass an httpx.MockTransport).
    """

    def __init__(
        self,
        secret_key: str = "",
        config_url: str = DEFAULT_CONFIG_URL,
        logs_url: str = DEFAULT_LOGS_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._secret_key = secret_key or ""
        self._config_url = config_url
        self._logs_url = logs_url
        # An explicit transport is used as-is; environment proxies would bypass it.
        self._client = httpx.Client(
            transport=transport, timeout=timeout, trust_env=transport is None
        )

    @property
    def authenticated(self) -> bool:
        return bool(self._secret_key)

    @property
    def config_url(self) -> str:
        return self._config_url

    @property
    def logs_url(self) -> str:
        return self._logs_url

    def fetch_config(self) -> dict[str, Any]:
        """GET the remote configuration document."""
        response = self._send("GET", self._config_url)
        try:
            return response.json()
        except ValueError as exc:
            raise ConfigFetchError(
                f"Config endpoint returned an undecodable body: {exc}"
            ) from exc

    def post_logs(self, payload: list[dict[str, Any]]) -> None:
        """POST a batch of serialized report records."""
        self._send("POST", self._logs_url, json=payload)
        log.debug("Shipped %d report(s) to %s", len(payload), self._logs_url)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> RemoteAPI:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        if not self.authenticated:
            raise UnauthenticatedError()
        headers = {
            "Authorization": f"Bearer {self._secret_key}",
            "Accept": "application/json",
        }
        try:
            response = self._client.request(method, url, headers=headers, **kwargs)
        except httpx.RequestError as exc:
            raise TransportError(url, str(exc) or type(exc).__name__) from exc
        if not response.is_success:
            raise ServerError(url, response.status_code, response.text[:_MAX_ERROR_BODY])
        return response
