"""Agent settings: the externally supplied knobs, optionally from the environment.

Environment variables:
    BEARER_SECRETKEY               secret key (empty = unauthenticated)
    BEARER_REFRESH_CONFIG_EVERY    seconds between config refreshes (0 = never)
    BEARER_CONFIG_URL              config endpoint override
    BEARER_LOGS_URL                log collector override
    BEARER_TIMEOUT                 remote call timeout in seconds

Settings are read once and passed explicitly to an Agent. Nothing in
the package consults the environment on its own.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from bearer_agent.remote.api import DEFAULT_CONFIG_URL, DEFAULT_LOGS_URL, DEFAULT_TIMEOUT


def _float_var(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number of seconds, got {raw!r}") from None
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {raw!r}")
    return value


@dataclass(frozen=True, slots=True)
class AgentSettings:
    secret_key: str = ""
    refresh_config_every: float = 0.0
    config_url: str = DEFAULT_CONFIG_URL
    logs_url: str = DEFAULT_LOGS_URL
    timeout: float = DEFAULT_TIMEOUT
    max_workers: int = 4

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> AgentSettings:
        """Read settings from ``environ`` (defaults to os.environ)."""
        env = os.environ if environ is None else environ
        return cls(
            secret_key=env.get("BEARER_SECRETKEY", ""),
            refresh_config_every=_float_var(env, "BEARER_REFRESH_CONFIG_EVERY", 0.0),
            config_url=env.get("BEARER_CONFIG_URL") or DEFAULT_CONFIG_URL,
            logs_url=env.get("BEARER_LOGS_URL") or DEFAULT_LOGS_URL,
            timeout=_float_var(env, "BEARER_TIMEOUT", DEFAULT_TIMEOUT),
        )

    @property
    def authenticated(self) -> bool:
        return bool(self.secret_key)
