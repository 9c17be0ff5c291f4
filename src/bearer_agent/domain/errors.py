"""Error taxonomy for the agent.

Two families:
  - BlockedDomainError is raised into the application's request path.
  - Everything else describes a failure talking to the remote service
    (configuration endpoint or log collector). These surface to direct
    callers of Agent.config() / Agent.log_records(), but are only logged
    when they happen on the best-effort reporting or refresh paths.
"""
from __future__ import annotations


class AgentError(Exception):
    """Base class for every error raised by bearer_agent."""


class BlockedDomainError(AgentError):
    """The request host is on the remote blocklist. Not retryable."""

    def __init__(self, hostname: str) -> None:
        super().__init__(f"Domain {hostname} is blocked by remote configuration")
        self.hostname = hostname


class UnauthenticatedError(AgentError):
    """No secret key configured: remote calls are disabled."""

    def __init__(self, message: str = "No secret key configured") -> None:
        super().__init__(message)


class ConfigFetchError(AgentError):
    """Fetching the remote configuration failed."""


class TransportError(AgentError):
    """The remote service could not be reached (DNS, connect, timeout...)."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Request to {url} failed: {reason}")
        self.url = url
        self.reason = reason


class ServerError(AgentError):
    """The remote service answered with a non-2xx status."""

    def __init__(self, url: str, status_code: int, body: str = "") -> None:
        super().__init__(f"{url} answered {status_code}")
        self.url = url
        self.status_code = status_code
        self.body = body
