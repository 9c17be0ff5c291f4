"""HTTP client for the remote config endpoint and log collector."""
from bearer_agent.remote.api import (
    DEFAULT_CONFIG_URL,
    DEFAULT_LOGS_URL,
    DEFAULT_TIMEOUT,
    RemoteAPI,
)

__all__ = [
    "DEFAULT_CONFIG_URL",
    "DEFAULT_LOGS_URL",
    "DEFAULT_TIMEOUT",
    "RemoteAPI",
]
