"""Domain model for bearer-agent.

Re-exports all public types for convenient access:
    from bearer_agent.domain import Config, ReportLog, BlockedDomainError
"""
from bearer_agent.domain.config import Config
from bearer_agent.domain.errors import (
    AgentError,
    BlockedDomainError,
    ConfigFetchError,
    ServerError,
    TransportError,
    UnauthenticatedError,
)
from bearer_agent.domain.report import ReportLog, ReportType, epoch_millis
from bearer_agent.domain.types import EpochMillis, HeaderMap, Hostname

__all__ = [
    "Config",
    "AgentError",
    "BlockedDomainError",
    "ConfigFetchError",
    "ServerError",
    "TransportError",
    "UnauthenticatedError",
    "ReportLog",
    "ReportType",
    "epoch_millis",
    "EpochMillis",
    "HeaderMap",
    "Hostname",
]
