"""ReportLog -- immutable record of one intercepted request.

Each record captures the where (protocol, host, path, url), the what
(method, headers, bodies, status) and the when (start/end in epoch
milliseconds) of a single exchange.

Records are built once, handed by value to the LogShipper and never
mutated. A retried submission resends the very same object.
"""
from __future__ import annotations

import time as time_module
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from bearer_agent.domain.types import EpochMillis, HeaderMap, Hostname


class ReportType(str, Enum):
    REQUEST_END = "REQUEST_END"
    REQUEST_ERROR = "REQUEST_ERROR"


def epoch_millis() -> EpochMillis:
    """Current wall-clock time in whole milliseconds."""
    return time_module.time_ns() // 1_000_000


@dataclass(frozen=True, slots=True)
class ReportLog:
    """Immutable report of one request/response exchange.

    Headers are stored as plain dicts; callers must not mutate them
    after handing the record over.
    """
    protocol: str                           # "http" / "https"
    path: str
    hostname: Hostname
    method: str
    started_at: EpochMillis
    ended_at: EpochMillis
    url: str
    type: ReportType = ReportType.REQUEST_END
    status_code: int = 0                    # 0 when no response arrived
    request_headers: HeaderMap = field(default_factory=dict)
    request_body: str | None = None         # None = not captured
    response_headers: HeaderMap = field(default_factory=dict)
    response_body: str | None = None
    error_code: str | None = None           # REQUEST_ERROR only
    error_message: str | None = None

    @property
    def duration_ms(self) -> int:
        return self.ended_at - self.started_at

    def to_dict(self) -> dict[str, Any]:
        """Wire representation accepted by the log collector."""
        payload: dict[str, Any] = {
            "protocol": self.protocol,
            "path": self.path,
            "hostname": self.hostname,
            "method": self.method,
            "startedAt": self.started_at,
            "endedAt": self.ended_at,
            "type": self.type.value,
            "statusCode": self.status_code,
            "url": self.url,
            "requestHeaders": dict(self.request_headers),
            "responseHeaders": dict(self.response_headers),
        }
        if self.request_body is not None:
            payload["requestBody"] = self.request_body
        if self.response_body is not None:
            payload["responseBody"] = self.response_body
        if self.error_code is not None:
            payload["errorCode"] = self.error_code
        if self.error_message is not None:
            payload["errorFullMessage"] = self.error_message
        return payload
