"""Report building: turn one intercepted exchange into a ReportLog.

Pure functions, no shared state. Safe to call from any thread or
coroutine.

Body capture policy:
  - request body: only if Content-Type is parseable AND the body is
    already in memory (a streamed upload that was never read is not
    buffered just to report it)
  - response body: only if Content-Type is parseable; decoded with the
    response's Content-Encoding and charset, omitted if that fails
"""
from __future__ import annotations

import httpx

from bearer_agent.domain.report import ReportLog, ReportType
from bearer_agent.domain.types import EpochMillis, HeaderMap
from bearer_agent.strings.content_type import is_parseable_content_type


def headers_to_dict(headers: httpx.Headers) -> HeaderMap:
    """Flatten headers; repeated names are joined with ", "."""
    return dict(headers.items())


def wants_body(headers: httpx.Headers) -> bool:
    return is_parseable_content_type(headers.get("content-type"))


def capture_request_body(request: httpx.Request) -> str | None:
    if not wants_body(request.headers):
        return None
    try:
        content = request.content
    except httpx.RequestNotRead:
        return None
    return content.decode("utf-8", errors="replace")


def decode_response_body(headers: httpx.Headers, raw: bytes) -> str | None:
    """Decode raw (still content-encoded) response bytes to text."""
    try:
        return httpx.Response(200, headers=headers, content=raw).text
    except httpx.DecodingError:
        return None


def build_report(
    request: httpx.Request,
    started_at: EpochMillis,
    ended_at: EpochMillis,
    response: httpx.Response | None = None,
    response_body: str | None = None,
    error: BaseException | None = None,
) -> ReportLog:
    """Build the ReportLog for a completed (or failed) exchange.

    Pass ``response`` for a REQUEST_END report, ``error`` for a
    REQUEST_ERROR report.
    """
    url = request.url
    common = dict(
        protocol=url.scheme,
        path=url.path,
        hostname=url.host,
        method=request.method,
        started_at=started_at,
        ended_at=ended_at,
        url=str(url),
        request_headers=headers_to_dict(request.headers),
        request_body=capture_request_body(request),
    )
    if error is not None or response is None:
        return ReportLog(
            type=ReportType.REQUEST_ERROR,
            error_code=type(error).__name__ if error is not None else None,
            error_message=str(error) if error is not None else None,
            **common,
        )
    return ReportLog(
        type=ReportType.REQUEST_END,
        status_code=response.status_code,
        response_headers=headers_to_dict(response.headers),
        response_body=response_body,
        **common,
    )
