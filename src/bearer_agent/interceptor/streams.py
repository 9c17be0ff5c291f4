"""Pass-through response streams that keep a copy of the body for reporting.

The caller reads the body at its own pace: every chunk is handed on as
soon as the wrapped transport yields it, so server-sent events and
large downloads behave exactly as they would without the agent. The
report is built once, at whichever comes first:

    stream exhausted      -> on_finish(full_raw_body, None)
    error mid-stream      -> on_finish(None, exc), then exc is re-raised
    closed before the end -> on_finish(None, None)

The raw bytes are still content-encoded; decoding happens in the
callback, off the caller's read loop.
"""
from __future__ import annotations

from typing import AsyncIterator, Callable, Iterator

import httpx

FinishCallback = Callable[[bytes | None, BaseException | None], None]


class _BodyCopy:
    """Chunk buffer plus the fire-once report callback."""

    def __init__(self, on_finish: FinishCallback) -> None:
        self._chunks: list[bytes] = []
        self._on_finish = on_finish
        self._finished = False

    def _finish(self, complete: bool, error: BaseException | None = None) -> None:
        if self._finished:
            return
        self._finished = True
        raw = b"".join(self._chunks) if complete else None
        self._chunks = []
        self._on_finish(raw, error)


class CapturingStream(_BodyCopy, httpx.SyncByteStream):
    def __init__(self, stream: httpx.SyncByteStream, on_finish: FinishCallback) -> None:
        super().__init__(on_finish)
        self._stream = stream

    def __iter__(self) -> Iterator[bytes]:
        try:
            for chunk in self._stream:
                self._chunks.append(chunk)
                yield chunk
        except Exception as exc:
            self._finish(False, exc)
            raise
        self._finish(True)

    def close(self) -> None:
        try:
            self._stream.close()
        finally:
            self._finish(False)


class AsyncCapturingStream(_BodyCopy, httpx.AsyncByteStream):
    def __init__(self, stream: httpx.AsyncByteStream, on_finish: FinishCallback) -> None:
        super().__init__(on_finish)
        self._stream = stream

    async def __aiter__(self) -> AsyncIterator[bytes]:
        try:
            async for chunk in self._stream:
                self._chunks.append(chunk)
                yield chunk
        except Exception as exc:
            self._finish(False, exc)
            raise
        self._finish(True)

    async def aclose(self) -> None:
        try:
            await self._stream.aclose()
        finally:
            self._finish(False)
