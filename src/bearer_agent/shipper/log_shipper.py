"""LogShipper: authenticated batch upload of ReportLog records.

Two entry points:
    submit()                -- synchronous, errors propagate to the caller
    submit_in_background()  -- fire-and-forget on a worker pool, errors
                               are logged and never reach the caller

The interceptor uses the background path so that a slow or failing
collector never adds latency to, or changes the outcome of, the
application's request.

Backpressure: at most ``max_pending`` background batches are queued or
in flight at any time. While the collector is slow or down, anything
beyond that is dropped and counted instead of piling up in memory, and
close(wait=True) never has more than that backlog to drain.

Thread safety: no lock is held across the network call. The only lock
protects the diagnostic counters and the lazy executor creation, so
one slow upload never blocks another.
"""
from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Sequence

from bearer_agent.domain.errors import AgentError, UnauthenticatedError
from bearer_agent.domain.report import ReportLog
from bearer_agent.remote.api import RemoteAPI

log = logging.getLogger(__name__)

DEFAULT_MAX_PENDING = 256


def _completed() -> Future:
    done: Future = Future()
    done.set_result(None)
    return done


class LogShipper:
    """Serializes report batches and posts them to the collector.

    Args:
        api: Remote collaborator holding the credential.
        max_workers: Size of the background upload pool.
        max_pending: Background batches allowed to be queued or in
            flight before new ones are dropped.
    """

    def __init__(
        self,
        api: RemoteAPI,
        max_workers: int = 4,
        max_pending: int = DEFAULT_MAX_PENDING,
    ) -> None:
        if max_pending < 1:
            raise ValueError(f"max_pending must be >= 1, got {max_pending}")
        self._api = api
        self._max_workers = max_workers
        self._executor: ThreadPoolExecutor | None = None
        self._closed = False
        self._pending = threading.BoundedSemaphore(max_pending)
        self._submitted_count = 0
        self._failed_count = 0
        self._dropped_count = 0
        self._lock = threading.Lock()  # counters + executor creation

    def submit(self, records: Sequence[ReportLog]) -> None:
        """Ship a batch of records.

        Raises:
            UnauthenticatedError: no secret key (no network call made).
            TransportError: collector unreachable.
            ServerError: collector answered non-2xx.
        """
        if not self._api.authenticated:
            with self._lock:
                self._failed_count += 1
            raise UnauthenticatedError("Cannot ship logs without a secret key")

        payload = [record.to_dict() for record in records]
        try:
            self._api.post_logs(payload)
        except AgentError:
            with self._lock:
                self._failed_count += 1
            raise
        with self._lock:
            self._submitted_count += len(payload)

    def submit_in_background(self, records: Sequence[ReportLog]) -> Future:
        """Queue a batch on the worker pool. Never raises submission errors.

        The returned future resolves to None; failures have already been
        logged by the time it completes. When the backlog is full the
        batch is dropped and the future is already resolved.
        """
        batch = tuple(records)
        executor = self._get_executor()
        if executor is None:
            log.debug("LogShipper closed, dropping %d report(s)", len(batch))
            return _completed()
        if not self._pending.acquire(blocking=False):
            with self._lock:
                self._dropped_count += 1
            log.debug("Shipping backlog full, dropping %d report(s)", len(batch))
            return _completed()
        try:
            return executor.submit(self._submit_logged, batch)
        except RuntimeError:
            # Shut down between lookup and submit.
            self._pending.release()
            log.debug("LogShipper closed, dropping %d report(s)", len(batch))
            return _completed()

    def close(self, wait: bool = True) -> None:
        """Stop accepting background work; optionally drain the pool."""
        with self._lock:
            self._closed = True
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=wait)

    @property
    def submitted_count(self) -> int:
        """Total records accepted by the collector."""
        with self._lock:
            return self._submitted_count

    @property
    def failed_count(self) -> int:
        """Total batches that failed to ship."""
        with self._lock:
            return self._failed_count

    @property
    def dropped_count(self) -> int:
        """Background batches discarded because the backlog was full."""
        with self._lock:
            return self._dropped_count

    def _get_executor(self) -> ThreadPoolExecutor | None:
        with self._lock:
            if self._closed:
                return None
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self._max_workers,
                    thread_name_prefix="log-shipper",
                )
            return self._executor

    def _submit_logged(self, records: tuple[ReportLog, ...]) -> None:
        try:
            self.submit(records)
        except UnauthenticatedError:
            log.debug("Dropping %d report(s): no secret key configured", len(records))
        except AgentError as exc:
            log.warning("Failed to ship %d report(s): %s", len(records), exc)
        except Exception:
            log.exception("Unexpected error shipping %d report(s)", len(records))
        finally:
            self._pending.release()
