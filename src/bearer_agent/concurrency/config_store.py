"""Thread-safe cache of the remote Config with autonomous refresh.

State machine:

    UNCONFIGURED --first get_cached()--> FETCHING --ok--> CACHED
         ^                                  |                 |
         +-------------- failure -----------+      timer fires every
                                                   refresh_interval

Rules:
  - At most one fetch is in flight. Callers arriving while the first
    fetch runs wait on the condition and share its outcome instead of
    issuing their own request.
  - The condition's lock guards the state only. It is released for the
    network call and re-acquired to publish the result.
  - Config objects are immutable, so publishing is a reference swap and
    readers never observe a half-updated snapshot.
  - A failed fetch never clears a cached Config. A failed background
    refresh is logged and retried after the same fixed interval.
  - A failed first fetch raises for the callers that ran or joined it.
    Until the retry delay has passed, get_cached() then returns None
    (no restrictions) instead of fetching again, and the refresh timer
    keeps retrying in the background. The retry delay is
    refresh_interval, or DEFAULT_RETRY_DELAY when refresh is disabled.

Lifetime: the refresh timer only holds a weak reference to the store.
When the store is garbage-collected a finalizer cancels the pending
timer, so a discarded Agent stops refreshing on its own. stop() does
the same thing explicitly.
"""
from __future__ import annotations

import logging
import threading
import time
import weakref
from typing import Callable

from bearer_agent.domain.config import Config
from bearer_agent.domain.errors import (
    ConfigFetchError,
    ServerError,
    TransportError,
    UnauthenticatedError,
)
from bearer_agent.remote.api import RemoteAPI

log = logging.getLogger(__name__)

DEFAULT_RETRY_DELAY = 30.0


class _TimerSlot:
    """The currently armed refresh timer.

    Lives outside the store so the weakref finalizer can cancel the
    timer without keeping the store itself alive.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._stopped = False

    @property
    def armed(self) -> bool:
        with self._lock:
            return self._timer is not None

    def arm_if_idle(self, interval: float, callback: Callable[..., None], *args) -> None:
        with self._lock:
            if self._stopped or self._timer is not None:
                return
            self._start_locked(interval, callback, args)

    def rearm(self, interval: float, callback: Callable[..., None], *args) -> None:
        """Replace the (already fired) timer with a fresh one."""
        with self._lock:
            self._timer = None
            if self._stopped:
                return
            self._start_locked(interval, callback, args)

    def cancel(self) -> None:
        with self._lock:
            self._stopped = True
            timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()

    def _start_locked(self, interval: float, callback: Callable[..., None], args: tuple) -> None:
        timer = threading.Timer(interval, callback, args=args)
        timer.daemon = True
        timer.name = "config-refresh"
        self._timer = timer
        timer.start()


def _fire_refresh(store_ref: weakref.ref) -> None:
    """Timer entry point. A collected store means the timer just ends."""
    store = store_ref()
    if store is None:
        return
    store._on_timer()


class ConfigStore:
    """Cached remote Config, refreshed every ``refresh_interval`` seconds.

    Args:
        api: Remote collaborator used for every fetch.
        refresh_interval: Seconds between autonomous refreshes.
            Zero or negative disables them: the Config is fetched once
            and reused forever.
        initial: Optional Config to seed the cache with (counts as
            CACHED, does not bump update_count).
    """

    def __init__(
        self,
        api: RemoteAPI,
        refresh_interval: float = 0.0,
        initial: Config | None = None,
    ) -> None:
        self._api = api
        self._refresh_interval = refresh_interval
        self._cond = threading.Condition(threading.Lock())
        # -- guarded by _cond --
        self._cached: Config | None = initial
        self._update_count = 0
        self._last_fetch_time: float | None = None
        self._fetching = False
        self._attempt = 0            # fetches started
        self._finished_attempt = 0   # most recent fetch that completed
        self._failure: BaseException | None = None
        self._retry_at: float | None = None  # monotonic, set while unconfigured
        # ----------------------
        self._slot = _TimerSlot()
        self._finalizer = weakref.finalize(self, self._slot.cancel)

    # -- read-only state -----------------------------------------------

    @property
    def refresh_interval(self) -> float:
        return self._refresh_interval

    @property
    def update_count(self) -> int:
        """Number of fetched Configs published so far."""
        with self._cond:
            return self._update_count

    @property
    def last_fetch_time(self) -> float | None:
        """Epoch seconds of the last successful fetch, None before the first."""
        with self._cond:
            return self._last_fetch_time

    @property
    def refresh_in_flight(self) -> bool:
        with self._cond:
            return self._fetching

    @property
    def timer_armed(self) -> bool:
        return self._slot.armed

    def peek(self) -> Config | None:
        """Current Config without fetching or arming anything."""
        with self._cond:
            return self._cached

    # -- fetch protocol ------------------------------------------------

    def fetch_config(self) -> Config:
        """Synchronous authenticated fetch. Does not touch the cache.

        Raises:
            UnauthenticatedError: no secret key configured.
            ConfigFetchError: network, server or payload failure.
        """
        try:
            payload = self._api.fetch_config()
        except (TransportError, ServerError) as exc:
            raise ConfigFetchError(f"Could not fetch remote config: {exc}") from exc
        try:
            return Config.from_dict(payload)
        except ValueError as exc:
            raise ConfigFetchError(f"Invalid remote config: {exc}") from exc

    def get_cached(self) -> Config | None:
        """Best-known Config, fetching synchronously only the first time.

        Returns None when nothing is cached and no secret key is set:
        config fetching is disabled rather than attempted anonymously.
        Also returns None, without a network call, while a failed first
        fetch is waiting out its retry delay.

        Raises:
            ConfigFetchError: the first fetch (ours or the one we joined)
                failed. The store stays unconfigured.
        """
        with self._cond:
            if self._cached is not None:
                self._arm_timer_locked()
                return self._cached
            if self._fetching:
                return self._join_locked()
            if not self._api.authenticated:
                return None
            if self._retry_at is not None and time.monotonic() < self._retry_at:
                return None
            attempt = self._begin_fetch_locked()
        return self._fetch_and_publish(attempt)

    def refresh(self) -> Config:
        """Fetch now and publish the result.

        If a fetch is already running, wait for it and return its result
        instead of starting a second one.
        """
        if not self._api.authenticated:
            raise UnauthenticatedError()
        with self._cond:
            if self._fetching:
                return self._join_locked()
            attempt = self._begin_fetch_locked()
        return self._fetch_and_publish(attempt)

    def stop(self) -> None:
        """Cancel the autonomous refresh. Cached data stays readable."""
        self._finalizer()

    # -- internals -----------------------------------------------------

    def _begin_fetch_locked(self) -> int:
        self._fetching = True
        self._attempt += 1
        return self._attempt

    def _join_locked(self) -> Config:
        """Wait for the in-flight fetch and share its outcome."""
        attempt = self._attempt
        self._cond.wait_for(lambda: self._finished_attempt >= attempt)
        if self._failure is not None or self._cached is None:
            raise ConfigFetchError(
                "Configuration fetch started by another caller failed"
            ) from self._failure
        return self._cached

    def _fetch_and_publish(self, attempt: int) -> Config:
        """Run one fetch outside the lock, then publish under it."""
        config: Config | None = None
        failure: BaseException | None = None
        try:
            config = self.fetch_config()
            return config
        except Exception as exc:
            failure = exc
            raise
        finally:
            with self._cond:
                if config is not None:
                    self._cached = config
                    self._update_count += 1
                    self._last_fetch_time = time.time()
                    self._retry_at = None
                    self._arm_timer_locked()
                elif self._cached is None:
                    self._retry_at = time.monotonic() + self._retry_delay()
                    self._arm_timer_locked()
                self._fetching = False
                self._finished_attempt = attempt
                self._failure = failure
                self._cond.notify_all()

    def _retry_delay(self) -> float:
        if self._refresh_interval > 0:
            return self._refresh_interval
        return DEFAULT_RETRY_DELAY

    def _arm_timer_locked(self) -> None:
        if self._refresh_interval <= 0 or not self._api.authenticated:
            return
        self._slot.arm_if_idle(self._refresh_interval, _fire_refresh, weakref.ref(self))

    def _on_timer(self) -> None:
        """Autonomous refresh: runs on the timer thread."""
        try:
            with self._cond:
                if self._fetching:
                    log.debug("Config fetch already in flight, skipping refresh tick")
                    return
                attempt = self._begin_fetch_locked()
            try:
                config = self._fetch_and_publish(attempt)
                log.debug(
                    "Refreshed remote config (%d blocked domain(s))",
                    len(config.blocked_domains),
                )
            except (ConfigFetchError, UnauthenticatedError) as exc:
                log.warning("Config refresh failed, keeping previous config: %s", exc)
        finally:
            self._slot.rearm(self._refresh_interval, _fire_refresh, weakref.ref(self))
