"""Shared mutable state, guarded for concurrent access.

The ConfigStore is the only mutable state shared between requests:
one condition variable, never held across network I/O, plus a
self-rearming timer for autonomous refresh.
"""
from bearer_agent.concurrency.config_store import ConfigStore

__all__ = ["ConfigStore"]
