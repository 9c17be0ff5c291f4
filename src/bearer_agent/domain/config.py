"""Config -- immutable snapshot of the remote policy.

A refresh never mutates a Config; the store swaps in a brand new object.
Readers that grabbed a reference keep a consistent view without locking.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from bearer_agent.domain.types import Hostname

_BLOCKED_DOMAINS_KEYS = ("BlockedDomains", "blockedDomains")


@dataclass(frozen=True, slots=True)
class Config:
    """Remote policy snapshot. Currently just the domain blocklist."""
    blocked_domains: frozenset[Hostname] = field(default_factory=frozenset)

    @classmethod
    def create(cls, blocked_domains: Iterable[Hostname] = ()) -> Config:
        """Factory: accepts any iterable of hostnames."""
        return cls(blocked_domains=frozenset(blocked_domains))

    @classmethod
    def from_dict(cls, payload: Any) -> Config:
        """Parse the JSON document returned by the config endpoint.

        Unknown keys are ignored. A missing blocklist means "nothing blocked".
        """
        if not isinstance(payload, dict):
            raise ValueError(
                f"Config payload must be a JSON object, got {type(payload).__name__}"
            )
        domains: Any = None
        for key in _BLOCKED_DOMAINS_KEYS:
            if key in payload:
                domains = payload[key]
                break
        if domains is None:
            return cls()
        if not isinstance(domains, list) or not all(isinstance(d, str) for d in domains):
            raise ValueError("BlockedDomains must be an array of strings")
        return cls.create(domains)

    def to_dict(self) -> dict[str, list[str]]:
        return {"BlockedDomains": sorted(self.blocked_domains)}

    def is_blocked(self, hostname: Hostname) -> bool:
        """Exact, case-sensitive match against the blocklist."""
        return hostname in self.blocked_domains
