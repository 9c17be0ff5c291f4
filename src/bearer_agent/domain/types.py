"""Shared type aliases used across the domain."""
from __future__ import annotations

from typing import TypeAlias

Hostname: TypeAlias = str
EpochMillis: TypeAlias = int  # Unix epoch milliseconds
HeaderMap: TypeAlias = dict[str, str]
