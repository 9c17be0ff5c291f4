"""Authenticated log shipping to the remote collector."""
from bearer_agent.shipper.log_shipper import LogShipper

__all__ = ["LogShipper"]
