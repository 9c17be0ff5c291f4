"""Request interceptor: httpx transports that enforce and report.

Agent wraps a sync transport (httpx.Client), AsyncAgent an async one
(httpx.AsyncClient). Both consult the cached remote Config to block
domains, time the delegated call, and ship a ReportLog per exchange
without delaying the response.
"""
from bearer_agent.interceptor.agent import Agent, AgentCore
from bearer_agent.interceptor.async_agent import AsyncAgent
from bearer_agent.interceptor.reporting import build_report

__all__ = [
    "Agent",
    "AgentCore",
    "AsyncAgent",
    "build_report",
]
