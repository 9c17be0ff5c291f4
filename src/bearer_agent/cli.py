"""bearer-agent CLI entry point.

Usage: bearer-agent [-v] {config,get,classify} ...

Settings come from the BEARER_* environment variables (see
bearer_agent.settings).
"""
import argparse
import json
import logging
import sys

import httpx

from bearer_agent.domain.errors import AgentError, BlockedDomainError


def _add_config_parser(subparsers: argparse._SubParsersAction) -> None:
    subparsers.add_parser(
        "config",
        help="Fetch the remote configuration and print it as JSON.",
    )


def _add_get_parser(subparsers: argparse._SubParsersAction) -> None:
    p = subparsers.add_parser(
        "get",
        help="Send one GET request through the agent and print the status.",
    )
    p.add_argument("url", help="URL to request")
    p.add_argument(
        "--timeout", type=float, default=10.0,
        help="Request timeout in seconds (default: 10)",
    )


def _add_classify_parser(subparsers: argparse._SubParsersAction) -> None:
    p = subparsers.add_parser(
        "classify",
        help="Tell whether content types would have their bodies captured.",
    )
    p.add_argument("content_types", nargs="+", metavar="CONTENT_TYPE")


def _run_config(args: argparse.Namespace) -> int:
    from bearer_agent.interceptor.agent import Agent

    agent = Agent.from_env()
    try:
        config = agent.config()
    except AgentError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    finally:
        agent.close()
    print(json.dumps(config.to_dict(), indent=2))
    return 0


def _run_get(args: argparse.Namespace) -> int:
    from bearer_agent.interceptor.agent import Agent

    agent = Agent.from_env()
    # Closing the client closes the agent, which drains pending reports.
    try:
        with httpx.Client(transport=agent, timeout=args.timeout) as client:
            response = client.get(args.url)
    except BlockedDomainError as exc:
        print(f"blocked: {exc}", file=sys.stderr)
        return 2
    except httpx.HTTPError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    print(f"{response.status_code} {response.reason_phrase}")
    return 0


def _run_classify(args: argparse.Namespace) -> int:
    from bearer_agent.strings.content_type import is_parseable_content_type

    for value in args.content_types:
        verdict = "parseable" if is_parseable_content_type(value) else "opaque"
        print(f"{value}\t{verdict}")
    return 0


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="bearer-agent",
        description="Outbound HTTP instrumentation -- blocklist, capture, ship.",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging.",
    )
    subparsers = parser.add_subparsers(dest="command")

    _add_config_parser(subparsers)
    _add_get_parser(subparsers)
    _add_classify_parser(subparsers)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "config":
        sys.exit(_run_config(args))
    elif args.command == "get":
        sys.exit(_run_get(args))
    elif args.command == "classify":
        sys.exit(_run_classify(args))
