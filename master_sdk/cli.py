"""CLI entry point for master-sdk.

Handles argument parsing and dispatches to call or version mode.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from master_sdk.version import REQ_HEADER_UA

DEFAULT_METHOD = "GET"


def key_value(value: str) -> tuple[str, str]:
    """Parse KEY=VALUE. The value may itself contain '='."""
    key, sep, val = value.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"expected KEY=VALUE, got '{value}'")
    return key, val


def json_value(value: str) -> Any:
    try:
        return json.loads(value)
    except json.JSONDecodeError as e:
        raise argparse.ArgumentTypeError(f"invalid JSON body: {e}") from e


@dataclass
class VersionArgs:
    """Parsed arguments for version mode."""


@dataclass
class CallArgs:
    """Parsed arguments for call mode."""

    config: Path
    method: str
    path: str
    params: list[tuple[str, str]] = field(default_factory=list)
    headers: list[tuple[str, str]] = field(default_factory=list)
    body: Any = None
    has_body: bool = False
    verbose: bool = False


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with call and version subcommands."""
    parser = argparse.ArgumentParser(
        prog="master-sdk",
        description="Client for the cluster-management (master) administrative API.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True, help="Mode")

    subparsers.add_parser(
        "version",
        help="Print the User-Agent this client sends",
    )

    call_parser = subparsers.add_parser(
        "call",
        help="Send one request to the master and print the reply data",
    )
    call_parser.add_argument(
        "--config",
        type=Path,
        required=True,
        help="Path to runtime config YAML file",
    )
    call_parser.add_argument(
        "--method",
        type=str.upper,
        default=DEFAULT_METHOD,
        help=f"HTTP method (default: {DEFAULT_METHOD})",
    )
    call_parser.add_argument(
        "--path",
        required=True,
        help="Request path, e.g., /admin/getCluster",
    )
    call_parser.add_argument(
        "--param",
        type=key_value,
        action="append",
        default=[],
        metavar="KEY=VALUE",
        dest="params",
        help="Query parameter (can be repeated, last value wins)",
    )
    call_parser.add_argument(
        "--header",
        type=key_value,
        action="append",
        default=[],
        metavar="KEY=VALUE",
        dest="headers",
        help="Request header (can be repeated, last value wins)",
    )
    call_parser.add_argument(
        "--body",
        type=json_value,
        default=argparse.SUPPRESS,
        metavar="JSON",
        help="JSON request body (null is sent as the JSON literal null)",
    )
    call_parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log requests and replies to stderr",
    )

    return parser


def parse_call_args(namespace: argparse.Namespace) -> CallArgs:
    """Convert parsed namespace to CallArgs dataclass."""
    return CallArgs(
        config=namespace.config,
        method=namespace.method,
        path=namespace.path,
        params=namespace.params or [],
        headers=namespace.headers or [],
        body=getattr(namespace, "body", None),
        has_body=hasattr(namespace, "body"),
        verbose=namespace.verbose,
    )


def parse_args(args: list[str] | None = None) -> CallArgs | VersionArgs:
    """Parse command-line arguments and return typed args dataclass.

    Raises:
        SystemExit: If arguments are invalid (argparse behavior).
    """
    parser = build_parser()
    namespace = parser.parse_args(args)

    if namespace.command == "call":
        return parse_call_args(namespace)
    return VersionArgs()


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    try:
        parsed = parse_args(argv)

        if isinstance(parsed, CallArgs):
            return run_call(parsed)
        return run_version()

    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 1


def run_version() -> int:
    print(REQ_HEADER_UA)
    return 0


def run_call(args: CallArgs) -> int:
    """Run call mode: build the request, send it, print the reply data as JSON."""
    from master_sdk.client import MasterClient, MasterClientError
    from master_sdk.config_loader import ConfigError, load_runtime_config, resolve_build_info
    from master_sdk.request import RequestBuildError

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        config = load_runtime_config(args.config)
    except ConfigError as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1

    with MasterClient(config.master, build_info=resolve_build_info(config)) as client:
        req = client.request(args.method, args.path)
        for key, value in args.params:
            req.add_param(key, value)
        for key, value in args.headers:
            req.add_header(key, value)
        if args.has_body:
            req.with_body(args.body)

        try:
            data = client.serve_request(req)
        except RequestBuildError as e:
            print(f"Error building request: {e}", file=sys.stderr)
            return 1
        except MasterClientError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    print(json.dumps(data, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
