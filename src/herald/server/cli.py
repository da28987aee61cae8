# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Herald Contributors

"""Command-line interface for running and inspecting the gateway."""

from __future__ import annotations

import argparse
import json
import secrets
import sys

from ..core.config import MIN_AUTH_TOKEN_LENGTH, get_settings
from ..core.exceptions import ConfigException
from ..tools.registry import get_registry
from .auth import check_bearer


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the HTTP server until interrupted."""
    from .app import run

    run(host=args.host, port=args.port)
    return 0


def cmd_tools(args: argparse.Namespace) -> int:
    """Print the tool catalog."""
    registry = get_registry()
    if args.names:
        for name in registry.names():
            print(name)
    else:
        print(json.dumps({"tools": registry.describe()}, indent=2))
    return 0


def cmd_generate_secret(args: argparse.Namespace) -> int:
    """Print a new random shared secret."""
    if args.bytes < MIN_AUTH_TOKEN_LENGTH:
        print(f"--bytes must be at least {MIN_AUTH_TOKEN_LENGTH}", file=sys.stderr)
        return 1

    print(secrets.token_urlsafe(args.bytes))
    print()
    print("Set it on the server:")
    print("  export AUTH_TOKEN=<secret>")
    print("Send it from clients:")
    print("  Authorization: Bearer <secret>")
    return 0


def cmd_verify(args: argparse.Namespace) -> int:
    """Check a secret against the configured one."""
    settings = get_settings()
    failure = check_bearer(f"Bearer {args.token}", settings.auth_token)

    if failure is None:
        print("Token is VALID")
        return 0

    print("Token is INVALID")
    return 1


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Herald gateway CLI",
        prog="herald",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Run the gateway")
    serve_parser.add_argument("--host", default=None, help="Host to bind to (default: settings)")
    serve_parser.add_argument("--port", "-p", type=int, default=None, help="Port to bind to (default: settings)")

    tools_parser = subparsers.add_parser("tools", help="Print the tool catalog")
    tools_parser.add_argument("--names", action="store_true", help="Only print tool names")

    secret_parser = subparsers.add_parser("generate-secret", help="Generate a shared secret")
    secret_parser.add_argument(
        "--bytes",
        "-b",
        type=int,
        default=32,
        help="Random bytes before encoding (default: 32)",
    )

    verify_parser = subparsers.add_parser("verify", help="Check a token against AUTH_TOKEN")
    verify_parser.add_argument("token", help="Token to verify")

    args = parser.parse_args(argv)

    try:
        if args.command == "serve":
            return cmd_serve(args)
        elif args.command == "tools":
            return cmd_tools(args)
        elif args.command == "generate-secret":
            return cmd_generate_secret(args)
        elif args.command == "verify":
            return cmd_verify(args)
    except ConfigException as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    return 1


if __name__ == "__main__":
    sys.exit(main())
