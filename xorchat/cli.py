"""Command-line entry point: start a chat server or client."""

from __future__ import annotations

import asyncio
import re
import sys

from .client import run_client
from .server import run_server

PROG = "xorchat"
DEFAULT_PORT = 8080
_PORT_PATTERN = re.compile(r"\+?[0-9]+")


def parse_port(value: str) -> int:
    """Return the port number in ``value``, or the default if it is not one."""
    if _PORT_PATTERN.fullmatch(value):
        port = int(value)
        if port <= 0xFFFF:
            return port
    return DEFAULT_PORT


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        print(f"Usage: {PROG} [client|server] [options]")
        return 0

    command = args[0]
    if command == "server":
        port = parse_port(args[1]) if len(args) > 1 else DEFAULT_PORT
        try:
            asyncio.run(run_server(port))
        except KeyboardInterrupt:
            return 130
    elif command == "client":
        if len(args) < 2:
            print(f"Usage: {PROG} client <server_address:port>")
            return 0
        try:
            asyncio.run(run_client(args[1]))
        except KeyboardInterrupt:
            return 130
        except Exception as exc:
            print(f"Client error: {exc}", file=sys.stderr)
    else:
        print("Unknown command. Use 'server' or 'client'")
    return 0


if __name__ == "__main__":
    sys.exit(main())