"""portwait command line interface."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from portwait.errors import InvalidPortError, ProbeError, WaitTimeoutError
from portwait.probe import check, check_bind
from portwait.wait import wait_until_free, wait_until_free_on_host, wait_until_used_on_host

logger = logging.getLogger(__name__)

__all__ = ["main", "build_parser", "run_command"]

EXIT_OK = 0
EXIT_TIMEOUT = 1
EXIT_FREE = 1
EXIT_INVALID = 2
EXIT_PROBE_ERROR = 3


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for all subcommands."""
    parser = argparse.ArgumentParser(
        prog="portwait",
        description="Check whether a TCP port is in use, or wait for it to change state.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    check_parser = sub.add_parser("check", help="Report whether a port is in use")
    check_parser.add_argument("port", type=int)
    check_parser.add_argument("--host", default=None, help="Host to connect to (default: 127.0.0.1)")
    check_parser.add_argument(
        "--bind",
        action="store_true",
        help="Probe by binding on this machine instead of connecting (cannot be used with --host)",
    )

    for name, help_text in (
        ("wait-free", "Wait until a port is free"),
        ("wait-used", "Wait until a port is in use"),
    ):
        wait_parser = sub.add_parser(name, help=help_text)
        wait_parser.add_argument("port", type=int)
        wait_parser.add_argument("--host", default=None, help="Host to probe (default: 127.0.0.1)")
        wait_parser.add_argument("--retry-ms", type=int, default=None, help="Retry interval in ms")
        wait_parser.add_argument("--timeout-ms", type=int, default=None, help="Deadline in ms")

    return parser


async def run_command(args: argparse.Namespace) -> int:
    """Execute a parsed command.

    Returns:
        Process exit code
    """
    try:
        if args.command == "check":
            if args.bind:
                in_use = await check_bind(args.port)
            else:
                in_use = await check(args.port, args.host)
            print("in use" if in_use else "free")
            return EXIT_OK if in_use else EXIT_FREE

        if args.command == "wait-free":
            if args.host is None:
                await wait_until_free(args.port, args.retry_ms, args.timeout_ms)
            else:
                await wait_until_free_on_host(args.port, args.host, args.retry_ms, args.timeout_ms)
            logger.info(f"Port {args.port} is free")
        else:
            await wait_until_used_on_host(args.port, args.host, args.retry_ms, args.timeout_ms)
            logger.info(f"Port {args.port} is in use")
        return EXIT_OK

    except InvalidPortError as e:
        logger.error(e.message)
        return EXIT_INVALID
    except WaitTimeoutError as e:
        logger.error(f"Timed out after {e.timeout_ms}ms waiting for port {e.port}")
        return EXIT_TIMEOUT
    except ProbeError as e:
        logger.error(e.message)
        return EXIT_PROBE_ERROR


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command == "check" and args.bind and args.host is not None:
        parser.error("--bind only probes the local machine and cannot be combined with --host")
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )
    return asyncio.run(run_command(args))


if __name__ == "__main__":
    sys.exit(main())
