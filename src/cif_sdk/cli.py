"""CLI for the CIF SDK."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from . import __version__
from .client import Client
from .config import ClientConfig
from .errors import CIFError, ConfigError, SubmissionError
from .formatters import FORMATTERS, get_formatter
from .keymanager import delete_token, set_token, token_source

logger = logging.getLogger(__name__)


def _client(args: argparse.Namespace) -> Client:
    config = ClientConfig.from_env(
        remote=args.remote,
        token=args.token,
        timeout=args.timeout,
        proxy=args.proxy,
        verify_ssl=False if args.no_verify_ssl else None,
    )
    return Client(config)


def _print_result(args: argparse.Namespace, result: Any) -> int:
    if not result.ok:
        print(f"Error: {result.error}", file=sys.stderr)
        return 1
    print(get_formatter(args.format)(result.value))
    return 0


def _read_records(path: str | None) -> Any:
    content = Path(path).read_text() if path else sys.stdin.read()
    return json.loads(content)


def cmd_ping(args: argparse.Namespace) -> int:
    """Check connectivity and print the round trip."""
    with _client(args) as cli:
        for _ in range(args.count):
            result = cli.ping()
            if not result.ok:
                print(f"Error: {result.error}", file=sys.stderr)
                return 1
            print(f"roundtrip: {result.value:.6f} s")
    return 0


def cmd_search(args: argparse.Namespace) -> int:
    """Search observables."""
    with _client(args) as cli:
        result = cli.search({
            "query": args.query,
            "confidence": args.confidence,
            "limit": args.limit,
        })
    return _print_result(args, result)


def cmd_search_id(args: argparse.Namespace) -> int:
    """Fetch observables by id."""
    with _client(args) as cli:
        result = cli.search_id({"id": args.id})
    return _print_result(args, result)


def cmd_feed(args: argparse.Namespace) -> int:
    """Search aggregated feeds."""
    with _client(args) as cli:
        result = cli.search_feed({
            "query": args.query,
            "confidence": args.confidence,
            "limit": args.limit,
        })
    return _print_result(args, result)


def cmd_submit(args: argparse.Namespace) -> int:
    """Submit observables (or feed records) read as JSON from a file or stdin."""
    try:
        records = _read_records(args.file)
    except (OSError, ValueError) as e:
        print(f"Error: could not read records: {e}", file=sys.stderr)
        return 1

    with _client(args) as cli:
        submit = cli.submit_feed if args.command == "submit-feed" else cli.submit
        try:
            result = submit(records)
        except TypeError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
    return _print_result(args, result)


def cmd_token(args: argparse.Namespace) -> int:
    """Handle token management commands."""
    if args.token_action == "status":
        source = token_source()
        if source:
            print(f"✓ token: configured ({source})")
        else:
            print("✗ token: not configured")
        return 0

    elif args.token_action == "set":
        import getpass
        value = getpass.getpass("Enter CIF token: ")
        return 0 if set_token(value) else 1

    elif args.token_action == "delete":
        if delete_token():
            return 0
        print("Token not found or could not be deleted")
        return 1

    return 0


def _add_query_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--confidence", type=int, help="Minimum confidence")
    parser.add_argument("--limit", type=int, help="Maximum number of results")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cif",
        description="CIF SDK - Collective Intelligence Framework client",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--remote", help="CIF base URL (default: $CIF_REMOTE or https://localhost)")
    parser.add_argument("--token", help="API token (default: $CIF_TOKEN or system keychain)")
    parser.add_argument("--timeout", type=float, help="Request timeout in seconds")
    parser.add_argument("--proxy", help="Proxy URL")
    parser.add_argument(
        "--no-verify-ssl",
        action="store_true",
        help="Skip TLS certificate verification",
    )
    parser.add_argument(
        "--format",
        choices=list(FORMATTERS),
        default="table",
        help="Output format",
    )
    parser.add_argument("-d", "--debug", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    ping_parser = subparsers.add_parser("ping", help="Check connectivity")
    ping_parser.add_argument("-n", "--count", type=int, default=1, help="Number of pings")
    ping_parser.set_defaults(func=cmd_ping)

    search_parser = subparsers.add_parser("search", help="Search observables")
    search_parser.add_argument("query", help="Observable to search for (e.g., example.com)")
    _add_query_options(search_parser)
    search_parser.set_defaults(func=cmd_search)

    id_parser = subparsers.add_parser("search-id", help="Fetch observables by id")
    id_parser.add_argument("id", help="Observable id")
    id_parser.set_defaults(func=cmd_search_id)

    feed_parser = subparsers.add_parser("feed", help="Search feeds")
    feed_parser.add_argument("--query", help="Feed filter")
    _add_query_options(feed_parser)
    feed_parser.set_defaults(func=cmd_feed)

    for name, help_text in (("submit", "Submit observables"), ("submit-feed", "Submit feed records")):
        submit_parser = subparsers.add_parser(name, help=help_text)
        submit_parser.add_argument("-f", "--file", help="JSON input file (or use stdin)")
        submit_parser.set_defaults(func=cmd_submit)

    token_parser = subparsers.add_parser("token", help="Manage the API token")
    token_parser.add_argument(
        "token_action",
        choices=["status", "set", "delete"],
        help="Token action",
    )
    token_parser.set_defaults(func=cmd_token)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    if not args.command:
        parser.print_help()
        return 0

    try:
        result: int = args.func(args)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1
    except SubmissionError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except CIFError as e:
        logger.debug("unhandled client error", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return result


if __name__ == "__main__":
    sys.exit(main())
