from __future__ import annotations

import argparse
import logging
import sys
from typing import Callable, Dict, Sequence

from .acquire import acquire
from .autorenew import auto_renew
from .client import MutexClient
from .config import Settings
from .exceptions import MutexError
from .lease import inspect, release, renew
from .models import LeaseHandle
from .report import (
    EXIT_FAILURE,
    OUTPUT_FORMATS,
    OUTPUT_JSON,
    auto_renew_exit_code,
    describe,
    describe_auto_renew,
    exit_code,
    render_lock,
)

COMMAND_ALIASES = {
    "lock": "lock",
    "l": "lock",
    "get": "get",
    "g": "get",
    "refresh": "refresh",
    "r": "refresh",
    "unlock": "unlock",
    "u": "unlock",
    "auto-refresh": "auto-refresh",
    "a": "auto-refresh",
}


def _common_options() -> argparse.ArgumentParser:
    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument("--url", default=None, help="Base URL of the mutex service (env: MUTEX_URL)")
    parent.add_argument(
        "--request-timeout",
        type=float,
        default=None,
        help="Per-request timeout in seconds (env: MUTEX_TIMEOUT)",
    )
    parent.add_argument("--verbose", "-v", action="store_true", help="Log progress to stderr")
    return parent


def _name_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--name", "-n", required=True, help="Name of the mutex")


def _token_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--token", "-t", required=True, help="Token for manipulating an existing mutex"
    )


def _build_parsers() -> Dict[str, argparse.ArgumentParser]:
    common = _common_options()

    lock_parser = argparse.ArgumentParser(prog="mutex lock", parents=[common])
    _name_option(lock_parser)
    lock_parser.add_argument(
        "--output",
        "-o",
        choices=OUTPUT_FORMATS,
        default=OUTPUT_JSON,
        help="Formats the output (default: json)",
    )
    lock_parser.add_argument(
        "--timeout",
        "-t",
        type=int,
        default=0,
        help="Seconds to keep trying when the mutex is held by someone else (default: 0)",
    )

    get_parser = argparse.ArgumentParser(prog="mutex get", parents=[common])
    _name_option(get_parser)

    refresh_parser = argparse.ArgumentParser(prog="mutex refresh", parents=[common])
    _name_option(refresh_parser)
    _token_option(refresh_parser)

    unlock_parser = argparse.ArgumentParser(prog="mutex unlock", parents=[common])
    _name_option(unlock_parser)
    _token_option(unlock_parser)

    auto_refresh_parser = argparse.ArgumentParser(prog="mutex auto-refresh", parents=[common])
    _name_option(auto_refresh_parser)
    _token_option(auto_refresh_parser)

    return {
        "lock": lock_parser,
        "get": get_parser,
        "refresh": refresh_parser,
        "unlock": unlock_parser,
        "auto-refresh": auto_refresh_parser,
    }


def _print_usage(parsers: Dict[str, argparse.ArgumentParser]) -> None:
    for index, parser in enumerate(parsers.values()):
        if index:
            print()
        print(parser.format_help().rstrip())


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _lock(args: argparse.Namespace, settings: Settings, transport) -> int:
    with MutexClient(settings.base_url, timeout=settings.timeout, transport=transport) as client:
        outcome = acquire(client, args.name, args.timeout)
    print(render_lock(outcome, args.output))
    return exit_code(outcome)


def _get(args: argparse.Namespace, settings: Settings, transport) -> int:
    with MutexClient(settings.base_url, timeout=settings.timeout, transport=transport) as client:
        outcome = inspect(client, args.name)
    print(describe(outcome))
    return exit_code(outcome)


def _refresh(args: argparse.Namespace, settings: Settings, transport) -> int:
    with MutexClient(settings.base_url, timeout=settings.timeout, transport=transport) as client:
        outcome = renew(client, args.name, args.token)
    print(describe(outcome))
    return exit_code(outcome)


def _unlock(args: argparse.Namespace, settings: Settings, transport) -> int:
    with MutexClient(settings.base_url, timeout=settings.timeout, transport=transport) as client:
        outcome = release(client, args.name, args.token)
    print(describe(outcome))
    return exit_code(outcome)


def _auto_refresh(args: argparse.Namespace, settings: Settings, transport) -> int:
    lease = LeaseHandle(name=args.name, token=args.token)
    result = auto_renew(
        settings,
        lease,
        on_renew=lambda outcome: print(outcome.body, flush=True),
        transport=transport,
    )
    print(describe_auto_renew(result))
    return auto_renew_exit_code(result)


HANDLERS: Dict[str, Callable[[argparse.Namespace, Settings, object], int]] = {
    "lock": _lock,
    "get": _get,
    "refresh": _refresh,
    "unlock": _unlock,
    "auto-refresh": _auto_refresh,
}


def main(argv: Sequence[str] | None = None, transport=None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    if len(argv) < 2 or argv[0] != "mutex":
        print("Wrong arguments")
        return EXIT_FAILURE

    parsers = _build_parsers()
    command = COMMAND_ALIASES.get(argv[1])
    if command is None:
        _print_usage(parsers)
        return EXIT_FAILURE

    args = parsers[command].parse_args(argv[2:])
    _configure_logging(args.verbose)

    try:
        settings = Settings.load(args.url, args.request_timeout)
        return HANDLERS[command](args, settings, transport)
    except MutexError as exc:
        print(exc)
        return EXIT_FAILURE


def run() -> None:
    sys.exit(main())
