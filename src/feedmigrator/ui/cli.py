from __future__ import annotations

import argparse
import logging
import shlex
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from feedmigrator.adapters.nuget import FeedError
from feedmigrator.app import migrate_feed
from feedmigrator.config import (
    DEFAULT_PAGE_SIZE,
    CacheConfig,
    ConfigurationError,
    MigrationConfig,
    RateLimit,
    configure_logging,
    get_api_key,
    get_feed_config,
    resolve_staging_path,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)

EXIT_FEED_FAILURE = 1
EXIT_USAGE = 2


def _positive_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Expected an integer, got {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError(f"Expected a positive integer, got {parsed}")
    return parsed


def _positive_float(value: str) -> float:
    try:
        parsed = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Expected a number, got {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError(f"Expected a positive number, got {parsed}")
    return parsed


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Copy package versions missing from a destination NuGet feed"
    )
    parser.add_argument("source", help="Service index URL of the source feed")
    parser.add_argument("destination", help="Service index URL of the destination feed")
    parser.add_argument(
        "--push-source",
        type=str,
        help="Feed location handed to the publisher (defaults to the destination index URL)",
    )
    parser.add_argument(
        "--staging-path",
        type=Path,
        help="File used to stage each downloaded package (defaults to the data directory)",
    )
    parser.add_argument(
        "--max-packages",
        type=_positive_int,
        help="Maximum number of source package versions to list before stopping",
    )
    parser.add_argument(
        "--max-entries",
        type=_positive_int,
        help="Maximum number of source catalog entries to resolve before stopping",
    )
    parser.add_argument(
        "--page-size",
        type=_positive_int,
        default=DEFAULT_PAGE_SIZE,
        help="Number of packages to request per search page (default: %(default)s)",
    )
    parser.add_argument(
        "--publisher-command",
        type=str,
        default="dotnet nuget",
        help="Command prefix used to push packages (default: %(default)s)",
    )
    parser.add_argument(
        "--publisher-timeout",
        type=_positive_float,
        help="Seconds to wait for a single publisher run",
    )
    parser.add_argument(
        "--rate-limit",
        type=_positive_int,
        help="Maximum number of feed requests per second",
    )
    parser.add_argument(
        "--cache",
        action="store_true",
        help="Cache source feed responses on disk between runs",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only report which packages are missing; download and publish nothing",
    )
    parser.add_argument(
        "--report",
        type=Path,
        help="Write a JSON report of the run to this file",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser.parse_args(list(argv))


def _build_config(args: argparse.Namespace) -> MigrationConfig:
    ratelimit = RateLimit(max_calls=args.rate_limit, per_seconds=1.0) if args.rate_limit else None
    cache = CacheConfig(backend="sqlite") if args.cache else None
    publisher_command = tuple(shlex.split(args.publisher_command))
    if not publisher_command:
        raise ConfigurationError("--publisher-command must not be empty")

    return MigrationConfig(
        source=get_feed_config("source", args.source, ratelimit=ratelimit, cache=cache),
        destination=get_feed_config("destination", args.destination, ratelimit=ratelimit),
        staging_path=resolve_staging_path(args.staging_path),
        api_key=None if args.dry_run else get_api_key(),
        push_source=args.push_source,
        publisher_command=publisher_command,
        publisher_timeout_seconds=args.publisher_timeout,
        page_size=args.page_size,
        max_packages=args.max_packages,
        max_entries=args.max_entries,
        dry_run=args.dry_run,
        report_path=args.report,
    )


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        config = _build_config(parsed_args)
        report = migrate_feed(config)
    except ConfigurationError:
        log.exception("Configuration error")
        sys.exit(EXIT_USAGE)
    except FeedError:
        log.exception("Feed resolution failed")
        sys.exit(EXIT_FEED_FAILURE)
    except Exception:
        log.exception("Fatal error during migration")
        sys.exit(EXIT_FEED_FAILURE)

    if report.dry_run:
        log.info("Dry run: %d entries missing from the destination", len(report.missing))
    else:
        log.info("Succeeded: %d, failed: %d", report.succeeded, report.failed)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
