from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from feedsync.app import analyze_discrepancies, perform_reconciliation, sync_feed
from feedsync.config import ConfigurationError, configure_logging, get_sync_config

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Synchronise an inventory feed with the remote catalog"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log at DEBUG level",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    sync = subparsers.add_parser("sync", help="Publish, update and retire records from the feed")
    sync.add_argument(
        "--feed",
        type=str,
        help="Path to the JSON feed snapshot (defaults to FEEDSYNC_FEED_PATH)",
    )
    sync.add_argument(
        "--force-update",
        action="store_true",
        help="Treat every record present in both feed and store as changed",
    )

    analyze = subparsers.add_parser(
        "analyze",
        help="Report drift between feed, store and remote catalog without changing anything",
    )
    analyze.add_argument(
        "--feed",
        type=str,
        help="Path to the JSON feed snapshot (defaults to FEEDSYNC_FEED_PATH)",
    )

    reconcile = subparsers.add_parser("reconcile", help="Detect and repair drift")
    reconcile.add_argument(
        "--feed",
        type=str,
        help="Path to the JSON feed snapshot (defaults to FEEDSYNC_FEED_PATH)",
    )
    reconcile.add_argument(
        "--force",
        action="store_true",
        help="Repair even when the deletion count exceeds the safety threshold",
    )

    return parser.parse_args(list(argv))


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args: argparse.Namespace
    try:
        parsed_args = _parse_args(args_list)
        configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)
        config = get_sync_config()
        if parsed_args.command == "sync" and parsed_args.force_update:
            config = replace(config, force_update=True)
    except (ValueError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "sync":
            result = sync_feed(config=config, feed_path=parsed_args.feed)
            for failure in result.errors:
                log.error("%s %s: %s", failure.operation, failure.key, failure.message)
            if result.aborted:
                sys.exit(1)
        elif parsed_args.command == "analyze":
            report = analyze_discrepancies(config=config, feed_path=parsed_args.feed)
            log.info(
                "Analysis finished: discrepancies=%s, exceeds_safety_threshold=%s",
                report.has_discrepancies,
                report.exceeds_safety_threshold,
            )
        elif parsed_args.command == "reconcile":
            outcome = perform_reconciliation(
                force=parsed_args.force,
                config=config,
                feed_path=parsed_args.feed,
            )
            log.info(outcome.message)
            if not outcome.success:
                sys.exit(1)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error during sync")
        sys.exit(1)


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
