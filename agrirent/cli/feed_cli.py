"""
CLI for the KYC change feed.

Seeds the reconciler from the snapshot's kyc_submissions.json, replays a
JSON-lines change feed into it and prints the reconciled view together with
the per-supplier KYC rows.

Usage:
    agrirent-feed replay --snapshot-dir <dir> --feed <file.jsonl> [--follow]
"""

import argparse
import json
import signal
import sys
import threading
from pathlib import Path

from agrirent.cli.analytics_cli import configure
from agrirent.kyc import build_supplier_kyc_rows
from agrirent.observability.logger import get_logger
from agrirent.store import SnapshotLoadError, load_snapshot_dir
from agrirent.streaming.reconciler import ChangeFeedReconciler
from agrirent.streaming.sources import FeedDeliveryFailure, FileFeedSource

logger = get_logger(__name__)

# Set by signal handlers to end --follow gracefully
_stop_requested = threading.Event()


def signal_handler(signum, frame):  # type: ignore[no-untyped-def]
    """
    Handle shutdown signals (SIGINT, SIGTERM) while following the feed.
    """
    signal_name = signal.Signals(signum).name
    logger.info(f"Received {signal_name} signal, stopping feed consumer...")
    _stop_requested.set()


def replay_command(args: argparse.Namespace) -> int:
    """
    Replay (and optionally follow) a change feed.

    Returns:
        Exit code (0 for success, 1 on load failure, 2 if the view ended stale)
    """
    config = configure(args)
    snapshot_dir = Path(args.snapshot_dir) if args.snapshot_dir else config.snapshot_dir
    feed_path = Path(args.feed) if args.feed else config.feed_path
    if feed_path is None:
        logger.error("No feed file given (use --feed or set feed_path in config)")
        return 1

    try:
        result = load_snapshot_dir(snapshot_dir)
    except SnapshotLoadError as e:
        logger.error(f"Cannot load snapshot: {e}")
        return 1

    store = result.store
    reconciler = ChangeFeedReconciler(store.list_kyc_submissions())
    source = FileFeedSource(feed_path)
    reconciler.attach(source)

    try:
        delivered = source.replay()
        logger.info(f"Replayed {delivered} events from {feed_path}")

        if args.follow:
            signal.signal(signal.SIGINT, signal_handler)
            signal.signal(signal.SIGTERM, signal_handler)
            interval = args.poll_interval or config.feed_poll_interval_seconds
            logger.info(f"Following {feed_path} every {interval}s (Ctrl+C to stop)")
            source.follow(_stop_requested, poll_interval_seconds=interval)
    except FeedDeliveryFailure as e:
        # Only reachable if a failure escapes the reconciler's error handler
        logger.error(f"Feed delivery failed: {e}")
        return 1
    finally:
        reconciler.teardown()

    submissions = reconciler.snapshot()
    rows = build_supplier_kyc_rows(store.list_users(), submissions)
    output = {
        "stale": reconciler.is_stale,
        "last_error": str(reconciler.last_error) if reconciler.last_error else None,
        "events_applied": reconciler.events_applied,
        "submissions": [s.model_dump(mode="json", by_alias=True) for s in submissions],
        "suppliers": [
            {
                "user_id": row.user.id,
                "name": row.user.name,
                "phone": row.user.phone,
                "location": row.user.location,
                "kyc_status": row.kyc_status,
                "docs": row.doc_types,
                "risk_level": row.risk_level.value,
                "submitted_at": row.submitted_at.isoformat() if row.submitted_at else None,
            }
            for row in rows
        ],
    }
    print(json.dumps(output, indent=2 if args.pretty else None))

    return 2 if reconciler.is_stale else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="KYC submission change-feed consumer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Replay a captured feed on top of the snapshot
  agrirent-feed replay --snapshot-dir data/ --feed data/kyc_feed.jsonl --pretty

  # Keep consuming lines appended to the feed file
  agrirent-feed replay --snapshot-dir data/ --feed data/kyc_feed.jsonl --follow --poll-interval 0.5
        """
    )
    parser.add_argument("--config", help="Path to YAML configuration file")
    parser.add_argument("--env-file", help="Optional .env file with AGRIRENT_* overrides")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override the configured log level",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    replay_parser = subparsers.add_parser("replay", help="Replay a change feed into the reconciler")
    replay_parser.add_argument("--snapshot-dir", help="Directory with users/kyc_submissions JSON")
    replay_parser.add_argument("--feed", help="JSON-lines change feed file")
    replay_parser.add_argument("--follow", action="store_true", help="Keep polling for appended lines")
    replay_parser.add_argument("--poll-interval", type=float, help="Seconds between polls with --follow")
    replay_parser.add_argument("--pretty", action="store_true", help="Indent JSON output")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        if args.command == "replay":
            return replay_command(args)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Configuration error: {e}")
        return 1

    return 1


if __name__ == "__main__":
    sys.exit(main())
