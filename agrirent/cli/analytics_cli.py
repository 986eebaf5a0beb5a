"""
Command-line interface for the analytics report.

Usage:
    agrirent-analytics report --snapshot-dir <dir> [--now <iso-datetime>] [--output <file>]
"""

import argparse
import json
import sys
from datetime import datetime, timezone
from pathlib import Path

from agrirent.analytics import AnalyticsRecomputer
from agrirent.core.config import AppConfig, load_config
from agrirent.observability.logger import get_logger, setup_logger
from agrirent.observability.metrics import start_metrics_server
from agrirent.store import SnapshotLoadError, load_snapshot_dir

logger = get_logger(__name__)


def parse_now(value: str) -> datetime:
    """argparse type for --now: an ISO datetime, "Z" suffix allowed."""
    text = value[:-1] + "+00:00" if value.endswith("Z") else value
    try:
        return datetime.fromisoformat(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"--now must be an ISO datetime, got {value!r}") from e


def configure(args: argparse.Namespace) -> AppConfig:
    """Load config, apply CLI overrides, set up logging and metrics."""
    config = load_config(args.config, args.env_file)
    if args.log_level:
        config = config.model_copy(update={"log_level": args.log_level})
    setup_logger("agrirent", level=config.log_level, format_type=config.log_format)
    if config.metrics_enabled:
        start_metrics_server(config.metrics_port)
        logger.info(f"Metrics endpoint listening on port {config.metrics_port}")
    return config


def report_command(args: argparse.Namespace) -> int:
    """
    Compute the analytics report for a snapshot directory.

    Returns:
        Exit code (0 for success)
    """
    config = configure(args)
    snapshot_dir = Path(args.snapshot_dir) if args.snapshot_dir else config.snapshot_dir
    now = args.now or datetime.now(timezone.utc)

    try:
        result = load_snapshot_dir(snapshot_dir)
    except SnapshotLoadError as e:
        logger.error(f"Cannot load snapshot: {e}")
        return 1

    if result.rejected:
        logger.warning(f"{len(result.rejected)} snapshot rows were rejected")
        if args.strict:
            for row in result.rejected:
                logger.error(
                    f"Rejected {row.entity} row {row.index}",
                    extra={"error_messages": row.error_messages},
                )
            return 1

    recomputer = AnalyticsRecomputer()
    report = recomputer.refresh_from_store(result.store, now)

    payload = report.model_dump(mode="json")
    payload["most_booked_category_label"] = report.most_booked_category_label
    payload["rejected_rows"] = len(result.rejected)
    text = json.dumps(payload, indent=2 if args.pretty else None)

    if args.output:
        Path(args.output).write_text(text + "\n", encoding="utf-8")
        logger.info(f"Report written to {args.output}")
    else:
        print(text)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Marketplace analytics report",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Report for the snapshot directory from config/app.yaml
  agrirent-analytics report --config config/app.yaml

  # Reproducible report with a fixed evaluation time
  agrirent-analytics report --snapshot-dir data/ --now 2025-10-01T00:00:00Z --pretty

  # Fail if any snapshot row is rejected
  agrirent-analytics report --snapshot-dir data/ --strict --output report.json
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

    report_parser = subparsers.add_parser("report", help="Compute the analytics report")
    report_parser.add_argument("--snapshot-dir", help="Directory with bookings/items/users JSON")
    report_parser.add_argument("--now", type=parse_now, help="Evaluation time (ISO datetime); default: current UTC time")
    report_parser.add_argument("--output", help="Write the report here instead of stdout")
    report_parser.add_argument("--pretty", action="store_true", help="Indent JSON output")
    report_parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with an error if any snapshot row is rejected",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        if args.command == "report":
            return report_command(args)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Configuration error: {e}")
        return 1

    return 1


if __name__ == "__main__":
    sys.exit(main())
