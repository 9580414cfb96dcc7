"""
BugBot CLI.

Operator commands for the global issue sync engine: run one cycle, run the
scheduler, repair timestamps, inspect and list stored issues, triage.
"""

import argparse
import sys
import time

from dotenv import load_dotenv

from bugbot.api.credentials import ConfigError, CredentialPool
from bugbot.cli.formatters import format_assignments, format_json, format_output, format_summary
from bugbot.config import get_settings
from bugbot.db import db
from bugbot.logging import configure_logging, get_logger
from bugbot.repositories import GlobalIssueRepository
from bugbot.scheduler import build_scheduler
from bugbot.services.sync_service import run_sync_cycle
from bugbot.services.triage_service import (
    RemoteClassifier,
    items_from_issues,
    triage_issues,
)

logger = get_logger("cli")


def _init_database():
    """Initialize the database and make sure the schema exists."""
    db.initialize()
    db.create_all_tables()


def _build_pool(settings) -> CredentialPool:
    errors, warnings = settings.validate_sync_config()
    for warning in warnings:
        logger.warning("config_warning", message=warning)
    if errors:
        raise ConfigError("; ".join(errors))
    return CredentialPool.from_settings(settings)


def cmd_init_db(args):
    """Create database tables."""
    _init_database()
    print("Database initialized.")


def cmd_sync(args):
    """Run one sync cycle now."""
    settings = get_settings()
    pool = _build_pool(settings)
    _init_database()

    summary = run_sync_cycle(pool, settings=settings).to_dict()
    if args.format == "json":
        print(format_json(summary))
    else:
        print(format_summary(summary, "Sync cycle"))


def cmd_run(args):
    """Run the scheduler in the foreground until interrupted."""
    settings = get_settings()
    pool = _build_pool(settings)
    _init_database()

    scheduler = build_scheduler(pool, settings)
    scheduler.start(run_immediately=not args.no_immediate)
    print(
        f"Scheduler running (heartbeat {settings.scheduler_heartbeat_seconds}s, "
        f"refresh {settings.scheduler_refresh_hours}h). Press Ctrl+C to stop."
    )
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        print("\nStopping scheduler...")
    finally:
        scheduler.stop(wait=True)


def cmd_repair(args):
    """Backfill missing GitHub timestamps from fetched_at."""
    _init_database()
    with db.session() as session:
        repaired = GlobalIssueRepository(session).repair_missing_timestamps()

    if args.format == "json":
        print(format_json({"repaired": repaired}))
    else:
        print(f"Repaired {repaired} issue(s).")


def cmd_stats(args):
    """Show stored issue count, a sample and database health."""
    _init_database()
    with db.session() as session:
        report = GlobalIssueRepository(session).introspect(sample_size=args.sample)
    report["database"] = db.health_check()

    if args.format == "json":
        print(format_json(report))
        return

    print("\n" + "=" * 80)
    print("BUGBOT STATISTICS")
    print("=" * 80)
    print(f"\nStored issues: {report['total']}")
    health = report["database"]
    status = "healthy" if health["healthy"] else f"unhealthy ({health['error']})"
    print(f"Database: {status}, {health['latency_ms']} ms")
    if report["sample"]:
        print("\nMost recently updated:")
        print(format_output(report["sample"], "text"))
    print("=" * 80)


def cmd_list(args):
    """List stored issues, most recently updated first."""
    _init_database()
    with db.session() as session:
        issues = [
            issue.to_dict()
            for issue in GlobalIssueRepository(session).list_recent(limit=args.limit, offset=args.offset)
        ]

    if not issues and args.format == "text":
        print("No issues found.")
        return
    print(format_output(issues, args.format, verbose=args.verbose))


def cmd_triage(args):
    """Assign developers and priorities to the most recently updated issues."""
    settings = get_settings()
    _init_database()
    batch_size = args.limit or settings.triage_batch_size

    with db.session() as session:
        issues = GlobalIssueRepository(session).list_recent(limit=batch_size)
        items = items_from_issues(issues)

    assignments = triage_issues(
        items,
        classifier=RemoteClassifier.from_settings(settings),
        batch_size=batch_size,
    )
    rows = [a.model_dump() for a in assignments]

    if args.format == "json":
        print(format_json(rows))
    else:
        print(format_assignments(rows))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bugbot",
        description="BugBot - keep a local mirror of recently updated open GitHub issues",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("init-db", help="Create database tables")

    sync_parser = subparsers.add_parser("sync", help="Run one sync cycle")
    sync_parser.add_argument("--format", choices=["text", "json"], default="text")

    run_parser = subparsers.add_parser("run", help="Run the sync scheduler")
    run_parser.add_argument(
        "--no-immediate", action="store_true", help="Wait for the first heartbeat instead of syncing at startup"
    )

    repair_parser = subparsers.add_parser("repair", help="Backfill missing issue timestamps")
    repair_parser.add_argument("--format", choices=["text", "json"], default="text")

    stats_parser = subparsers.add_parser("stats", help="Show stored issue statistics")
    stats_parser.add_argument("--sample", type=int, default=5, help="Number of sample issues")
    stats_parser.add_argument("--format", choices=["text", "json"], default="text")

    list_parser = subparsers.add_parser("list", help="List stored issues")
    list_parser.add_argument("--limit", type=int, default=50)
    list_parser.add_argument("--offset", type=int, default=0)
    list_parser.add_argument("--format", choices=["text", "json"], default="text")
    list_parser.add_argument("--verbose", "-v", action="store_true")

    triage_parser = subparsers.add_parser("triage", help="Assign developers and priorities")
    triage_parser.add_argument("--limit", type=int, help="Batch size (defaults to TRIAGE_BATCH_SIZE)")
    triage_parser.add_argument("--format", choices=["text", "json"], default="text")

    return parser


COMMANDS = {
    "init-db": cmd_init_db,
    "sync": cmd_sync,
    "run": cmd_run,
    "repair": cmd_repair,
    "stats": cmd_stats,
    "list": cmd_list,
    "triage": cmd_triage,
}


def main(argv=None):
    """Main entry point with CLI interface."""
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(get_settings().log_level)

    if args.command not in COMMANDS:
        parser.print_help()
        return

    try:
        COMMANDS[args.command](args)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        raise SystemExit(2) from e


if __name__ == "__main__":
    main()
