import argparse
import logging
import sys
from datetime import datetime

from src.adapters.clock import SystemClock
from src.adapters.release_runner import IntervalReleaseRunner
from src.adapters.sqlite.migrator import SQLiteMigrator
from src.adapters.sqlite.repos import SQLiteContentRepo
from src.api.deps import Settings
from src.components.release import (
    ProcessReleasesInput,
    ReleaseRulesAdapter,
    ScheduledContentInput,
    ScheduleReleaseInput,
    SweepOutput,
    run_get_scheduled,
    run_process_due_releases,
    run_schedule,
)
from src.rules.loader import load_rules

logger = logging.getLogger("cli")


class CLIContext:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        if not settings.rules_path.exists():
            logger.error("Rules file %s not found.", settings.rules_path)
            sys.exit(1)
        self.rules = load_rules(settings.rules_path)
        self.release_rules = ReleaseRulesAdapter(self.rules.model_dump())
        self.repo = SQLiteContentRepo(settings.db_path)
        self.clock = SystemClock()


def handle_migrate(settings: Settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    migrator = SQLiteMigrator(settings.db_path, str(settings.migrations_dir))
    applied = migrator.run_migrations()
    print(f"Applied {len(applied)} migration(s) to {settings.db_path}.")


def _sweep_once(ctx: CLIContext) -> SweepOutput:
    return run_process_due_releases(
        ProcessReleasesInput(), repo=ctx.repo, time_port=ctx.clock, rules=ctx.release_rules
    )


def handle_sweep(ctx: CLIContext, args: argparse.Namespace) -> None:
    if args.every:
        runner = IntervalReleaseRunner(lambda: _sweep_once(ctx), interval_seconds=args.every)
        logger.info("Sweeping every %ss; Ctrl+C to stop", args.every)
        try:
            runner.run_forever()
        except KeyboardInterrupt:
            logger.info("Stopped.")
        return

    result = _sweep_once(ctx)
    print(f"Released {result.released_count} item(s).")
    for err in result.errors:
        print(f"  failed {err.item_id}: {err.error}")
    if result.errors:
        sys.exit(1)


def handle_schedule(ctx: CLIContext, args: argparse.Namespace) -> None:
    try:
        release_date = datetime.fromisoformat(args.release_date)
    except ValueError:
        logger.error("Invalid date %r; use ISO 8601, e.g. 2025-09-01T00:00:00Z", args.release_date)
        sys.exit(2)

    result = run_schedule(
        ScheduleReleaseInput(content_id=args.content_id, release_date=release_date),
        repo=ctx.repo,
        time_port=ctx.clock,
        rules=ctx.release_rules,
    )
    if not result.success or result.item is None:
        for err in result.errors:
            logger.error("%s: %s", err.code, err.message)
        sys.exit(1)

    print(f"Scheduled '{result.item.title}' to become free on {result.item.release_date}.")


def handle_scheduled(ctx: CLIContext, args: argparse.Namespace) -> None:
    result = run_get_scheduled(
        ScheduledContentInput(limit=args.limit),
        repo=ctx.repo,
        time_port=ctx.clock,
        rules=ctx.release_rules,
    )
    if not result.success:
        for err in result.errors:
            logger.error("%s: %s", err.code, err.message)
        sys.exit(1)

    if not result.entries:
        print("No upcoming releases.")
        return
    for entry in result.entries:
        print(
            f"{entry.release_date.isoformat()}  "
            f"(in {entry.days_until_release}d)  {entry.item.id}  {entry.item.title}"
        )


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(level=logging.INFO)

    parser = argparse.ArgumentParser(description="Premium Release Gate CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # migrate
    subparsers.add_parser("migrate", help="Apply pending database migrations")

    # sweep
    sweep_parser = subparsers.add_parser("sweep", help="Release premium items whose date passed")
    sweep_parser.add_argument(
        "--every", type=float, default=None, help="Repeat every N seconds until interrupted"
    )

    # schedule
    schedule_parser = subparsers.add_parser("schedule", help="Set a premium item's release date")
    schedule_parser.add_argument("content_id", help="Content item id")
    schedule_parser.add_argument("release_date", help="ISO 8601 date/time (UTC if no offset)")

    # scheduled
    scheduled_parser = subparsers.add_parser("scheduled", help="List upcoming releases")
    scheduled_parser.add_argument("--limit", type=int, default=None)

    args = parser.parse_args(argv)
    settings = Settings()

    if args.command == "migrate":
        handle_migrate(settings)
        return

    ctx = CLIContext(settings)
    if args.command == "sweep":
        handle_sweep(ctx, args)
    elif args.command == "schedule":
        handle_schedule(ctx, args)
    elif args.command == "scheduled":
        handle_scheduled(ctx, args)


if __name__ == "__main__":
    main()
