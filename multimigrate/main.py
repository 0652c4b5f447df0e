import argparse
from dataclasses import replace
import logging

from multimigrate.config import Settings, get_settings, validate_max_workers
from multimigrate.directory import fetch_databases
from multimigrate.errors import DirectoryFetchError
from multimigrate.orchestrator import MigrationOrchestrator
from multimigrate.report import format_report


logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Apply one migration script to many databases concurrently")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="migrate every target database once")
    run_parser.add_argument(
        "--database",
        action="append",
        dest="databases",
        help="target database (repeatable); skips the database directory lookup",
    )
    run_parser.add_argument("--migration-dir", help="directory holding the migration script")
    run_parser.add_argument("--script-name", help="migration script file name")
    run_parser.add_argument("--max-workers", type=int, help="cap on concurrent migrations")

    list_parser = subparsers.add_parser("list-databases", help="print the target databases and exit")
    list_parser.add_argument(
        "--database",
        action="append",
        dest="databases",
        help="target database (repeatable); printed instead of the directory lookup",
    )

    return parser.parse_args(argv)


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    overrides: dict[str, object] = {}
    if args.databases:
        overrides["target_databases"] = tuple(args.databases)
    if getattr(args, "migration_dir", None):
        overrides["migration_dir"] = args.migration_dir
    if getattr(args, "script_name", None):
        overrides["script_name"] = args.script_name
    if getattr(args, "max_workers", None) is not None:
        overrides["max_workers"] = validate_max_workers(args.max_workers)
    return replace(settings, **overrides) if overrides else settings


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    try:
        settings = apply_overrides(get_settings(), args)
    except ValueError as exc:
        raise SystemExit(f"invalid configuration: {exc}") from exc

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    try:
        databases = fetch_databases(settings)
    except DirectoryFetchError as exc:
        logger.error("failed to fetch databases: %s", exc)
        raise SystemExit(1) from exc

    if args.command == "list-databases":
        for database in databases:
            print(database)
        return

    run = MigrationOrchestrator(settings).run(databases)
    print(format_report(run))


if __name__ == "__main__":
    main()
