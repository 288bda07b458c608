"""
Command-line interface for KapeViewer.

This module provides a CLI for scanning case folders and printing the merged
timeline without the GUI.
"""

import argparse
import logging
import signal
import sys
import threading
from pathlib import Path
from typing import Optional

from .. import __version__
from ..config.settings import get_settings, get_settings_manager
from ..core.models import Group, flatten_groups
from ..core.time_columns import detect_time_column
from ..core.timeline import TimelineBuilder, TimelineCancelled
from ..infrastructure.csv_reader import get_csv_headers
from ..infrastructure.csv_scanner import scan_folder
from ..infrastructure.logging_config import setup_logging, get_logger


logger = get_logger(__name__)

EXIT_CANCELLED = 130


def create_parser() -> argparse.ArgumentParser:
    """
    Create the argument parser for the CLI.

    Returns:
        Configured ArgumentParser.
    """
    parser = argparse.ArgumentParser(
        prog="kapeviewer",
        description="Browse forensic CSV exports and build a merged timeline"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"KapeViewer {__version__}"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    scan_parser = subparsers.add_parser("scan", help="List CSV files grouped by subfolder")
    scan_parser.add_argument("case_folder", type=Path, help="Path to the case folder")

    columns_parser = subparsers.add_parser("columns", help="Show the detected time column of each file")
    columns_parser.add_argument("case_folder", type=Path, help="Path to the case folder")

    timeline_parser = subparsers.add_parser("timeline", help="Print the merged timeline")
    timeline_parser.add_argument("case_folder", type=Path, help="Path to the case folder")
    timeline_parser.add_argument("--group", action="append", dest="groups",
                                 help="Only include this group (repeatable)")
    timeline_parser.add_argument("--limit", type=int, default=None,
                                 help="Print at most this many events")
    timeline_parser.add_argument("--workers", type=int, default=None,
                                 help="Worker thread count (default from settings)")

    return parser


def _scan(case_folder: Path) -> Optional[list[Group]]:
    """
    Scan a case folder and remember it in the recent case folders.

    Returns:
        The groups, or None if the folder could not be scanned.
    """
    try:
        groups = scan_folder(case_folder)
    except OSError as e:
        logger.error(f"Cannot scan case folder: {e}")
        return None

    get_settings_manager().add_recent_case_folder(str(case_folder.resolve()))
    return groups


def cmd_scan(args: argparse.Namespace) -> int:
    """
    Print the groups of a case folder with file counts and sizes.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Exit code (0 for success).
    """
    groups = _scan(args.case_folder)
    if groups is None:
        return 1

    for group in groups:
        print(f"{group.name} ({group.file_count} files, {group.total_size} bytes)")
        for entry in group.files:
            print(f"  {entry.display_name}\t{entry.file_size}")

    total_files = sum(group.file_count for group in groups)
    print(f"{total_files} CSV files in {len(groups)} groups")

    return 0


def cmd_columns(args: argparse.Namespace) -> int:
    """
    Print the time column detected for every CSV file in a case folder.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Exit code (0 for success).
    """
    groups = _scan(args.case_folder)
    if groups is None:
        return 1

    for entry in flatten_groups(groups):
        time_column = detect_time_column(get_csv_headers(entry.full_path))
        print(f"{entry.group_name}/{entry.file_name}\t{time_column or '-'}")

    return 0


def cmd_timeline(args: argparse.Namespace) -> int:
    """
    Build and print the merged timeline of a case folder.

    Ctrl-C cancels the build.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Exit code (0 for success, 130 when cancelled).
    """
    groups = _scan(args.case_folder)
    if groups is None:
        return 1

    if args.groups:
        wanted = {name.casefold() for name in args.groups}
        groups = [group for group in groups if group.name.casefold() in wanted]

    files = flatten_groups(groups)
    max_workers = args.workers if args.workers is not None else get_settings().max_workers
    builder = TimelineBuilder(max_workers=max_workers)

    cancel_event = threading.Event()
    previous_handler = signal.signal(signal.SIGINT, lambda signum, frame: cancel_event.set())
    try:
        report = builder.build_report(
            files,
            progress_callback=lambda percent: logger.debug(f"Timeline progress: {percent}%"),
            cancel_event=cancel_event
        )
    except TimelineCancelled:
        print("Timeline build cancelled", file=sys.stderr)
        return EXIT_CANCELLED
    finally:
        signal.signal(signal.SIGINT, previous_handler)

    events = report.events if args.limit is None else report.events[:args.limit]
    for event in events:
        print("\t".join([
            event.timestamp.isoformat(),
            event.group_name,
            event.source,
            event.description
        ]))

    for skip in report.skipped:
        print(f"Skipped {skip.file_name}: {skip.reason}", file=sys.stderr)
    if report.bad_records:
        print(f"Dropped {report.bad_records} malformed records", file=sys.stderr)
    print(f"{len(report.events)} events from {len(files)} files", file=sys.stderr)

    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Argument list (defaults to sys.argv[1:]).

    Returns:
        Exit code.
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    log_level = logging.DEBUG if args.verbose else settings.log_level
    setup_logging(
        level=log_level,
        log_file=settings.log_file_path,
        log_to_file=settings.log_to_file,
        stream=sys.stderr
    )

    if args.command == "scan":
        return cmd_scan(args)
    elif args.command == "columns":
        return cmd_columns(args)
    elif args.command == "timeline":
        return cmd_timeline(args)
    else:
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())
