#!/usr/bin/env python3
"""CLI script for running a single sync pass outside the scheduler.

Usage:
    # Sync every active data source once
    python scripts/run_sync_pass.py

    # Sync one data source by name
    python scripts/run_sync_pass.py --source "GitHub Status"

    # Fetch the update timeline of one incident (requires --source)
    python scripts/run_sync_pass.py --source "Discord Status" --updates abc123

    # Machine-readable output
    python scripts/run_sync_pass.py --json

    # Verbose logging
    python scripts/run_sync_pass.py --verbose
"""

import argparse
import json
import logging
import sys
from datetime import datetime

# Add project root to path
sys.path.insert(0, str(__file__).rsplit("/", 2)[0])

from incident_sync.core.config import settings
from incident_sync.db import create_db_and_tables, get_session_factory
from incident_sync.domain import SQLModelSyncStore
from incident_sync.sync.workflows import SourceSyncResult, SyncPassResult, SyncService


# ANSI color codes
class Colors:
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    RED = "\033[91m"
    BLUE = "\033[94m"
    CYAN = "\033[96m"
    BOLD = "\033[1m"
    RESET = "\033[0m"


def print_header(text: str) -> None:
    """Print a formatted section header."""
    print(f"\n{Colors.BOLD}{Colors.BLUE}{'=' * 60}{Colors.RESET}")
    print(f"{Colors.BOLD}{Colors.BLUE}{text}{Colors.RESET}")
    print(f"{Colors.BOLD}{Colors.BLUE}{'=' * 60}{Colors.RESET}\n")


def print_success(text: str) -> None:
    print(f"{Colors.GREEN}✓ {text}{Colors.RESET}")


def print_warning(text: str) -> None:
    print(f"{Colors.YELLOW}⚠ {text}{Colors.RESET}")


def print_error(text: str) -> None:
    print(f"{Colors.RED}✗ {text}{Colors.RESET}")


def print_info(text: str) -> None:
    print(f"{Colors.CYAN}ℹ {text}{Colors.RESET}")


def print_source_result(result: SourceSyncResult) -> None:
    """Print one source's outcome on a single line."""
    if result.skipped:
        print_warning(f"{result.name}: skipped (interval not elapsed)")
    elif result.success:
        print_success(
            f"{result.name}: {result.incidents} incidents, {result.components} components "
            f"({result.duration_seconds:.1f}s)"
        )
    else:
        print_error(f"{result.name}: {result.error}")


def print_pass_result(result: SyncPassResult) -> None:
    for source_result in result.sources:
        print_source_result(source_result)

    print(f"\n{Colors.BOLD}Overall:{Colors.RESET}")
    print(f"  Sources:    {result.total}")
    print(f"  Succeeded:  {result.succeeded}")
    print(f"  Failed:     {Colors.RED if result.failed else ''}{result.failed}{Colors.RESET}")
    print(f"  Skipped:    {result.skipped}")
    print(f"  Incidents:  {result.incidents}")
    print(f"  Components: {result.components}")
    print(f"  Duration:   {result.duration_seconds:.1f}s")


def setup_logging(verbose: bool) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # Reduce noise from external libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Run one incident sync pass",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--source",
        type=str,
        help="Sync only the data source with this name",
    )
    parser.add_argument(
        "--updates",
        metavar="EXTERNAL_ID",
        type=str,
        help="Fetch the update timeline of one incident of --source",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output results as JSON",
    )
    return parser.parse_args()


def main() -> int:
    """Main entry point."""
    args = parse_args()
    setup_logging(args.verbose)

    if args.updates and not args.source:
        print_error("--updates requires --source")
        return 1

    if not args.json:
        print_header("Incident Sync Pass")
        print_info(f"Started at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")

    try:
        create_db_and_tables()
        store = SQLModelSyncStore(get_session_factory())
        service = SyncService(
            store,
            respect_source_intervals=settings.SYNC_RESPECT_SOURCE_INTERVALS,
        )

        if args.source:
            matches = [s for s in store.list_data_sources() if s.name == args.source]
            if not matches:
                print_error(f"Data source not found: {args.source}")
                return 1
            data_source = matches[0]

            if args.updates:
                appended = service.sync_incident_updates(data_source.id, args.updates)
                if args.json:
                    print(json.dumps({"source": data_source.name, "external_id": args.updates, "appended": appended}, indent=2))
                else:
                    print_success(f"Appended {appended} updates for {args.updates}")
                return 0

            source_result = service.sync_source(data_source)
            if args.json:
                print(json.dumps(source_result.to_dict(), indent=2))
            else:
                print_source_result(source_result)
            return 0 if source_result.success else 1

        result = service.run_pass()
        if args.json:
            print(json.dumps(result.to_dict(), indent=2))
        else:
            print_header("Results Summary")
            print_pass_result(result)
            print_success(f"\nCompleted at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        return 0 if result.failed == 0 else 1

    except LookupError as e:
        print_error(str(e))
        return 1
    except KeyboardInterrupt:
        print_warning("\nInterrupted by user")
        return 130
    except Exception as e:
        print_error(f"Fatal error: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
