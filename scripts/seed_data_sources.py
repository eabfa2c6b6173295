#!/usr/bin/env python3
"""CLI script to seed the default data sources into the data_source table.

Seeds the provider registry with the public status pages the scheduler
bootstraps on first start:
- GitHub Status (github-status)
- Discord, Slack, Vercel, Cloudflare (statuspage)
- Azure Status (azure-status)

Existing sources are matched by name and left untouched.

Usage:
    python scripts/seed_data_sources.py
    python scripts/seed_data_sources.py --dry-run
    python scripts/seed_data_sources.py --verbose
"""

import argparse
import logging
import sys

from sqlmodel import Session

# Add parent directory to path for imports
sys.path.insert(0, ".")

from incident_sync.db import create_db_and_tables, get_session_context
from incident_sync.domain import DataSourceOperations
from incident_sync.sync.workflows import DEFAULT_DATA_SOURCES, build_data_source


# =============================================================================
# Terminal Colors
# =============================================================================


class Colors:
    """Terminal color codes."""

    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    RED = "\033[91m"
    BLUE = "\033[94m"
    BOLD = "\033[1m"
    END = "\033[0m"


def print_header(text: str) -> None:
    """Print a formatted header."""
    print(f"\n{Colors.BOLD}{'=' * 60}{Colors.END}")
    print(f"{Colors.BOLD}{text}{Colors.END}")
    print(f"{Colors.BOLD}{'=' * 60}{Colors.END}\n")


def print_success(text: str) -> None:
    print(f"{Colors.GREEN}  [OK] {text}{Colors.END}")


def print_warning(text: str) -> None:
    print(f"{Colors.YELLOW}  [SKIP] {text}{Colors.END}")


def print_error(text: str) -> None:
    print(f"{Colors.RED}  [ERROR] {text}{Colors.END}")


def print_info(text: str) -> None:
    print(f"{Colors.BLUE}  [INFO] {text}{Colors.END}")


# =============================================================================
# Seeding Logic
# =============================================================================


def seed_data_sources(session: Session, dry_run: bool = False) -> dict:
    """Create every default data source missing from the database.

    Args:
        session: Database session
        dry_run: If True, don't write anything

    Returns:
        Dict with counts: created, skipped, failed
    """
    results = {"created": 0, "skipped": 0, "failed": 0}

    for definition in DEFAULT_DATA_SOURCES:
        name = definition["name"]

        existing = DataSourceOperations.get_by_name(session, name)
        if existing:
            print_warning(f"{name} - already exists (id: {existing.id})")
            results["skipped"] += 1
            continue

        if dry_run:
            print_info(f"{name} - would create (dry-run)")
            results["created"] += 1
            continue

        try:
            data_source = DataSourceOperations.create(session, build_data_source(definition))
            print_success(f"{name} - created (id: {data_source.id})")
            results["created"] += 1
        except Exception as e:
            session.rollback()
            print_error(f"{name} - failed: {e}")
            results["failed"] += 1

    return results


# =============================================================================
# CLI
# =============================================================================


def setup_logging(verbose: bool = False) -> None:
    """Configure logging based on verbosity level."""
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Seed the default data sources into the data_source table",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Preview changes without writing to database",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()
    setup_logging(args.verbose)

    print_header("Seeding Data Sources")

    if args.dry_run:
        print_info("DRY RUN MODE - No changes will be committed\n")

    print(f"Data sources to seed: {len(DEFAULT_DATA_SOURCES)}")
    for ds in DEFAULT_DATA_SOURCES:
        print(f"  - {ds['name']} ({ds['type']}): {ds['meta'].get('description', '')}")
    print()

    try:
        if not args.dry_run:
            create_db_and_tables()

        with get_session_context() as session:
            results = seed_data_sources(session, dry_run=args.dry_run)

        print_header("Summary")
        print(f"  Created: {results['created']}")
        print(f"  Skipped: {results['skipped']}")
        print(f"  Failed:  {results['failed']}")

        if results["failed"] > 0:
            return 1

        return 0

    except Exception as e:
        print_error(f"Fatal error: {e}")
        logging.exception("Fatal error during seeding")
        return 1


if __name__ == "__main__":
    sys.exit(main())
