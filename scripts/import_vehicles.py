#!/usr/bin/env python3
"""
Vehicle CSV Import Script for AutoParts.

Loads a vehicle CSV file into the configured database using the same importer
as the admin upload endpoint.

Accepted headers (case, spacing and Turkish letters are ignored):
- Brand / Marka, Model / Model Adi (required)
- StartYear / Baslangic Yili, EndYear / Bitis Yili, Year / Yil
- Engine / Motor / Variant, ImageUrl / Gorsel, BrandLogoUrl / Marka Logosu

Usage:
    python scripts/import_vehicles.py vehicles.csv                   # Append
    python scripts/import_vehicles.py vehicles.csv --clear-existing  # Replace catalog
    python scripts/import_vehicles.py vehicles.csv --dry-run         # Validate only
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add backend to path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "backend"))

from autoparts.core.exceptions import AutoPartsException  # noqa: E402
from autoparts.db.postgres.session import async_session_maker, dispose_engine  # noqa: E402
from autoparts.services.vehicle_import import VehicleCsvImporter, VehicleImportResult  # noqa: E402

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def print_summary(result: VehicleImportResult, dry_run: bool) -> None:
    """Print import summary."""
    print("\n" + "=" * 60)
    print("VEHICLE IMPORT SUMMARY" + (" (DRY RUN)" if dry_run else ""))
    print("=" * 60)
    print(f"  Imported:          {result.imported}")
    print(f"  Skipped (dupes):   {result.skipped}")
    print(f"  Deleted vehicles:  {result.deleted_vehicles}")
    print(f"  Rejected rows:     {result.rejected}")
    for error in result.errors:
        print(f"    - {error}")
    print("=" * 60)


async def run_import(path: Path, clear_existing: bool, dry_run: bool) -> VehicleImportResult:
    content = path.read_bytes()
    try:
        async with async_session_maker() as session:
            importer = VehicleCsvImporter(session)
            return await importer.import_csv(content, clear_existing=clear_existing, dry_run=dry_run)
    finally:
        await dispose_engine()


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Import vehicles from a CSV file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python scripts/import_vehicles.py data/vehicles.csv
    python scripts/import_vehicles.py data/vehicles.csv --clear-existing
    python scripts/import_vehicles.py data/vehicles.csv --dry-run -v
        """,
    )

    parser.add_argument("file", type=Path, help="CSV file to import")
    parser.add_argument(
        "--clear-existing",
        action="store_true",
        help="Delete every vehicle and part compatibility link before importing",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Parse and validate only, don't write to the database",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if not args.file.is_file():
        logger.error(f"File not found: {args.file}")
        return 1

    try:
        result = asyncio.run(run_import(args.file, args.clear_existing, args.dry_run))
    except AutoPartsException as e:
        logger.error(f"Import failed: {e.message}")
        for row_error in e.details.get("row_errors", []):
            logger.error(f"  {row_error}")
        return 1

    print_summary(result, args.dry_run)
    return 0


if __name__ == "__main__":
    sys.exit(main())
