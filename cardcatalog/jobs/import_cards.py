"""
Import the Scryfall card catalog.

Run this job to download the latest default-cards feed and load it into the
local database, or to re-import a feed that is already on disk.

Usage:
    python -m cardcatalog.jobs.import_cards
    python -m cardcatalog.jobs.import_cards --from-file data/bulk/default-cards.json
"""

import argparse
import asyncio
import logging
from pathlib import Path

from cardcatalog.config import settings
from cardcatalog.services.bulk_import import ImportSummary, run_bulk_import

logger = logging.getLogger(__name__)


async def run_import(
    source_path: Path | None = None, batch_size: int | None = None
) -> ImportSummary:
    """Run the bulk import against the configured database."""
    try:
        summary = await run_bulk_import(source_path=source_path, batch_size=batch_size)
    except Exception as e:
        logger.error("Import failed: %s", e)
        raise

    logger.info(
        "Imported %d of %d records (%d cards stored)",
        summary.written,
        summary.parsed,
        summary.total_cards,
    )
    return summary


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Import Scryfall card data")
    parser.add_argument(
        "--from-file",
        type=Path,
        default=None,
        help="Import an already downloaded bulk file instead of fetching one",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=settings.import_batch_size,
        help="Rows committed per transaction",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(run_import(source_path=args.from_file, batch_size=args.batch_size))


if __name__ == "__main__":
    main()
