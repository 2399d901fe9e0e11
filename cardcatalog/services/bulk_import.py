"""
Scryfall bulk import pipeline.

locate feed -> download -> parse -> normalize -> batch upsert -> rebuild
search index. Every step runs sequentially in one task. Only one import may
run against a database at a time; guarding that is the caller's job.
"""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from cardcatalog.config import settings
from cardcatalog.db import database
from cardcatalog.db.operations import count_cards, upsert_cards
from cardcatalog.db.search_index import create_search_index, rebuild_search_index
from cardcatalog.parsers.scryfall import NormalizeStats, normalize_cards
from cardcatalog.scryfall.bulk import default_bulk_path, download_bulk_feed, locate_bulk_feed
from cardcatalog.scryfall.client import ScryfallClient

logger = logging.getLogger(__name__)


@dataclass
class ImportSummary:
    """What an import run did."""

    source_path: Path
    parsed: int = 0
    written: int = 0
    skipped: dict[str, int] = field(default_factory=dict)
    total_cards: int = 0


def load_bulk_file(path: Path) -> list[dict[str, Any]]:
    """
    Load a downloaded bulk feed.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is not a JSON array
    """
    with open(path, encoding="utf-8") as f:
        cards = json.load(f)

    if not isinstance(cards, list):
        raise ValueError(f"Expected a JSON array of cards in {path}")
    return cards


async def fetch_bulk_feed(client: ScryfallClient, data_dir: Path | None = None) -> Path:
    """Locate the current default-cards feed and download it."""
    url = await locate_bulk_feed(client)
    return await download_bulk_feed(client, url, default_bulk_path(data_dir))


async def rebuild_index(bind: AsyncEngine) -> None:
    async with bind.begin() as conn:
        await create_search_index(conn)
        await rebuild_search_index(conn)


async def import_cards(
    records: list[dict[str, Any]],
    session_factory: async_sessionmaker[AsyncSession],
    batch_size: int | None = None,
) -> tuple[int, NormalizeStats]:
    """Normalize records and write the surviving rows in batches."""
    stats = NormalizeStats()
    written = await upsert_cards(
        session_factory,
        normalize_cards(records, stats),
        batch_size or settings.import_batch_size,
    )
    return written, stats


async def run_bulk_import(
    client: ScryfallClient | None = None,
    engine: AsyncEngine | None = None,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
    data_dir: Path | None = None,
    batch_size: int | None = None,
    source_path: Path | None = None,
) -> ImportSummary:
    """
    Run a full import.

    Args:
        client: Scryfall client; one is created if omitted and a download is needed
        engine: Target database. Defaults to the configured engine
        session_factory: Session factory bound to `engine`
        data_dir: Where the feed is downloaded to
        batch_size: Rows per committed batch (default 1000)
        source_path: Import this local feed file instead of downloading

    Returns:
        ImportSummary for the run

    Raises:
        CatalogUnavailable, FeedNotFound, DownloadFailed: If the feed can't be fetched.
            Nothing in the database has changed at that point.
        SQLAlchemyError: If a batch fails. Earlier batches stay committed;
            re-run the import to finish.
    """
    bind = engine or database.engine
    factory = session_factory or database.build_session_factory(bind)

    logger.info("Starting Scryfall bulk import...")
    await database.init_db(bind)

    if source_path is None:
        if client is None:
            async with ScryfallClient() as own_client:
                source_path = await fetch_bulk_feed(own_client, data_dir)
        else:
            source_path = await fetch_bulk_feed(client, data_dir)

    logger.info("Parsing JSON...")
    records = await asyncio.to_thread(load_bulk_file, source_path)
    logger.info("Parsed %d cards", len(records))

    logger.info("Inserting cards into database...")
    written, stats = await import_cards(records, factory, batch_size)
    for reason, count in stats.skipped.items():
        logger.info("Skipped %d cards: %s", count, reason.value)

    logger.info("Building full-text search index...")
    await rebuild_index(bind)

    async with factory() as session:
        total = await count_cards(session)
    logger.info("Import complete! %d cards in database.", total)

    return ImportSummary(
        source_path=source_path,
        parsed=stats.seen,
        written=written,
        skipped={reason.value: count for reason, count in stats.skipped.items()},
        total_cards=total,
    )
