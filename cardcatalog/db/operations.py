"""
Database operations for card rows.

Bulk writes go through `upsert_cards`, which commits in fixed-size batches.
Each batch is atomic; the run as a whole is not. If a run dies after batch
k, batches 1..k stay committed and the remedy is to run the import again:
every write replaces the row by id, so a re-run converges to the feed.
"""

import logging
from collections.abc import Iterable, Iterator
from datetime import UTC, datetime
from itertools import islice
from typing import Any, TypeVar

from sqlalchemy import func, insert, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cardcatalog.models.db import CardDB
from cardcatalog.parsers.scryfall import CardRow

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 1000

# Log progress every this many rows
PROGRESS_INTERVAL = 10_000

T = TypeVar("T")


def batched(items: Iterable[T], size: int) -> Iterator[list[T]]:
    """Yield consecutive lists of at most `size` items."""
    if size < 1:
        raise ValueError(f"Batch size must be positive, got {size}")
    iterator = iter(items)
    while batch := list(islice(iterator, size)):
        yield batch


def _timestamp() -> str:
    return datetime.now(UTC).isoformat()


def _stamped(row: CardRow, stamp: str) -> dict[str, Any]:
    return {**row, "updated_at": stamp}


# --- Bulk writes ---


async def upsert_cards(
    session_factory: async_sessionmaker[AsyncSession],
    rows: Iterable[CardRow],
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> int:
    """
    Insert or replace rows in atomic batches.

    Each batch runs in its own transaction as one INSERT OR REPLACE
    executemany, so an existing row is overwritten completely rather than
    merged. A failing batch is rolled back and the error propagates;
    batches committed before it remain.

    Returns:
        Number of rows written.
    """
    statement = insert(CardDB.__table__).prefix_with("OR REPLACE")
    written = 0

    for batch in batched(rows, batch_size):
        stamp = _timestamp()
        params = [_stamped(row, stamp) for row in batch]

        async with session_factory() as session:
            async with session.begin():
                await session.execute(statement, params)

        previous = written
        written += len(params)
        if written // PROGRESS_INTERVAL > previous // PROGRESS_INTERVAL:
            logger.info("  Inserted %d cards...", written)

    return written


# --- Single-row access ---


async def upsert_card(session: AsyncSession, row: CardRow) -> CardDB:
    """
    Insert or update one row, keyed by id.

    Used for write-through fills. The caller owns the transaction.
    """
    values = _stamped(row, _timestamp())
    statement = sqlite_insert(CardDB).values(**values)
    statement = statement.on_conflict_do_update(
        index_elements=[CardDB.id],
        set_={key: value for key, value in values.items() if key != "id"},
    )
    await session.execute(statement)

    card = await session.get(CardDB, row["id"], populate_existing=True)
    if card is None:
        msg = f"Card {row['id']} missing after upsert"
        raise RuntimeError(msg)
    return card


async def get_card(session: AsyncSession, card_id: str) -> CardDB | None:
    """Get a card by its printing id. Returns None if not stored."""
    return await session.get(CardDB, card_id)


async def get_cards_by_name(session: AsyncSession, name: str, limit: int = 20) -> list[CardDB]:
    """Get printings whose name equals `name` exactly."""
    result = await session.execute(
        select(CardDB).where(CardDB.name == name).order_by(CardDB.set_code).limit(limit)
    )
    return list(result.scalars().all())


async def count_cards(session: AsyncSession) -> int:
    result = await session.execute(select(func.count()).select_from(CardDB))
    return int(result.scalar_one())
