"""
Full-text search index over the cards table.

`cards_fts` is an FTS5 external-content table: it stores only the index and
reads column values back from `cards` by rowid. It holds nothing that
cannot be rebuilt from `cards`, so an import simply drops, recreates and
rebuilds it.
"""

import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncConnection

logger = logging.getLogger(__name__)

SEARCH_INDEX_TABLE = "cards_fts"
SEARCH_INDEX_COLUMNS = ("name", "types", "subtypes", "supertypes", "oracle_text")


async def drop_search_index(conn: AsyncConnection) -> None:
    await conn.execute(text(f"DROP TABLE IF EXISTS {SEARCH_INDEX_TABLE}"))


async def create_search_index(conn: AsyncConnection) -> None:
    """(Re)define the index. It is empty until `rebuild_search_index` runs."""
    await drop_search_index(conn)
    await conn.execute(
        text(
            f"CREATE VIRTUAL TABLE {SEARCH_INDEX_TABLE} USING fts5("
            f"{', '.join(SEARCH_INDEX_COLUMNS)}, "
            "content='cards', content_rowid='rowid')"
        )
    )


async def rebuild_search_index(conn: AsyncConnection) -> None:
    """Resynchronize the index with the current contents of `cards`."""
    await conn.execute(
        text(f"INSERT INTO {SEARCH_INDEX_TABLE}({SEARCH_INDEX_TABLE}) VALUES('rebuild')")
    )
    logger.info("Rebuilt search index %s", SEARCH_INDEX_TABLE)


async def search_index_exists(conn: AsyncConnection) -> bool:
    result = await conn.execute(
        text("SELECT COUNT(*) FROM sqlite_master WHERE type = 'table' AND name = :name"),
        {"name": SEARCH_INDEX_TABLE},
    )
    return bool(result.scalar_one())
