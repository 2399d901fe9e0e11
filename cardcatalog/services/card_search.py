"""
Card search over the local catalog.

Two consumers share one fallback strategy:

- `search_cards` backs general card search. Tier 1 is an FTS5 prefix
  match joined back to `cards`; if the index cannot be used, tier 2 is a
  case-insensitive substring scan of the base table.
- `identify_cards` backs visual identification, which hands us a card
  name read off an image. It tries an exact name match first, then tier 1,
  then tier 2 when tier 1 is unavailable or finds nothing. Rows whose name
  equals the input (ignoring case) sort first.

Tier 1 reports an unusable index as an `IndexUnavailable` value instead of
raising, so the fallback is an ordinary branch.
"""

import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import ColumnElement, case, column, func, literal_column, or_, select, table, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cardcatalog.config import DEFAULT_PAGE_SIZE, IDENTIFY_LIMIT, MAX_PAGE_SIZE
from cardcatalog.db.search_index import SEARCH_INDEX_TABLE
from cardcatalog.models.db import CardDB

logger = logging.getLogger(__name__)

_NON_WORD = re.compile(r"[^\w\s]")
_FORMAT_NAME = re.compile(r"^[a-z0-9_]+$")

_search_index = table(SEARCH_INDEX_TABLE, column("rowid"))
_card_rowid = literal_column(f"{CardDB.__tablename__}.rowid")

SORT_COLUMNS: dict[str, Any] = {
    "name": CardDB.name,
    "cmc": CardDB.cmc,
    "price": CardDB.price_tcg_player,
    "set": CardDB.set_code,
}


@dataclass(frozen=True)
class SearchFilters:
    """
    Structured filters, combined with AND.

    Attributes:
        set_code: Exact set code
        rarity: Exact rarity
        type: Substring of the comma-joined types
        colors: Each listed color must be present
        format: Card must be "legal" in this format
    """

    set_code: str | None = None
    rarity: str | None = None
    type: str | None = None
    colors: tuple[str, ...] = ()
    format: str | None = None

    def __post_init__(self) -> None:
        if self.format is not None and not _FORMAT_NAME.match(self.format):
            raise ValueError(f"Invalid format: {self.format}")


@dataclass(frozen=True)
class IndexHit:
    """Tier 1 ran; `total` is None when the caller did not ask for a count."""

    rows: list[CardDB]
    total: int | None = None


@dataclass(frozen=True)
class IndexUnavailable:
    """Tier 1 could not run, typically because `cards_fts` does not exist."""

    reason: str


IndexResult = IndexHit | IndexUnavailable


@dataclass
class SearchPage:
    """One page of search results."""

    cards: list[CardDB] = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit)


def build_match_query(query: str) -> str | None:
    """
    Turn free text into an FTS5 prefix query.

    Punctuation is stripped and every remaining word becomes a prefix term,
    so "Lightning Bo" matches "Lightning Bolt". Each word is quoted so that
    AND, OR, NOT and NEAR are searched for rather than read as operators.
    Returns None when no word is left, which must produce no results rather
    than match everything.
    """
    words = _NON_WORD.sub("", query).split()
    if not words:
        return None
    return " ".join(f'"{word}"*' for word in words)


def filter_conditions(filters: SearchFilters) -> list[ColumnElement[bool]]:
    conditions: list[ColumnElement[bool]] = []
    if filters.set_code:
        conditions.append(CardDB.set_code == filters.set_code)
    if filters.rarity:
        conditions.append(CardDB.rarity == filters.rarity)
    if filters.type:
        conditions.append(CardDB.types.contains(filters.type, autoescape=True))
    for color in filters.colors:
        conditions.append(CardDB.colors.contains(color, autoescape=True))
    if filters.format:
        conditions.append(
            func.json_extract(CardDB.legalities, f"$.{filters.format}") == "legal"
        )
    return conditions


def _order_by(sort: str, order: str) -> list[Any]:
    sort_column = SORT_COLUMNS.get(sort, CardDB.name)
    direction = sort_column.desc() if order == "desc" else sort_column.asc()
    return [direction, CardDB.id.asc()]


def _exact_name_first(name: str) -> ColumnElement[int]:
    return case((func.lower(CardDB.name) == name.lower(), 0), else_=1)


async def match_index(
    session: AsyncSession,
    match_query: str,
    conditions: list[ColumnElement[bool]],
    order_by: list[Any],
    limit: int,
    offset: int = 0,
    with_total: bool = True,
) -> IndexResult:
    """Tier 1: FTS5 match joined back to `cards`, with extra conditions."""
    match = text(f"{SEARCH_INDEX_TABLE} MATCH :match").bindparams(match=match_query)

    rows_query = (
        select(CardDB)
        .join(_search_index, _search_index.c.rowid == _card_rowid)
        .where(match, *conditions)
        .order_by(*order_by)
        .limit(limit)
        .offset(offset)
    )

    try:
        total = None
        if with_total:
            count_query = (
                select(func.count())
                .select_from(CardDB)
                .join(_search_index, _search_index.c.rowid == _card_rowid)
                .where(match, *conditions)
            )
            total = int((await session.execute(count_query)).scalar_one())
        rows = list((await session.execute(rows_query)).scalars().all())
    except SQLAlchemyError as e:
        logger.debug("Search index unavailable: %s", e)
        return IndexUnavailable(reason=str(e))

    return IndexHit(rows=rows, total=total)


async def _scan(
    session: AsyncSession,
    conditions: list[ColumnElement[bool]],
    order_by: list[Any],
    limit: int,
    offset: int = 0,
) -> tuple[int, list[CardDB]]:
    """Tier 2: plain query against `cards`."""
    count_query = select(func.count()).select_from(CardDB).where(*conditions)
    total = int((await session.execute(count_query)).scalar_one())

    rows_query = select(CardDB).where(*conditions).order_by(*order_by).limit(limit).offset(offset)
    rows = list((await session.execute(rows_query)).scalars().all())
    return total, rows


async def search_cards(
    session: AsyncSession,
    query: str | None = None,
    filters: SearchFilters | None = None,
    sort: str = "name",
    order: str = "asc",
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
) -> SearchPage:
    """
    General card search.

    Args:
        session: Database session
        query: Free text; None lists every card matching the filters
        filters: Structured filters applied in both tiers
        sort: One of name, cmc, price, set (anything else sorts by name)
        order: asc or desc
        page: 1-based page number
        limit: Page size, clamped to 1..100

    Returns:
        A SearchPage. A query with no searchable words yields an empty page.
    """
    filters = filters or SearchFilters()
    limit = max(1, min(limit, MAX_PAGE_SIZE))
    page = max(1, page)
    offset = (page - 1) * limit

    conditions = filter_conditions(filters)
    order_by = _order_by(sort, order)

    if query is not None:
        match_query = build_match_query(query)
        if match_query is None:
            return SearchPage(page=page, limit=limit)

        result = await match_index(session, match_query, conditions, order_by, limit, offset)
        if isinstance(result, IndexHit):
            return SearchPage(cards=result.rows, total=result.total or 0, page=page, limit=limit)

        logger.info("Falling back to substring search for %r", query)
        needle = query.strip()
        conditions.append(
            or_(
                CardDB.name.icontains(needle, autoescape=True),
                CardDB.type_line.icontains(needle, autoescape=True),
                CardDB.oracle_text.icontains(needle, autoescape=True),
            )
        )

    total, rows = await _scan(session, conditions, order_by, limit, offset)
    return SearchPage(cards=rows, total=total, page=page, limit=limit)


async def identify_cards(
    session: AsyncSession,
    name: str,
    filters: SearchFilters | None = None,
    limit: int = IDENTIFY_LIMIT,
) -> list[CardDB]:
    """
    Candidate printings for a card name read off an image.

    Order of attempts: exact name equality, tier 1, tier 2. Tier 2 runs
    when tier 1 is unavailable or finds nothing.
    """
    name = name.strip()
    if not name:
        return []

    conditions = filter_conditions(filters or SearchFilters())

    exact = await session.execute(
        select(CardDB)
        .where(CardDB.name == name, *conditions)
        .order_by(CardDB.set_code, CardDB.id)
        .limit(limit)
    )
    rows = list(exact.scalars().all())
    if rows:
        return rows

    order_by = [_exact_name_first(name), CardDB.name.asc(), CardDB.id.asc()]

    match_query = build_match_query(name)
    if match_query is not None:
        result = await match_index(
            session, match_query, conditions, order_by, limit, with_total=False
        )
        if isinstance(result, IndexHit) and result.rows:
            return result.rows
        if isinstance(result, IndexUnavailable):
            logger.info("Search index unavailable, scanning names for %r", name)

    _, rows = await _scan(
        session,
        [*conditions, CardDB.name.icontains(name, autoescape=True)],
        order_by,
        limit,
    )
    return rows
