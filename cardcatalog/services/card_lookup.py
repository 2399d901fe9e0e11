"""
Single-card lookup with write-through fill.

Reads come from the local catalog. On a miss the card is fetched from
Scryfall, normalized with the same rules as the bulk import, stored, and
returned. A fetched record the normalizer would skip (no oracle id, or a
token/emblem/art layout) is reported as not found and never stored.
"""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from cardcatalog.db.operations import get_card, get_cards_by_name, upsert_card
from cardcatalog.models.db import CardDB
from cardcatalog.models.failure import CardFetchError, CardNotFound
from cardcatalog.parsers.scryfall import SkipReason, normalize_card
from cardcatalog.scryfall.client import ScryfallClient

logger = logging.getLogger(__name__)


async def _store_fetched(session: AsyncSession, raw: dict[str, Any], key: str) -> CardDB:
    result = normalize_card(raw)
    if isinstance(result, SkipReason):
        logger.info("Not caching %s from Scryfall: %s", key, result.value)
        raise CardNotFound(key)

    card = await upsert_card(session, result)
    await session.commit()
    logger.info("Cached %s (%s) from Scryfall", card.name, card.id)
    return card


async def get_or_fetch_card(
    session: AsyncSession, client: ScryfallClient, card_id: str
) -> CardDB:
    """
    Get a printing by id, fetching it from Scryfall if it is not stored.

    Raises:
        CardNotFound: If Scryfall does not know the id, or it is not a playable card
        CardFetchError: If Scryfall could not be reached
    """
    card = await get_card(session, card_id)
    if card is not None:
        return card

    try:
        raw = await client.get_card_by_id(card_id)
    except CardFetchError as e:
        if e.is_not_found:
            raise CardNotFound(card_id) from e
        raise

    return await _store_fetched(session, raw, card_id)


async def get_or_fetch_card_by_name(
    session: AsyncSession, client: ScryfallClient, name: str, fuzzy: bool = True
) -> CardDB:
    """
    Get a printing by exact name, fetching it from Scryfall if none is stored.

    Scryfall's named lookup picks one printing; with `fuzzy` it tolerates
    misspellings.

    Raises:
        CardNotFound: If Scryfall finds no match, or it is not a playable card
        CardFetchError: If Scryfall could not be reached
    """
    local = await get_cards_by_name(session, name, limit=1)
    if local:
        return local[0]

    try:
        raw = await client.get_card_by_name(name, fuzzy=fuzzy)
    except CardFetchError as e:
        if e.is_not_found:
            raise CardNotFound(name) from e
        raise

    return await _store_fetched(session, raw, name)
