"""
Card API endpoints.

The two interfaces the rest of the application uses: text search and
lookup by printing id. Identification takes a card name already read off
an image; capturing and reading the image happens elsewhere.
"""

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from cardcatalog.api.dependencies import get_scryfall_client
from cardcatalog.config import DEFAULT_PAGE_SIZE, IDENTIFY_LIMIT, MAX_PAGE_SIZE
from cardcatalog.db.database import get_session
from cardcatalog.scryfall.client import ScryfallClient
from cardcatalog.services.card_lookup import get_or_fetch_card
from cardcatalog.services.card_search import SearchFilters, identify_cards, search_cards

router = APIRouter(prefix="/cards", tags=["cards"])


class CardResponse(BaseModel):
    """A stored card row."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    oracle_id: str | None = None
    name: str
    mana_cost: str | None = None
    cmc: float | None = None
    oracle_text: str | None = None
    types: str | None = None
    subtypes: str | None = None
    supertypes: str | None = None
    type_line: str | None = None
    colors: str | None = None
    color_identity: str | None = None
    set_code: str | None = None
    set_name: str | None = None
    collector_number: str | None = None
    rarity: str | None = None
    image_uri: str | None = None
    image_uri_small: str | None = None
    multiverse_id: int | None = None
    mtgo_id: int | None = None
    price_card_kingdom: float | None = None
    price_tcg_player: float | None = None
    price_star_city: float | None = None
    price_card_hoarder: float | None = None
    price_card_market: float | None = None
    legalities: str | None = None
    power: str | None = None
    toughness: str | None = None
    loyalty: str | None = None
    keywords: str | None = None
    released_at: str | None = None
    updated_at: str | None = None


class CardListResponse(BaseModel):
    """One page of search results."""

    cards: list[CardResponse]
    total: int
    page: int
    total_pages: int


class IdentifyRequest(BaseModel):
    """Card name as read from a photo."""

    name: str = Field(..., max_length=200)
    set_code: str | None = None


class IdentifyResponse(BaseModel):
    identified_name: str
    cards: list[CardResponse]


def _split_colors(colors: str | None) -> tuple[str, ...]:
    if not colors:
        return ()
    return tuple(c.strip() for c in colors.split(",") if c.strip())


@router.get("", response_model=CardListResponse)
async def list_cards(
    session: Annotated[AsyncSession, Depends(get_session)],
    q: str | None = None,
    set_code: Annotated[str | None, Query(alias="set")] = None,
    rarity: str | None = None,
    type_filter: Annotated[str | None, Query(alias="type")] = None,
    colors: Annotated[str | None, Query(description="Comma-separated, e.g. W,U")] = None,
    format_name: Annotated[str | None, Query(alias="format", pattern=r"^[a-z0-9_]+$")] = None,
    sort: Literal["name", "cmc", "price", "set"] = "name",
    order: Literal["asc", "desc"] = "asc",
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=MAX_PAGE_SIZE)] = DEFAULT_PAGE_SIZE,
) -> CardListResponse:
    """
    Search the catalog.

    Without `q`, lists cards matching the filters.
    """
    filters = SearchFilters(
        set_code=set_code,
        rarity=rarity,
        type=type_filter,
        colors=_split_colors(colors),
        format=format_name,
    )
    result = await search_cards(
        session,
        query=q or None,
        filters=filters,
        sort=sort,
        order=order,
        page=page,
        limit=limit,
    )
    return CardListResponse(
        cards=[CardResponse.model_validate(card) for card in result.cards],
        total=result.total,
        page=result.page,
        total_pages=result.total_pages,
    )


@router.post("/identify", response_model=IdentifyResponse)
async def identify(
    request: IdentifyRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> IdentifyResponse:
    """Match a recognized card name against the catalog."""
    name = request.name.strip()
    if not name:
        return IdentifyResponse(identified_name="", cards=[])

    cards = await identify_cards(
        session,
        name,
        filters=SearchFilters(set_code=request.set_code),
        limit=IDENTIFY_LIMIT,
    )
    return IdentifyResponse(
        identified_name=name,
        cards=[CardResponse.model_validate(card) for card in cards],
    )


@router.get("/{card_id}", response_model=CardResponse)
async def get_card_by_id(
    card_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
    client: Annotated[ScryfallClient, Depends(get_scryfall_client)],
) -> CardResponse:
    """
    Get a printing by id.

    Falls back to Scryfall when the card is not stored locally and caches
    the result. Returns 404 if Scryfall doesn't know it either.
    """
    card = await get_or_fetch_card(session, client, card_id)
    return CardResponse.model_validate(card)
