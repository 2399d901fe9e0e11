"""
Scryfall card record as it appears in the bulk feed and the card API.

A record is either single-faced, with every field at the top level, or
multi-faced, where some fields are missing at the top level and live on the
ordered `card_faces` list instead. `CardShape` names the variant so face
fallback is resolved in one place rather than by scattered presence checks.

Unknown fields are ignored: the feed grows new keys over time.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CardShape(str, Enum):
    """Which variant of record we are looking at."""

    SINGLE_FACED = "single_faced"
    MULTI_FACED = "multi_faced"


class ImageUris(BaseModel):
    model_config = ConfigDict(extra="ignore")

    small: str | None = None
    normal: str | None = None
    large: str | None = None


class CardFace(BaseModel):
    """One face of a multi-faced card."""

    model_config = ConfigDict(extra="ignore")

    name: str | None = None
    mana_cost: str | None = None
    oracle_text: str | None = None
    type_line: str | None = None
    image_uris: ImageUris | None = None


class Prices(BaseModel):
    """
    Prices arrive as decimal strings (or null) and are parsed later.

    Bare numbers are accepted and any other value becomes None, so an odd
    price never rejects the card.
    """

    model_config = ConfigDict(extra="ignore")

    usd: str | float | None = None
    usd_foil: str | float | None = None
    eur: str | float | None = None
    tix: str | float | None = None

    @field_validator("usd", "usd_foil", "eur", "tix", mode="before")
    @classmethod
    def drop_unusable_price(cls, value: Any) -> Any:
        if isinstance(value, bool) or not isinstance(value, str | int | float):
            return None
        return value


class ScryfallCard(BaseModel):
    """
    One printing from Scryfall.

    The top-level text and image fields are the primary face. `card_faces`
    holds the sub-faces, in printed order, for multi-faced layouts.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    oracle_id: str | None = None
    name: str
    layout: str | None = None

    # Primary face
    mana_cost: str | None = None
    oracle_text: str | None = None
    type_line: str | None = None
    image_uris: ImageUris | None = None

    # Sub-faces
    card_faces: list[CardFace] = Field(default_factory=list)

    cmc: float | None = None
    colors: list[str] | None = None
    color_identity: list[str] | None = None

    set: str | None = None
    set_name: str | None = None
    collector_number: str | None = None
    rarity: str | None = None
    released_at: str | None = None

    multiverse_ids: list[int] | None = None
    mtgo_id: int | None = None

    prices: Prices | None = None
    legalities: dict[str, str] | None = None

    power: str | None = None
    toughness: str | None = None
    loyalty: str | None = None
    keywords: list[str] | None = None

    @property
    def shape(self) -> CardShape:
        return CardShape.MULTI_FACED if self.card_faces else CardShape.SINGLE_FACED

    @property
    def first_face(self) -> CardFace | None:
        if self.shape is CardShape.MULTI_FACED:
            return self.card_faces[0]
        return None


class BulkDataEntry(BaseModel):
    """An entry in the bulk-data catalog (`GET /bulk-data`)."""

    model_config = ConfigDict(extra="ignore")

    type: str
    download_uri: str
    name: str | None = None
    updated_at: str | None = None
    size: int | None = None
