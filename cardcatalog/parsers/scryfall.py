"""
Scryfall record normalizer.

Maps one Scryfall card record onto the flat `cards` row shape, or decides
that the record must not be stored at all.

Bulk data: https://scryfall.com/docs/api/bulk-data
"""

import json
import math
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypedDict

from pydantic import ValidationError

from cardcatalog.models.scryfall import ImageUris, ScryfallCard

# Presentation-only layouts: not playable cards
EXCLUDED_LAYOUTS = frozenset({"art_series", "token", "double_faced_token", "emblem"})

KNOWN_SUPERTYPES = ("Legendary", "Basic", "Snow", "World", "Ongoing")
KNOWN_TYPES = (
    "Creature",
    "Artifact",
    "Enchantment",
    "Instant",
    "Sorcery",
    "Planeswalker",
    "Land",
    "Battle",
    "Tribal",
    "Kindred",
)

TYPE_LINE_SEPARATOR = "—"
FACE_TEXT_SEPARATOR = "\n---\n"


class SkipReason(str, Enum):
    """Why a record was not turned into a row."""

    MISSING_ORACLE_ID = "missing_oracle_id"
    EXCLUDED_LAYOUT = "excluded_layout"
    MALFORMED = "malformed"


class CardRow(TypedDict):
    """A normalized `cards` row, minus the `updated_at` write stamp."""

    id: str
    oracle_id: str | None
    name: str
    mana_cost: str | None
    cmc: float | None
    oracle_text: str | None
    types: str
    subtypes: str
    supertypes: str
    type_line: str | None
    colors: str | None
    color_identity: str | None
    set_code: str | None
    set_name: str | None
    collector_number: str | None
    rarity: str | None
    image_uri: str | None
    image_uri_small: str | None
    multiverse_id: int | None
    mtgo_id: int | None
    price_card_kingdom: float | None
    price_tcg_player: float | None
    price_star_city: float | None
    price_card_hoarder: float | None
    price_card_market: float | None
    legalities: str | None
    power: str | None
    toughness: str | None
    loyalty: str | None
    keywords: str | None
    released_at: str | None


class TypeLineParts(TypedDict):
    supertypes: str
    types: str
    subtypes: str


def parse_type_line(type_line: str | None) -> TypeLineParts:
    """
    Split a type line into comma-joined supertypes, types and subtypes.

    "Legendary Creature — Human Wizard" gives supertypes "Legendary",
    types "Creature" and subtypes "Human,Wizard". Words of the main segment
    that are neither a known supertype nor a known type are dropped.
    """
    if not type_line:
        return TypeLineParts(supertypes="", types="", subtypes="")

    # Only the first two segments count; a second dash belongs to a back face
    segments = type_line.split(TYPE_LINE_SEPARATOR)
    main_words = segments[0].split()
    sub_part = segments[1] if len(segments) > 1 else ""

    return TypeLineParts(
        supertypes=",".join(w for w in main_words if w in KNOWN_SUPERTYPES),
        types=",".join(w for w in main_words if w in KNOWN_TYPES),
        subtypes=",".join(sub_part.split()),
    )


def parse_price(value: str | float | None) -> float | None:
    """
    Parse a Scryfall decimal price string.

    Absent or unparseable prices are None, never 0.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        price = float(value)
    except (TypeError, ValueError):
        return None
    return price if math.isfinite(price) else None


def _join_tokens(values: list[str] | None) -> str | None:
    if not values:
        return None
    return ",".join(values)


def _to_json(value: Any) -> str | None:
    if value is None:
        return None
    return json.dumps(value)


def _image(card: ScryfallCard, size: str) -> str | None:
    """Top-level image of the given size, else the first face's."""
    candidates: list[ImageUris | None] = [card.image_uris]
    face = card.first_face
    if face is not None:
        candidates.append(face.image_uris)
    for uris in candidates:
        url = getattr(uris, size, None) if uris is not None else None
        if url:
            return str(url)
    return None


def _mana_cost(card: ScryfallCard) -> str | None:
    if card.mana_cost:
        return card.mana_cost
    face = card.first_face
    return (face.mana_cost or None) if face is not None else None


def _oracle_text(card: ScryfallCard) -> str | None:
    if card.oracle_text:
        return card.oracle_text
    if not card.card_faces:
        return None
    joined = FACE_TEXT_SEPARATOR.join(face.oracle_text or "" for face in card.card_faces)
    return joined or None


def check_skip(raw: Mapping[str, Any]) -> SkipReason | None:
    """Apply the skip rules, in order, to a raw record."""
    if not raw.get("oracle_id"):
        return SkipReason.MISSING_ORACLE_ID
    if raw.get("layout") in EXCLUDED_LAYOUTS:
        return SkipReason.EXCLUDED_LAYOUT
    return None


def card_to_row(card: ScryfallCard) -> CardRow:
    """Flatten a validated record into a row. Does not apply skip rules."""
    type_parts = parse_type_line(card.type_line)
    prices = card.prices

    return CardRow(
        id=card.id,
        oracle_id=card.oracle_id or None,
        name=card.name,
        mana_cost=_mana_cost(card),
        cmc=card.cmc,
        oracle_text=_oracle_text(card),
        types=type_parts["types"],
        subtypes=type_parts["subtypes"],
        supertypes=type_parts["supertypes"],
        type_line=card.type_line or None,
        colors=_join_tokens(card.colors),
        color_identity=_join_tokens(card.color_identity),
        set_code=card.set,
        set_name=card.set_name,
        collector_number=card.collector_number,
        rarity=card.rarity,
        image_uri=_image(card, "normal"),
        image_uri_small=_image(card, "small"),
        multiverse_id=card.multiverse_ids[0] if card.multiverse_ids else None,
        mtgo_id=card.mtgo_id or None,
        # Scryfall has no Card Kingdom or Star City Games prices
        price_card_kingdom=None,
        price_tcg_player=parse_price(prices.usd) if prices else None,
        price_star_city=None,
        price_card_hoarder=parse_price(prices.tix) if prices else None,
        price_card_market=parse_price(prices.eur) if prices else None,
        legalities=_to_json(card.legalities),
        power=card.power or None,
        toughness=card.toughness or None,
        loyalty=card.loyalty or None,
        keywords=_to_json(card.keywords),
        released_at=card.released_at or None,
    )


def normalize_card(raw: Mapping[str, Any]) -> CardRow | SkipReason:
    """
    Normalize one external record.

    Returns the row, or the reason the record is skipped. Pure: no I/O and
    no clock, so the same record always yields the same row.
    """
    if not isinstance(raw, Mapping):
        return SkipReason.MALFORMED

    reason = check_skip(raw)
    if reason is not None:
        return reason

    try:
        card = ScryfallCard.model_validate(raw)
    except ValidationError:
        return SkipReason.MALFORMED

    return card_to_row(card)


@dataclass
class NormalizeStats:
    """Counts collected while normalizing a feed."""

    seen: int = 0
    normalized: int = 0
    skipped: dict[SkipReason, int] = field(default_factory=dict)

    @property
    def skipped_total(self) -> int:
        return sum(self.skipped.values())


def normalize_cards(
    records: Iterable[Mapping[str, Any]], stats: NormalizeStats | None = None
) -> Iterator[CardRow]:
    """
    Lazily normalize a sequence of records, dropping skipped ones.

    Skip counts are accumulated on `stats` when given.
    """
    if stats is None:
        stats = NormalizeStats()

    for raw in records:
        stats.seen += 1
        result = normalize_card(raw)
        if isinstance(result, SkipReason):
            stats.skipped[result] = stats.skipped.get(result, 0) + 1
            continue
        stats.normalized += 1
        yield result
