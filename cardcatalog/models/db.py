"""
SQLAlchemy ORM models for persistent storage.

One row per printing. The `cards_fts` full-text index is not mapped here:
it is derived from this table and managed by `cardcatalog.db.search_index`.
"""

from sqlalchemy import Float, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class CardDB(Base):
    """
    A single card printing.

    `id` is the Scryfall printing id and is stable across imports, so a
    re-import replaces rows instead of adding them. Collection and deck
    entries elsewhere hold references to it, so rows are never deleted.
    """

    __tablename__ = "cards"
    __table_args__ = (
        Index("idx_cards_name", "name"),
        Index("idx_cards_oracle_id", "oracle_id"),
        Index("idx_cards_set_code", "set_code"),
        Index("idx_cards_colors", "colors"),
        Index("idx_cards_type_line", "type_line"),
        Index("idx_cards_cmc", "cmc"),
        Index("idx_cards_rarity", "rarity"),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True)
    oracle_id: Mapped[str | None] = mapped_column(String, nullable=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    mana_cost: Mapped[str | None] = mapped_column(String, nullable=True)
    cmc: Mapped[float | None] = mapped_column(Float, nullable=True)
    oracle_text: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Comma-joined tokens parsed from type_line
    types: Mapped[str | None] = mapped_column(String, nullable=True)
    subtypes: Mapped[str | None] = mapped_column(String, nullable=True)
    supertypes: Mapped[str | None] = mapped_column(String, nullable=True)
    type_line: Mapped[str | None] = mapped_column(String, nullable=True)

    colors: Mapped[str | None] = mapped_column(String, nullable=True)
    color_identity: Mapped[str | None] = mapped_column(String, nullable=True)

    # Printing metadata
    set_code: Mapped[str | None] = mapped_column(String, nullable=True)
    set_name: Mapped[str | None] = mapped_column(String, nullable=True)
    collector_number: Mapped[str | None] = mapped_column(String, nullable=True)
    rarity: Mapped[str | None] = mapped_column(String, nullable=True)
    released_at: Mapped[str | None] = mapped_column(String, nullable=True)

    image_uri: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_uri_small: Mapped[str | None] = mapped_column(Text, nullable=True)

    multiverse_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    mtgo_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Market prices
    price_card_kingdom: Mapped[float | None] = mapped_column(Float, nullable=True)
    price_tcg_player: Mapped[float | None] = mapped_column(Float, nullable=True)
    price_star_city: Mapped[float | None] = mapped_column(Float, nullable=True)
    price_card_hoarder: Mapped[float | None] = mapped_column(Float, nullable=True)
    price_card_market: Mapped[float | None] = mapped_column(Float, nullable=True)

    # JSON-encoded text: format -> legality, and a list of keywords
    legalities: Mapped[str | None] = mapped_column(Text, nullable=True)
    keywords: Mapped[str | None] = mapped_column(Text, nullable=True)

    power: Mapped[str | None] = mapped_column(String, nullable=True)
    toughness: Mapped[str | None] = mapped_column(String, nullable=True)
    loyalty: Mapped[str | None] = mapped_column(String, nullable=True)

    # ISO-8601 timestamp of the last import write
    updated_at: Mapped[str | None] = mapped_column(String, nullable=True)

    def __repr__(self) -> str:
        return f"<CardDB(id={self.id}, name={self.name}, set={self.set_code})>"
