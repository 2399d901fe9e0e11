from cardcatalog.parsers.scryfall import (
    CardRow,
    NormalizeStats,
    SkipReason,
    normalize_card,
    normalize_cards,
    parse_price,
    parse_type_line,
)

__all__ = [
    "CardRow",
    "NormalizeStats",
    "SkipReason",
    "normalize_card",
    "normalize_cards",
    "parse_price",
    "parse_type_line",
]
