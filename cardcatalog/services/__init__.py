"""
Catalog services.

Import pipeline, search and lookup over the local card catalog.
"""

from cardcatalog.services.bulk_import import ImportSummary, run_bulk_import
from cardcatalog.services.card_lookup import get_or_fetch_card, get_or_fetch_card_by_name
from cardcatalog.services.card_search import (
    IndexHit,
    IndexUnavailable,
    SearchFilters,
    SearchPage,
    build_match_query,
    identify_cards,
    search_cards,
)

__all__ = [
    "ImportSummary",
    "IndexHit",
    "IndexUnavailable",
    "SearchFilters",
    "SearchPage",
    "build_match_query",
    "get_or_fetch_card",
    "get_or_fetch_card_by_name",
    "identify_cards",
    "run_bulk_import",
    "search_cards",
]
