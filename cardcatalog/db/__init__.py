from cardcatalog.db.database import get_session, init_db
from cardcatalog.db.operations import (
    count_cards,
    get_card,
    get_cards_by_name,
    upsert_card,
    upsert_cards,
)
from cardcatalog.db.search_index import (
    create_search_index,
    drop_search_index,
    rebuild_search_index,
    search_index_exists,
)

__all__ = [
    "count_cards",
    "create_search_index",
    "drop_search_index",
    "get_card",
    "get_cards_by_name",
    "get_session",
    "init_db",
    "rebuild_search_index",
    "search_index_exists",
    "upsert_card",
    "upsert_cards",
]
