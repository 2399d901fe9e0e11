from cardcatalog.scryfall.bulk import (
    DEFAULT_FEED_TYPE,
    default_bulk_path,
    download_bulk_feed,
    locate_bulk_feed,
)
from cardcatalog.scryfall.client import ScryfallClient

__all__ = [
    "DEFAULT_FEED_TYPE",
    "ScryfallClient",
    "default_bulk_path",
    "download_bulk_feed",
    "locate_bulk_feed",
]
