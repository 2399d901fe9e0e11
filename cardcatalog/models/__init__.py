from cardcatalog.models.db import Base, CardDB
from cardcatalog.models.failure import (
    ApiResponse,
    CardFetchError,
    CardNotFound,
    CatalogUnavailable,
    DownloadFailed,
    FailureDetail,
    FailureKind,
    FeedNotFound,
    KnownError,
    OutcomeType,
    SourceUnavailable,
)
from cardcatalog.models.scryfall import (
    BulkDataEntry,
    CardFace,
    CardShape,
    ImageUris,
    Prices,
    ScryfallCard,
)

__all__ = [
    "ApiResponse",
    "Base",
    "BulkDataEntry",
    "CardDB",
    "CardFace",
    "CardFetchError",
    "CardNotFound",
    "CardShape",
    "CatalogUnavailable",
    "DownloadFailed",
    "FailureDetail",
    "FailureKind",
    "FeedNotFound",
    "ImageUris",
    "KnownError",
    "OutcomeType",
    "Prices",
    "ScryfallCard",
    "SourceUnavailable",
]
