from cardcatalog.api.cards import router as cards_router
from cardcatalog.api.health import router as health_router
from cardcatalog.api.imports import router as import_router

__all__ = [
    "cards_router",
    "health_router",
    "import_router",
]
