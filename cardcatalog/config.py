from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="CARDCATALOG_")

    app_name: str = "cardcatalog"
    debug: bool = False

    database_url: str = "sqlite+aiosqlite:///data/cards.db"
    data_dir: Path = Path("data")

    scryfall_api_url: str = "https://api.scryfall.com"
    scryfall_user_agent: str = "cardcatalog/1.0"

    # Scryfall asks for at most ~10 requests per second
    scryfall_min_interval: float = 0.1

    http_timeout: float = 30.0
    download_timeout: float = 300.0

    import_batch_size: int = 1000

    # Ceiling for an import triggered over HTTP
    import_timeout_seconds: float = 300.0


settings = Settings()


# =============================================================================
# SEARCH LIMITS
# =============================================================================

DEFAULT_PAGE_SIZE = 40
MAX_PAGE_SIZE = 100

# Identification returns a short candidate list, not a page
IDENTIFY_LIMIT = 20
