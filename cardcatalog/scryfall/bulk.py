"""
Scryfall bulk feed locator and fetcher.

The bulk-data catalog lists the periodically published snapshots; we want
the "default_cards" one, which holds every printing in English (or the
printed language where no English printing exists).

Bulk data: https://scryfall.com/docs/api/bulk-data
"""

import logging
from pathlib import Path

import httpx

from cardcatalog.config import settings
from cardcatalog.models.failure import CatalogUnavailable, DownloadFailed, FeedNotFound
from cardcatalog.scryfall.client import ScryfallClient

logger = logging.getLogger(__name__)

DEFAULT_FEED_TYPE = "default_cards"
BULK_FILE_NAME = "default-cards.json"


def default_bulk_path(data_dir: Path | None = None) -> Path:
    """Where the downloaded feed is kept between runs."""
    return (data_dir or settings.data_dir) / "bulk" / BULK_FILE_NAME


async def locate_bulk_feed(client: ScryfallClient, feed_type: str = DEFAULT_FEED_TYPE) -> str:
    """
    Resolve the download URL of the current bulk feed.

    Returns:
        The feed's download URI

    Raises:
        CatalogUnavailable: If the catalog cannot be fetched
        FeedNotFound: If no catalog entry has the requested type
    """
    try:
        entries = await client.get_bulk_catalog()
    except httpx.HTTPStatusError as e:
        raise CatalogUnavailable(e.response.status_code, detail=str(e)) from e
    except httpx.HTTPError as e:
        raise CatalogUnavailable(detail=str(e)) from e
    except (ValueError, AttributeError) as e:
        # 200 with a body that is not JSON, or not shaped like the catalog
        raise CatalogUnavailable(detail=f"Invalid bulk data catalog: {e}") from e

    for entry in entries:
        if entry.type == feed_type:
            logger.info("Found %s feed updated at %s", feed_type, entry.updated_at)
            return entry.download_uri

    raise FeedNotFound(feed_type)


async def download_bulk_feed(
    client: ScryfallClient, url: str, output_path: Path | None = None
) -> Path:
    """
    Download the bulk feed and store it locally, replacing any previous copy.

    The payload is buffered completely before anything is written, so a
    failed download leaves the previous file untouched.

    Args:
        client: Scryfall client
        url: Download URI from `locate_bulk_feed`
        output_path: Where to save the file. Defaults to data/bulk/default-cards.json

    Returns:
        Path to the downloaded file.

    Raises:
        DownloadFailed: On a non-2xx response (carries the status) or transport error
    """
    if output_path is None:
        output_path = default_bulk_path()

    logger.info("Downloading Scryfall bulk data...")
    try:
        payload = await client.download(url)
    except httpx.HTTPStatusError as e:
        raise DownloadFailed(e.response.status_code, detail=str(e)) from e
    except httpx.HTTPError as e:
        raise DownloadFailed(detail=str(e)) from e

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(payload)
    logger.info("Downloaded %.1fMB to %s", len(payload) / 1024 / 1024, output_path)

    return output_path
