"""
Rate-limited Scryfall API client.

Scryfall asks clients to keep to roughly ten requests per second. Each
ScryfallClient tracks the time of its own last request and waits out the
remainder of `min_interval` before sending the next one, so independent
clients (for example in tests) never share throttling state.

A single instance is not safe to share between concurrent tasks: two
overlapping calls can both read the same last-request time.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from types import TracebackType
from typing import Any

import httpx

from cardcatalog.config import settings
from cardcatalog.models.failure import CardFetchError
from cardcatalog.models.scryfall import BulkDataEntry

logger = logging.getLogger(__name__)


class ScryfallClient:
    """Thin async wrapper over the Scryfall REST API."""

    def __init__(
        self,
        base_url: str | None = None,
        min_interval: float | None = None,
        http_client: httpx.AsyncClient | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.base_url = (base_url or settings.scryfall_api_url).rstrip("/")
        self.min_interval = (
            settings.scryfall_min_interval if min_interval is None else min_interval
        )
        self._owns_http_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            headers={
                "User-Agent": settings.scryfall_user_agent,
                "Accept": "application/json",
            },
            follow_redirects=True,
            timeout=settings.http_timeout,
        )
        self._clock = clock
        self._sleep = sleep
        self._last_request: float | None = None

    async def __aenter__(self) -> "ScryfallClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http_client:
            await self._http.aclose()

    async def _throttle(self) -> None:
        if self._last_request is not None:
            elapsed = self._clock() - self._last_request
            if elapsed < self.min_interval:
                await self._sleep(self.min_interval - elapsed)
        self._last_request = self._clock()

    async def request(self, url: str, **kwargs: Any) -> httpx.Response:
        """
        GET a URL after waiting for the rate limit.

        Relative URLs are resolved against `base_url`. Transport errors
        propagate as httpx.RequestError; status is not checked here.
        """
        if not url.startswith(("http://", "https://")):
            url = f"{self.base_url}/{url.lstrip('/')}"
        await self._throttle()
        logger.debug("GET %s", url)
        return await self._http.get(url, **kwargs)

    # --- Bulk data ---

    async def get_bulk_catalog(self) -> list[BulkDataEntry]:
        """
        Fetch the list of published bulk feeds.

        Raises:
            httpx.HTTPError: If the request fails or returns a non-2xx status
            ValueError: If the body is not a valid catalog (includes ValidationError)
        """
        response = await self.request("/bulk-data")
        response.raise_for_status()
        data = response.json()
        return [BulkDataEntry.model_validate(item) for item in data.get("data", [])]

    async def download(self, url: str) -> bytes:
        """
        Download a file fully into memory.

        Raises:
            httpx.HTTPError: If the request fails or returns a non-2xx status
        """
        response = await self.request(url, timeout=settings.download_timeout)
        response.raise_for_status()
        return response.content

    # --- Single cards ---

    async def _get_card(self, url: str, params: dict[str, str] | None = None) -> dict[str, Any]:
        try:
            response = await self.request(url, params=params)
        except httpx.RequestError as e:
            raise CardFetchError(None, detail=str(e)) from e
        if response.is_error:
            raise CardFetchError(response.status_code, detail=response.reason_phrase)
        try:
            card = response.json()
        except ValueError as e:
            raise CardFetchError(response.status_code, detail=f"Invalid JSON: {e}") from e
        if not isinstance(card, dict):
            raise CardFetchError(response.status_code, detail="Expected a JSON object")
        return card

    async def get_card_by_id(self, card_id: str) -> dict[str, Any]:
        """
        Fetch one printing by its Scryfall id.

        Raises:
            CardFetchError: On a transport error, non-2xx status or unreadable body
        """
        return await self._get_card(f"/cards/{card_id}")

    async def get_card_by_name(self, name: str, fuzzy: bool = True) -> dict[str, Any]:
        """
        Fetch a card by name, fuzzy or exact.

        Raises:
            CardFetchError: On a transport error or non-2xx status
        """
        param = "fuzzy" if fuzzy else "exact"
        return await self._get_card("/cards/named", params={param: name})

    async def search(self, query: str, page: int = 1) -> dict[str, Any]:
        """
        Run a Scryfall full-text search and return one result page.

        Raises:
            CardFetchError: On a transport error or non-2xx status
        """
        return await self._get_card("/cards/search", params={"q": query, "page": str(page)})

    async def autocomplete(self, query: str) -> list[str]:
        """Card name suggestions. Returns an empty list on any failure."""
        try:
            response = await self.request("/cards/autocomplete", params={"q": query})
        except httpx.RequestError as e:
            logger.warning("Autocomplete request failed: %s", e)
            return []
        if response.is_error:
            return []
        try:
            names: list[str] = response.json().get("data", [])
        except (ValueError, AttributeError) as e:
            logger.warning("Autocomplete returned an unreadable body: %s", e)
            return []
        return names
