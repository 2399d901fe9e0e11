"""
Import trigger endpoint.

Runs the full bulk import inside the request. Only one import may be in
flight per process; a second request gets 409 instead of racing the first.
The run is bounded by `settings.import_timeout_seconds`. A timed-out run is
reported as failed, but batches committed before the timeout stay applied
until the next import replaces them.
"""

import asyncio
import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from cardcatalog.api.dependencies import get_scryfall_client
from cardcatalog.config import settings
from cardcatalog.models.failure import FailureKind, KnownError
from cardcatalog.scryfall.client import ScryfallClient
from cardcatalog.services.bulk_import import run_bulk_import

logger = logging.getLogger(__name__)

router = APIRouter(tags=["import"])

_import_lock = asyncio.Lock()


class ImportResponse(BaseModel):
    """Result of an import run."""

    success: bool = True
    parsed: int
    written: int
    skipped: dict[str, int] = Field(default_factory=dict)
    total_cards: int


@router.post("/import", response_model=ImportResponse)
async def trigger_import(
    client: Annotated[ScryfallClient, Depends(get_scryfall_client)],
) -> ImportResponse:
    """Download the current Scryfall feed and import it."""
    if _import_lock.locked():
        raise KnownError(
            kind=FailureKind.IMPORT_IN_PROGRESS,
            message="An import is already running",
            suggestion="Wait for the running import to finish.",
            status_code=409,
        )

    async with _import_lock:
        try:
            summary = await asyncio.wait_for(
                run_bulk_import(client=client),
                timeout=settings.import_timeout_seconds,
            )
        except TimeoutError as e:
            logger.error("Import timed out after %.0fs", settings.import_timeout_seconds)
            raise KnownError(
                kind=FailureKind.IMPORT_TIMEOUT,
                message="Import timed out",
                detail="Some batches may have been written.",
                suggestion="Run the import again to complete it.",
                status_code=504,
            ) from e

    return ImportResponse(
        parsed=summary.parsed,
        written=summary.written,
        skipped=summary.skipped,
        total_cards=summary.total_cards,
    )
