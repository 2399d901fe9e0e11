"""
Health check endpoints.

Provides liveness and readiness checks with database connectivity checks.
Readiness also reports whether the search index exists; a missing index is
not fatal because search falls back to substring matching.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cardcatalog.db.database import get_session
from cardcatalog.db.search_index import search_index_exists

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    database: str | None = None
    search_index: str | None = None


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """
    Liveness check.

    Returns healthy if the service is running.
    Does not check dependencies.
    """
    return HealthResponse(status="healthy")


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def ready(
    response: Response,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> HealthResponse:
    """
    Readiness check.

    Returns ready if the service can handle requests.
    Checks database connectivity. Returns 503 if database is unavailable.
    """
    try:
        await session.execute(text("SELECT 1"))
        has_index = await search_index_exists(await session.connection())
    except SQLAlchemyError:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(status="not ready", database="disconnected")

    return HealthResponse(
        status="ready",
        database="connected",
        search_index="present" if has_index else "missing",
    )
