import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cardcatalog.api import cards_router, health_router, import_router
from cardcatalog.config import settings
from cardcatalog.db.database import init_db
from cardcatalog.models.failure import KnownError
from cardcatalog.scryfall.client import ScryfallClient

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    await init_db()
    async with ScryfallClient() as client:
        app.state.scryfall_client = client
        yield


app = FastAPI(
    title=settings.app_name,
    version=pkg_version("cardcatalog"),
    lifespan=lifespan,
)


@app.exception_handler(KnownError)
async def known_error_handler(_request: Request, exc: KnownError) -> JSONResponse:
    logger.info("%s: %s", exc.kind.value, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(mode="json"),
    )


app.include_router(cards_router)
app.include_router(health_router)
app.include_router(import_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Tighten in production
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)
