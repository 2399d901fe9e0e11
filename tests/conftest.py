import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from cardcatalog.db.database import build_engine, build_session_factory, init_db
from cardcatalog.db.operations import upsert_cards
from cardcatalog.parsers.scryfall import normalize_cards
from cardcatalog.services.bulk_import import rebuild_index

CardFactory = Callable[..., dict[str, Any]]


@pytest.fixture
def make_card() -> CardFactory:
    """Build a Scryfall card record, overriding any field by keyword."""

    def factory(card_id: str, name: str = "Lightning Bolt", **overrides: Any) -> dict[str, Any]:
        card: dict[str, Any] = {
            "object": "card",
            "id": card_id,
            "oracle_id": f"oracle-{name.lower().replace(' ', '-')}",
            "name": name,
            "lang": "en",
            "layout": "normal",
            "mana_cost": "{R}",
            "cmc": 1.0,
            "type_line": "Instant",
            "oracle_text": "Lightning Bolt deals 3 damage to any target.",
            "colors": ["R"],
            "color_identity": ["R"],
            "keywords": [],
            "legalities": {"standard": "not_legal", "modern": "legal", "legacy": "legal"},
            "set": "lea",
            "set_name": "Limited Edition Alpha",
            "collector_number": "161",
            "rarity": "common",
            "released_at": "1993-08-05",
            "multiverse_ids": [209],
            "image_uris": {
                "small": f"https://cards.scryfall.io/small/{card_id}.jpg",
                "normal": f"https://cards.scryfall.io/normal/{card_id}.jpg",
            },
            "prices": {"usd": "12.50", "usd_foil": None, "eur": "10.00", "tix": None},
        }
        card.update(overrides)
        return card

    return factory


@pytest.fixture
def sample_bulk_path() -> Path:
    return Path(__file__).parent / "fixtures" / "scryfall_sample.json"


@pytest.fixture
def sample_records(sample_bulk_path: Path) -> list[dict[str, Any]]:
    with open(sample_bulk_path, encoding="utf-8") as f:
        records: list[dict[str, Any]] = json.load(f)
    return records


@pytest.fixture
async def async_engine(tmp_path: Path):
    """Create a file-backed SQLite engine for testing."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'cards.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return build_session_factory(async_engine)


@pytest.fixture
async def session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncSession:
    """Provide a database session for tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def seed_catalog(
    async_engine: AsyncEngine, session_factory: async_sessionmaker[AsyncSession]
) -> Callable[..., Any]:
    """Store records the way an import does, optionally building the search index."""

    async def seed(records: list[dict[str, Any]], build_index: bool = True) -> int:
        written = await upsert_cards(session_factory, normalize_cards(records))
        if build_index:
            await rebuild_index(async_engine)
        return written

    return seed
