"""Shared test fixtures."""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from learnboard.core.database import build_engine, build_session_factory, create_tables
from learnboard.schemas.language import LanguageCatalog
from learnboard.schemas.roadmap import TreeState


@pytest_asyncio.fixture
async def test_session() -> AsyncGenerator[AsyncSession, None]:
    """Session bound to a fresh in-memory SQLite database."""
    engine = build_engine("sqlite+aiosqlite:///:memory:")
    await create_tables(engine)

    async with build_session_factory(engine)() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def state() -> TreeState:
    return TreeState()


@pytest.fixture
def catalog() -> LanguageCatalog:
    return LanguageCatalog()
