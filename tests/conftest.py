"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator, Callable
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from lingopop.database import build_engine, build_session_factory, create_tables
from lingopop.schemas import DictionaryEntry, DictionaryExample, LookupResponse
from lingopop.services.gemini import GeminiGateway
from lingopop.storage import LocalStorage


@pytest.fixture
async def async_engine(tmp_path):
    """Create a file-backed test database engine."""
    engine = build_engine(tmp_path / "test.db")
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine) -> async_sessionmaker[AsyncSession]:
    """Create a session factory bound to the test engine."""
    return build_session_factory(async_engine)


@pytest.fixture
async def async_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def storage(session_factory) -> LocalStorage:
    """Local storage backed by the test database."""
    return LocalStorage(session_factory)


@pytest.fixture
def lookup_response() -> LookupResponse:
    """A typical structured lookup result."""
    return LookupResponse(
        definition="Presente en todas partes al mismo tiempo.",
        examples=[
            DictionaryExample(
                original="Los teléfonos móviles son ubicuos.",
                translation="Mobile phones are ubiquitous.",
            ),
            DictionaryExample(
                original="El café es ubicuo en esta ciudad.",
                translation="Coffee is everywhere in this city.",
            ),
        ],
        fun_explanation="Use it when something is literally everywhere, like pigeons.",
    )


@pytest.fixture
def make_entry() -> Callable[..., DictionaryEntry]:
    """Factory for dictionary entries."""

    def _make(term: str = "ubiquitous", **overrides: Any) -> DictionaryEntry:
        data: dict[str, Any] = {
            "term": term,
            "definition": f"Definition of {term}",
            "examples": [{"original": f"{term} here", "translation": f"{term} aquí"}],
            "fun_explanation": f"Fun fact about {term}",
        }
        data.update(overrides)
        return DictionaryEntry.model_validate(data)

    return _make


@pytest.fixture
def mock_gateway(lookup_response: LookupResponse) -> MagicMock:
    """A gateway double whose lookup succeeds and whose image phase returns nothing."""
    gateway = MagicMock(spec=GeminiGateway)
    gateway.lookup = AsyncMock(return_value=lookup_response)
    gateway.generate_image = AsyncMock(return_value=None)
    gateway.generate_speech = AsyncMock(return_value=None)
    gateway.chat = AsyncMock(return_value="Sure!")
    gateway.story = AsyncMock(return_value="Once upon a time...")
    return gateway
