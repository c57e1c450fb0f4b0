"""
Jotter — Test Configuration (conftest.py)
==========================================

What:  Shared pytest fixtures for the test suite.
How:   Every test gets its own SQLite file under tmp_path, so tests never
       share rows or need a running PostgreSQL.

Fixture Hierarchy (all function-scoped):
    test_settings ─┬─ engine ── session_factory ── db_session
                   │                                  └── note_repository ── note_service
                   └─ app ── test_client ── csrf_token
    mock_repository: AsyncMock NoteRepository for service unit tests
"""

import os
import tempfile

# Override settings BEFORE any jotter import: jotter.main builds a
# module-level app from the environment on import.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///" + os.path.join(
    tempfile.mkdtemp(prefix="jotter_test_"), "module_app.db"
)
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["LOG_LEVEL"] = "WARNING"

import re  # noqa: E402
from datetime import datetime, timezone  # noqa: E402
from unittest.mock import AsyncMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from jotter.config import Settings  # noqa: E402
from jotter.database import build_engine, build_session_factory, create_tables  # noqa: E402
from jotter.models.note import Note  # noqa: E402
from jotter.repositories.note_repository import NoteRepository  # noqa: E402
from jotter.services.note_service import NoteService  # noqa: E402

PER_PAGE = 5


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'jotter.db'}",
        secret_key="test-secret-key",
        log_level="WARNING",
        notes_per_page=PER_PAGE,
    )


# ══════════════════════════════════════════════════════════════════════════
# Persistence Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def engine(test_settings):
    engine = build_engine(test_settings)
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest_asyncio.fixture
async def db_session(session_factory):
    """
    A real AsyncSession on the per-test database.

    Tests commit explicitly when they need to read back through a second
    session.
    """
    async with session_factory() as session:
        yield session


@pytest.fixture
def note_repository(db_session) -> NoteRepository:
    return NoteRepository(db_session)


@pytest.fixture
def note_service(note_repository) -> NoteService:
    return NoteService(note_repository, per_page=PER_PAGE)


@pytest.fixture
def mock_repository():
    """
    A NoteRepository stand-in whose methods are AsyncMocks.

    Usage:
        mock_repository.find.return_value = make_note(id=1)
        await NoteService(mock_repository).get_note(1)
    """
    return AsyncMock(spec=NoteRepository)


@pytest.fixture
def make_note():
    """Builds detached Note instances with sensible defaults."""
    def _make_note(**overrides) -> Note:
        now = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)
        fields = {
            "id": 1,
            "title": "Sample Note",
            "content": "Sample content.",
            "created_at": now,
            "updated_at": now,
        }
        fields.update(overrides)
        return Note(**fields)

    return _make_note


# ══════════════════════════════════════════════════════════════════════════
# HTTP Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def app(test_settings):
    """
    A fresh application bound to the per-test database.

    ASGITransport does not run the lifespan, so tables are created here.
    """
    from jotter.main import create_app

    application = create_app(test_settings)
    await create_tables(application.state.engine)
    yield application
    await application.state.engine.dispose()


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient talking to the app in-process.

    Cookies persist across requests, so flash messages survive redirects.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def csrf_token(test_client) -> str:
    """The form token of the client's session, read from the create form."""
    response = await test_client.get("/notes/new")
    match = re.search(r'name="_token" value="([^"]+)"', response.text)
    assert match, "create form has no _token field"
    return match.group(1)
