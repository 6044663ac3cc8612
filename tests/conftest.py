"""Pytest fixtures and shared test configuration.

Environment variables are set before any application module is imported,
because settings are validated when ``config`` and ``database`` load.

Fixtures:
    - db_engine / db_session: SQLite primary store shared across sessions
    - broken_session: session bound to an unreachable store
    - memory_store: fresh in-memory fallback store
    - failing_reply_graph / working_reply_graph: reply graphs with fake models
    - file_storage: upload storage rooted in a temporary directory
    - async_client: HTTPX client against the app with dependencies overridden
"""

import os
import tempfile
from collections.abc import AsyncGenerator, Generator

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["GEMINI_API_KEY"] = "test-gemini-key"
os.environ["OPENAI_API_KEY"] = "test-openai-key"
os.environ["GOOGLE_API_KEY"] = "test-google-key"
os.environ["SEARCH_ENGINE_ID"] = "test-search-engine"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="aura-uploads-")
os.environ.pop("EXPOSE_PROVIDER_KEYS", None)

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from database import get_db
from graph import build_reply_graph
from main import app, get_file_storage, get_memory_store, get_reply_graph, get_verification_strategy
from models import Base
from services.memory_store import MemoryChatStore
from services.storage import LocalFileStorage
from tests.fakes import FakeChatModel, FixedVerificationStrategy

# A path whose parent directory does not exist, so every connection attempt fails
UNREACHABLE_DATABASE_URL = "sqlite:////nonexistent-aura-dir/aura.db"


@pytest.fixture
def db_engine():
    """In-memory SQLite engine; StaticPool keeps one connection so data survives sessions."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(bind=db_engine, autocommit=False, autoflush=False)


@pytest.fixture
def db_session(session_factory) -> Generator[Session]:
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def broken_session() -> Generator[Session]:
    """Session whose store cannot be reached: every query and commit fails."""
    engine = create_engine(UNREACHABLE_DATABASE_URL)
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    yield session
    session.close()
    engine.dispose()


@pytest.fixture
def memory_store() -> MemoryChatStore:
    return MemoryChatStore()


@pytest.fixture
def failing_model() -> FakeChatModel:
    return FakeChatModel(error=RuntimeError("provider unavailable"))


@pytest.fixture
def failing_reply_graph(failing_model: FakeChatModel):
    """Reply graph whose chat model always fails, so replies come from the keyword table."""
    return build_reply_graph(failing_model)


@pytest.fixture
def working_reply_graph():
    return build_reply_graph(FakeChatModel(reply="Model reply about documents."))


@pytest.fixture
def file_storage(tmp_path) -> LocalFileStorage:
    return LocalFileStorage(str(tmp_path / "uploads"))


@pytest.fixture
def verification_strategy() -> FixedVerificationStrategy:
    return FixedVerificationStrategy(verified=True)


@pytest.fixture
def override_db(session_factory):
    """Point the app's session dependency at the test store."""

    def _get_test_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    return _get_test_db


@pytest.fixture
async def async_client(
    override_db,
    memory_store: MemoryChatStore,
    failing_reply_graph,
    file_storage: LocalFileStorage,
    verification_strategy: FixedVerificationStrategy,
) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for API testing.

    The chat model fails by default; tests that need a working model
    override ``get_reply_graph`` again.

    Yields:
        Configured AsyncClient for making test requests.
    """
    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[get_memory_store] = lambda: memory_store
    app.dependency_overrides[get_reply_graph] = lambda: failing_reply_graph
    app.dependency_overrides[get_file_storage] = lambda: file_storage
    app.dependency_overrides[get_verification_strategy] = lambda: verification_strategy

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
