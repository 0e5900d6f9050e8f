"""Pytest configuration and fixtures."""

from collections.abc import Generator
from typing import cast

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import event
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

import smart_notes.database as database
from smart_notes.api.deps import get_db
from smart_notes.config import settings
from smart_notes.database import load_sqlite_vec
from smart_notes.main import app
from smart_notes.models import Note, User, UserSettings
from smart_notes.services.auth_service import create_access_token, get_password_hash
from smart_notes.services.embedding_service import (
    document_searchable_text,
    get_embedding_service,
    note_searchable_text,
)
from smart_notes.services.llm_client import get_llm_client
from smart_notes.utils.exceptions import ProviderError

# Use in-memory SQLite for tests
TEST_DATABASE_URL = "sqlite://"


class FakeLLM:
    """Text generator returning queued answers, or failing when none are queued."""

    def __init__(self, answers: list[str] | None = None):
        self.answers = list(answers or [])
        self.prompts: list[str] = []
        self.configured = True

    async def generate(
        self, prompt: str, temperature: float = 0.7, max_output_tokens: int = 800
    ) -> str:
        self.prompts.append(prompt)
        if not self.answers:
            raise ProviderError("Generative AI provider is not configured")
        answer = self.answers.pop(0)
        if isinstance(answer, Exception):
            raise answer
        return answer


class FakeEmbedder:
    """Embedder mapping exact texts to vectors, failing for anything else."""

    def __init__(self, vectors: dict[str, list[float]] | None = None, dimensions: int = 2):
        self.vectors = dict(vectors or {})
        self.dimensions = dimensions
        self.default: list[float] | None = None
        self.calls: list[str] = []

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        vector = self.vectors.get(text, self.default)
        if vector is None:
            raise ProviderError("Embedding provider is not configured")
        return vector

    async def embed_note(self, note: Note) -> list[float]:
        return await self.embed(note_searchable_text(note))

    async def embed_document(self, document) -> list[float]:
        return await self.embed(document_searchable_text(document))


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Keep tests offline and write uploads to a temporary directory."""
    monkeypatch.setattr(settings, "gemini_api_key", None)
    monkeypatch.setattr(settings, "upload_dir", str(tmp_path / "uploads"))
    monkeypatch.setattr(settings, "backfill_delay_seconds", 0.0)


@pytest.fixture(name="engine")
def engine_fixture(monkeypatch):
    """Create a test database engine shared with background tasks."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine, "connect", load_sqlite_vec)
    SQLModel.metadata.create_all(engine)
    monkeypatch.setattr(database, "engine", engine)
    yield engine


@pytest.fixture(name="session")
def session_fixture(engine) -> Generator[Session, None, None]:
    """Create a test database session."""
    with Session(engine) as session:
        yield session


@pytest.fixture(name="fake_llm")
def fake_llm_fixture() -> FakeLLM:
    """LLM with no queued answers (behaves like an unavailable provider)."""
    return FakeLLM()


@pytest.fixture(name="fake_embedder")
def fake_embedder_fixture() -> FakeEmbedder:
    """Embedder with no known texts (behaves like an unavailable provider)."""
    return FakeEmbedder()


@pytest.fixture(name="client")
def client_fixture(
    engine, fake_llm: FakeLLM, fake_embedder: FakeEmbedder
) -> Generator[TestClient, None, None]:
    """Create a test client with database and provider overrides."""

    def get_session_override() -> Generator[Session, None, None]:
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_db] = get_session_override
    app.dependency_overrides[get_llm_client] = lambda: fake_llm
    app.dependency_overrides[get_embedding_service] = lambda: fake_embedder
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="test_user")
def test_user_fixture(session: Session) -> User:
    """Create a test user."""
    user = User(
        username="testuser",
        hashed_password=get_password_hash("testpassword"),
    )
    session.add(user)
    session.commit()
    session.refresh(user)

    # Create default settings
    user_settings = UserSettings(user_id=cast(int, user.id))
    session.add(user_settings)
    session.commit()

    return user


@pytest.fixture(name="other_user")
def other_user_fixture(session: Session) -> User:
    """A second user, for ownership checks."""
    user = User(username="otheruser", hashed_password=get_password_hash("otherpassword"))
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture(name="auth_headers")
def auth_headers_fixture(test_user: User) -> dict[str, str]:
    """Create authentication headers for test user."""
    token = create_access_token(cast(int, test_user.id))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(name="other_headers")
def other_headers_fixture(other_user: User) -> dict[str, str]:
    """Authentication headers for the second user."""
    token = create_access_token(cast(int, other_user.id))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(name="test_note")
def test_note_fixture(session: Session, test_user: User) -> Note:
    """Create a test note."""
    note = Note(
        user_id=cast(int, test_user.id),
        title="Python programming",
        content="This is a test note about Python programming.",
        tags=["work"],
        summary="Test Python note",
        key_topics=["python"],
        enrichment_status="completed",
    )
    session.add(note)
    session.commit()
    session.refresh(note)
    return note
