"""Pytest configuration and fixtures"""

import os

# Must be set before the app modules read their settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CACHE_ENABLED"] = "false"
os.environ["MESSAGE_ANALYSIS_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["LOG_LEVEL"] = "WARNING"
for key in ("OPENAI_API_KEY", "GOOGLE_API_KEY", "ANTHROPIC_API_KEY"):
    os.environ[key] = ""

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.api.dependencies import (
    get_conversation_store,
    get_provider_registry,
    get_response_cache
)
from app.database.base import Base
from app.database.session import create_db_engine, create_session_factory, get_db
from app.llm.factory import ProviderRegistry
from app.models.settings import UserSettings
from app.models.user import User
from app.security.auth import get_password_hash
from app.services.cache import ResponseCache
from app.services.conversation_store import SQLConversationStore
from tests.fakes import FakeProvider, FakeRedis

TEST_PASSWORD = "Secret123"


@pytest.fixture(scope="function")
def db_engine(tmp_path):
    """Fresh SQLite file database per test"""
    engine = create_db_engine(f"sqlite:///{tmp_path / 'test.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    return create_session_factory(db_engine)


@pytest.fixture(scope="function")
def db(session_factory):
    """Database session fixture"""
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="function")
def store(session_factory):
    return SQLConversationStore(session_factory)


@pytest.fixture(scope="function")
def make_user(db):
    """Create users directly in the database"""
    def _make_user(email: str = "user@example.com", default_ai_provider: str = None) -> User:
        user = User(email=User.normalize_email(email), password_hash=get_password_hash(TEST_PASSWORD))
        user.settings = UserSettings(default_ai_provider=default_ai_provider)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make_user


@pytest.fixture(scope="function")
def providers():
    return [FakeProvider("openai"), FakeProvider("gemini"), FakeProvider("anthropic")]


@pytest.fixture(scope="function")
def registry(providers):
    return ProviderRegistry(providers)


@pytest.fixture(scope="function")
def fake_redis():
    return FakeRedis()


@pytest.fixture(scope="function")
def cache(fake_redis):
    return ResponseCache(client=fake_redis, enabled=True, ttl_detail=300, ttl_list=600)


@pytest.fixture(scope="function")
def client(session_factory, store, registry, cache):
    """Test client fixture"""
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_conversation_store] = lambda: store
    app.dependency_overrides[get_provider_registry] = lambda: registry
    app.dependency_overrides[get_response_cache] = lambda: cache

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def register_user(client):
    """Register through the API, returns auth headers and the user payload"""
    def _register(email: str = "user@example.com", password: str = TEST_PASSWORD) -> dict:
        response = client.post("/api/auth/register", json={"email": email, "password": password})
        assert response.status_code == 201, response.text
        data = response.json()
        return {"headers": {"Authorization": f"Bearer {data['token']}"}, "user": data["user"]}
    return _register


@pytest.fixture(scope="function")
def auth(register_user):
    return register_user()
