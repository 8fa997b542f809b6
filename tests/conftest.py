"""
Shared fixtures for the bike service tests.

Every test gets its own SQLite file in a temporary directory, a fresh
in‑memory cache and a service container built from test settings, so
tests never share state.
"""
import uuid
from typing import Dict, List, Optional, Tuple

import pytest
from fastapi.testclient import TestClient

from bike_service_api.app.container import build_container
from bike_service_api.app.core.cache import CachePort, MemoryCache
from bike_service_api.app.core.config import Settings
from bike_service_api.app.core.db import init_db
from bike_service_api.app.core.exceptions import CacheError
from bike_service_api.app.main import create_app


TEST_SECRET = "test-secret"


class RecordingCache(MemoryCache):
    """In‑memory cache that remembers every call made to it."""

    def __init__(self) -> None:
        super().__init__()
        self.calls: List[Tuple[str, str]] = []

    def get(self, key: str) -> Optional[bytes]:
        self.calls.append(("get", key))
        return super().get(key)

    def set(self, key: str, value: bytes, ttl_seconds: int) -> None:
        self.calls.append(("set", key))
        super().set(key, value, ttl_seconds)

    def delete(self, key: str) -> None:
        self.calls.append(("delete", key))
        super().delete(key)

    def keys_for(self, operation: str) -> List[str]:
        return [key for op, key in self.calls if op == operation]


class FailingCache(CachePort):
    """Cache whose every operation fails, as if the backend were down."""

    def get(self, key: str) -> Optional[bytes]:
        raise CacheError("cache unavailable")

    def set(self, key: str, value: bytes, ttl_seconds: int) -> None:
        raise CacheError("cache unavailable")

    def delete(self, key: str) -> None:
        raise CacheError("cache unavailable")


@pytest.fixture
def db_path(tmp_path) -> str:
    path = str(tmp_path / "bikes.db")
    init_db(path)
    return path


@pytest.fixture
def settings(db_path) -> Settings:
    return Settings(
        database_url=db_path,
        secret_key=TEST_SECRET,
        redis_url="",
        user_service_url="",
        allowed_origins="*",
    )


@pytest.fixture
def cache() -> RecordingCache:
    return RecordingCache()


@pytest.fixture
def container(settings, cache):
    return build_container(settings, cache=cache)


@pytest.fixture
def bike_service(container):
    return container.bike_service


@pytest.fixture
def component_service(container):
    return container.component_service


@pytest.fixture
def app(container):
    return create_app(container=container)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_token(container):
    """Return a function issuing signed tokens for a user and role."""

    def _make_token(user_id: Optional[uuid.UUID] = None, role: str = "appuser", expires_delta: Optional[int] = None) -> str:
        claims = {
            "id": uuid.uuid4(),
            "user_id": user_id or uuid.uuid4(),
            "role": role,
        }
        return container.token_service.create_access_token(claims, expires_delta=expires_delta)

    return _make_token


def auth_headers(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def owner_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def owner_headers(make_token, owner_id) -> Dict[str, str]:
    return auth_headers(make_token(owner_id))


@pytest.fixture
def other_headers(make_token) -> Dict[str, str]:
    return auth_headers(make_token(uuid.uuid4()))


@pytest.fixture
def admin_headers(make_token) -> Dict[str, str]:
    return auth_headers(make_token(uuid.uuid4(), role="admin"))
