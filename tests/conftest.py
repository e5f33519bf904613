"""
Pytest configuration and fixtures for Kural backend tests.

This module provides:
- Test environment variables (set before the application is imported)
- An in-memory document store behind the ``get_db`` dependency
- FastAPI async test client
"""

import os

# Settings are read at import time
os.environ["ENVIRONMENT"] = "test"
os.environ["SECRET_KEY"] = "test_secret_key_for_testing_only"
os.environ["JWT_ALGORITHM"] = "HS256"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["CORS_ORIGINS"] = "*"

from datetime import UTC, datetime, timedelta  # noqa: E402

from httpx import ASGITransport, AsyncClient  # noqa: E402
from jose import jwt  # noqa: E402
from mongomock_motor import AsyncMongoMockClient  # noqa: E402
import pytest  # noqa: E402

from kural.core.config import settings  # noqa: E402
from kural.core.database import get_db  # noqa: E402
from kural.main import app  # noqa: E402


@pytest.fixture(scope="function")
def mongo_db():
    """Fresh in-memory database for each test."""
    client = AsyncMongoMockClient()
    return client["kuraldb_test"]


@pytest.fixture(scope="function")
async def async_client(mongo_db):
    """FastAPI async test client wired to the in-memory store."""

    async def override_get_db():
        yield mongo_db

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def auth_headers() -> dict[str, str]:
    """Authorization header carrying a valid bearer token."""
    claims = {
        "sub": "user-1",
        "role": "agent",
        "exp": datetime.now(UTC) + timedelta(minutes=30),
    }
    token = jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    return {"Authorization": f"Bearer {token}"}
