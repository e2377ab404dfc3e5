from __future__ import annotations

from typing import Dict

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from config.settings import Settings
from database.session import build_engine, build_session_factory, create_tables

TEST_SECRET = "test-secret-key"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        database_url="sqlite+aiosqlite://",
        jwt_secret=TEST_SECRET,
        bcrypt_rounds=4,
        environment="test",
    )


@pytest.fixture
def client(settings: Settings) -> TestClient:
    from main import create_app

    with TestClient(create_app(settings)) as test_client:
        yield test_client


@pytest_asyncio.fixture
async def session(settings: Settings):
    engine = build_engine(settings)
    await create_tables(engine)
    factory = build_session_factory(engine)
    async with factory() as db:
        yield db
    await engine.dispose()


def register(client: TestClient, login: str, password: str = "secret1"):
    return client.post("/register", json={"login": login, "password": password})


def auth_headers(client: TestClient, login: str, password: str = "secret1") -> Dict[str, str]:
    """Register ``login`` (if needed) and return its bearer header."""
    register(client, login, password)
    response = client.post("/login", json={"login": login, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}
