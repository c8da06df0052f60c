import os
import tempfile

# Settings are read at import time, so the test database must be configured first.
_DB_DIR = tempfile.mkdtemp(prefix="shortlinks-test-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["ENVIRONMENT"] = "test"
os.environ.pop("REDIS_URL", None)
os.environ["JWT_SECRET"] = "test-secret"

import pytest
from typing import AsyncGenerator
from httpx import AsyncClient, ASGITransport
from shortlinks.main import app
from shortlinks.database import AsyncSessionLocal, Base, engine


@pytest.fixture(autouse=True)
async def reset_db():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()


@pytest.fixture
async def db():
    async with AsyncSessionLocal() as session:
        yield session


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    # Lifespan is not run by ASGITransport; tables come from reset_db and
    # Redis stays disconnected, so rate limiting is a no-op.
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


@pytest.fixture
async def server_client() -> AsyncGenerator[AsyncClient, None]:
    # Starlette re-raises unhandled errors after the 500 response is sent, as
    # uvicorn would see them; keep the response instead of the exception.
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


async def register(client: AsyncClient, email: str, password: str = "Secret123") -> dict:
    response = await client.post("/api/auth/register", json={"email": email, "password": password})
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest.fixture
async def owner_a(client: AsyncClient) -> dict:
    data = await register(client, "alice@example.com")
    return {"id": data["user"]["id"], "headers": {"Authorization": f"Bearer {data['token']}"}}


@pytest.fixture
async def owner_b(client: AsyncClient) -> dict:
    data = await register(client, "bob@example.com")
    return {"id": data["user"]["id"], "headers": {"Authorization": f"Bearer {data['token']}"}}
