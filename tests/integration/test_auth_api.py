import pytest
from httpx import AsyncClient

@pytest.mark.asyncio
async def test_register_and_profile(client: AsyncClient):
    response = await client.post(
        "/api/auth/register",
        json={"email": "carol@example.com", "password": "Secret123", "name": "Carol"},
    )
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["user"]["email"] == "carol@example.com"
    assert "password_hash" not in data["user"]

    headers = {"Authorization": f"Bearer {data['token']}"}
    profile = await client.get("/api/auth/profile", headers=headers)
    assert profile.status_code == 200
    assert profile.json()["data"]["name"] == "Carol"

    verified = await client.get("/api/auth/verify-token", headers=headers)
    assert verified.json()["data"] == {"user_id": data["user"]["id"], "email": "carol@example.com"}

@pytest.mark.asyncio
async def test_register_weak_password(client: AsyncClient):
    response = await client.post("/api/auth/register", json={"email": "carol@example.com", "password": "weak"})
    assert response.status_code == 400
    assert response.json()["success"] is False

@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient, owner_a: dict):
    response = await client.post("/api/auth/login", json={"email": "alice@example.com", "password": "Wrong1234"})
    assert response.status_code == 401
    assert response.json() == {"success": False, "error": "Invalid email or password"}

@pytest.mark.asyncio
async def test_profile_requires_token(client: AsyncClient):
    response = await client.get("/api/auth/profile")
    assert response.status_code == 401
    assert response.json()["success"] is False

@pytest.mark.asyncio
async def test_forgot_and_reset_password(client: AsyncClient, owner_a: dict):
    forgot = await client.post("/api/auth/forgot-password", json={"email": "alice@example.com"})
    assert forgot.status_code == 200
    token = forgot.json()["data"]["reset_token"]

    reset = await client.post("/api/auth/reset-password", json={"token": token, "new_password": "Changed999"})
    assert reset.status_code == 200

    login = await client.post("/api/auth/login", json={"email": "alice@example.com", "password": "Changed999"})
    assert login.status_code == 200
    assert login.json()["data"]["user"]["id"] == owner_a["id"]

@pytest.mark.asyncio
async def test_links_created_with_token_are_owned(client: AsyncClient, owner_a: dict):
    created = await client.post("/api/urls/shorten", json={"original_url": "https://foo.com"}, headers=owner_a["headers"])
    assert created.status_code == 201

    listed = await client.get("/api/urls/list", headers=owner_a["headers"])
    assert [link["id"] for link in listed.json()["data"]] == [created.json()["data"]["id"]]
