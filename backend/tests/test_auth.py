"""
Tests for authentication endpoints: registration, login and profile.
"""

import pytest
from httpx import AsyncClient

PASSWORD = "testpassword123"


@pytest.mark.asyncio
async def test_register_user(client: AsyncClient):
    """Successful registration returns a token and the user."""
    response = await client.post("/api/v1/auth/register", json={
        "name": "New User",
        "email": "New@Example.com",
        "password": "securepassword123",
    })
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["token"]
    assert data["user"]["email"] == "new@example.com"
    assert data["user"]["role"] == "user"
    assert "hashedPassword" not in data["user"]  # Never expose password hash
    assert "token" in response.cookies


@pytest.mark.asyncio
async def test_register_organizer(client: AsyncClient):
    response = await client.post("/api/v1/auth/register", json={
        "name": "Org",
        "email": "org@example.com",
        "password": "securepassword123",
        "role": "organizer",
    })
    assert response.status_code == 201
    assert response.json()["data"]["user"]["role"] == "organizer"


@pytest.mark.asyncio
async def test_register_admin_forbidden(client: AsyncClient):
    response = await client.post("/api/v1/auth/register", json={
        "name": "Sneaky",
        "email": "sneaky@example.com",
        "password": "securepassword123",
        "role": "admin",
    })
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_register_duplicate_email(client: AsyncClient, test_user):
    """Duplicate email is rejected."""
    response = await client.post("/api/v1/auth/register", json={
        "name": "Someone Else",
        "email": "test@example.com",
        "password": "securepassword123",
    })
    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Email already registered"}


@pytest.mark.asyncio
async def test_register_weak_password(client: AsyncClient):
    """Password under 6 chars fails validation."""
    response = await client.post("/api/v1/auth/register", json={
        "name": "Weak",
        "email": "weak@example.com",
        "password": "short",
    })
    assert response.status_code == 400
    errors = response.json()["errors"]
    assert [error["field"] for error in errors] == ["password"]


@pytest.mark.asyncio
async def test_register_invalid_email(client: AsyncClient):
    response = await client.post("/api/v1/auth/register", json={
        "name": "Bad Email",
        "email": "not-an-email",
        "password": "securepassword123",
    })
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "email"


@pytest.mark.asyncio
async def test_login_success(client: AsyncClient, test_user):
    """Valid credentials return JWT token."""
    response = await client.post("/api/v1/auth/login", json={
        "email": "test@example.com",
        "password": PASSWORD,
    })
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["token"]
    assert data["tokenType"] == "bearer"
    assert data["user"]["id"] == test_user.id


@pytest.mark.asyncio
async def test_login_token_works(client: AsyncClient, test_user):
    login = await client.post("/api/v1/auth/login", json={
        "email": "test@example.com",
        "password": PASSWORD,
    })
    token = login.json()["data"]["token"]

    response = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    assert response.json()["data"]["email"] == "test@example.com"


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient, test_user):
    """Wrong password returns 401."""
    response = await client.post("/api/v1/auth/login", json={
        "email": "test@example.com",
        "password": "wrongpassword",
    })
    assert response.status_code == 401
    assert response.json() == {"success": False, "error": "Invalid credentials"}


@pytest.mark.asyncio
async def test_login_nonexistent_email(client: AsyncClient):
    """Non-existent email returns 401."""
    response = await client.post("/api/v1/auth/login", json={
        "email": "nobody@example.com",
        "password": "anypassword123",
    })
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_me_requires_token(client: AsyncClient):
    response = await client.get("/api/v1/auth/me")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_update_details(client: AsyncClient, auth_headers):
    response = await client.put(
        "/api/v1/auth/updatedetails",
        json={"name": "Renamed", "preferredLanguage": "ar", "darkMode": True},
        headers=auth_headers,
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["name"] == "Renamed"
    assert data["preferredLanguage"] == "ar"
    assert data["darkMode"] is True


@pytest.mark.asyncio
async def test_update_details_email_taken(client: AsyncClient, auth_headers, other_user):
    response = await client.put(
        "/api/v1/auth/updatedetails",
        json={"email": "other@example.com"},
        headers=auth_headers,
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_update_password(client: AsyncClient, auth_headers, test_user):
    response = await client.put(
        "/api/v1/auth/updatepassword",
        json={"currentPassword": PASSWORD, "newPassword": "brandnew123"},
        headers=auth_headers,
    )
    assert response.status_code == 200

    login = await client.post("/api/v1/auth/login", json={
        "email": "test@example.com",
        "password": "brandnew123",
    })
    assert login.status_code == 200


@pytest.mark.asyncio
async def test_update_password_wrong_current(client: AsyncClient, auth_headers):
    response = await client.put(
        "/api/v1/auth/updatepassword",
        json={"currentPassword": "nope-nope", "newPassword": "brandnew123"},
        headers=auth_headers,
    )
    assert response.status_code == 401
    assert response.json()["error"] == "Password is incorrect"


@pytest.mark.asyncio
async def test_logout(client: AsyncClient, auth_headers):
    response = await client.get("/api/v1/auth/logout", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["success"] is True
