import pytest
from httpx import AsyncClient
from fastapi import status

from .test_utils import get_auth_headers


class TestUserRegistration:

    @pytest.mark.asyncio
    async def test_register_user_success(self, async_client: AsyncClient, test_user_data):
        response = await async_client.post("/api/auth/register", json=test_user_data)

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["display_name"] == test_user_data["display_name"]
        assert data["email"] == test_user_data["email"]
        assert "password" not in data
        assert "password_hash" not in data
        assert "id" in data

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self, async_client: AsyncClient, test_user_data, second_user_data):
        response1 = await async_client.post("/api/auth/register", json=test_user_data)
        assert response1.status_code == status.HTTP_201_CREATED

        duplicate_data = second_user_data.copy()
        duplicate_data["email"] = test_user_data["email"]

        response2 = await async_client.post("/api/auth/register", json=duplicate_data)

        assert response2.status_code == status.HTTP_400_BAD_REQUEST
        assert response2.json()["detail"] == "Email already registered"

    @pytest.mark.asyncio
    async def test_register_duplicate_display_name(self, async_client: AsyncClient, test_user_data, second_user_data):
        response1 = await async_client.post("/api/auth/register", json=test_user_data)
        assert response1.status_code == status.HTTP_201_CREATED

        duplicate_data = second_user_data.copy()
        duplicate_data["display_name"] = test_user_data["display_name"]

        response2 = await async_client.post("/api/auth/register", json=duplicate_data)

        assert response2.status_code == status.HTTP_400_BAD_REQUEST
        assert response2.json()["detail"] == "Display name already taken"

    @pytest.mark.asyncio
    async def test_register_invalid_password(self, async_client: AsyncClient):
        user_data = {
            "display_name": "testuser_invalid",
            "email": "invalid@example.com",
            "password": "weak"
        }

        response = await async_client.post("/api/auth/register", json=user_data)

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


class TestUserLogin:

    @pytest.mark.asyncio
    async def test_login_success(self, async_client: AsyncClient, test_user_data):
        reg_response = await async_client.post("/api/auth/register", json=test_user_data)
        assert reg_response.status_code == status.HTTP_201_CREATED

        response = await async_client.post("/api/auth/login", json={
            "email": test_user_data["email"],
            "password": test_user_data["password"]
        })

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert "access_token" in data
        assert "refresh_token" in data
        assert data["token_type"] == "bearer"
        assert "access_token" in response.cookies

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, async_client: AsyncClient, test_user_data):
        await async_client.post("/api/auth/register", json=test_user_data)

        response = await async_client.post("/api/auth/login", json={
            "email": test_user_data["email"],
            "password": "WrongPass123!"
        })

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_login_nonexistent_user(self, async_client: AsyncClient):
        response = await async_client.post("/api/auth/login", json={
            "email": "nonexistent@example.com",
            "password": "TestPass123!"
        })

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


class TestCurrentUser:

    @pytest.mark.asyncio
    async def test_me_requires_auth(self, async_client: AsyncClient):
        response = await async_client.get("/api/users/me")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_me_with_invalid_token(self, async_client: AsyncClient):
        response = await async_client.get(
            "/api/users/me", headers={"Authorization": "Bearer not-a-token"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_me_with_bearer_token(self, async_client: AsyncClient, test_user_data):
        headers = await get_auth_headers(async_client, test_user_data)

        response = await async_client.get("/api/users/me", headers=headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["display_name"] == test_user_data["display_name"]


class TestTokenRefresh:

    @pytest.mark.asyncio
    async def test_refresh_rotates_token(self, async_client: AsyncClient, test_user_data):
        await async_client.post("/api/auth/register", json=test_user_data)
        login_response = await async_client.post("/api/auth/login", json={
            "email": test_user_data["email"],
            "password": test_user_data["password"]
        })
        old_refresh = login_response.json()["refresh_token"]

        response = await async_client.post(
            "/api/auth/refresh", json={"refresh_token": old_refresh}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["refresh_token"] != old_refresh

        reuse = await async_client.post(
            "/api/auth/refresh", json={"refresh_token": old_refresh}
        )
        assert reuse.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_refresh_with_unknown_token(self, async_client: AsyncClient):
        async_client.cookies.clear()
        response = await async_client.post(
            "/api/auth/refresh", json={"refresh_token": "unknown"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_logout_revokes_refresh_token(self, async_client: AsyncClient, test_user_data):
        await async_client.post("/api/auth/register", json=test_user_data)
        login_response = await async_client.post("/api/auth/login", json={
            "email": test_user_data["email"],
            "password": test_user_data["password"]
        })
        tokens = login_response.json()
        headers = {"Authorization": f"Bearer {tokens['access_token']}"}

        response = await async_client.post(
            "/api/auth/logout", json={"refresh_token": tokens["refresh_token"]}, headers=headers
        )
        assert response.status_code == status.HTTP_204_NO_CONTENT

        reuse = await async_client.post(
            "/api/auth/refresh", json={"refresh_token": tokens["refresh_token"]}
        )
        assert reuse.status_code == status.HTTP_401_UNAUTHORIZED
