"""Tests for authentication endpoints."""

from fastapi import status
from sqlalchemy import update

from app.auth.models import User
from tests.conftest import PASSWORD, register


class TestRegister:
    async def test_register_returns_user_and_tokens(self, client):
        response = await client.post(
            "/api/v1/auth/register",
            json={"email": "New.User@Example.com", "password": PASSWORD},
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["user"]["email"] == "new.user@example.com"
        assert data["user"]["is_active"] is True
        assert data["tokens"]["token_type"] == "bearer"
        assert data["tokens"]["access_token"]
        assert data["tokens"]["refresh_token"]

    async def test_duplicate_email_conflicts(self, client):
        await register(client)

        response = await client.post(
            "/api/v1/auth/register",
            json={"email": "learner@example.com", "password": PASSWORD},
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["code"] == "USER_EXISTS"

    async def test_short_password_is_rejected(self, client):
        response = await client.post(
            "/api/v1/auth/register",
            json={"email": "learner@example.com", "password": "123"},
        )

        assert response.status_code == 422


class TestLogin:
    async def test_login_with_valid_credentials(self, client):
        await register(client)

        response = await client.post(
            "/api/v1/auth/login",
            json={"email": "learner@example.com", "password": PASSWORD},
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["user"]["last_login"] is not None

    async def test_wrong_password_fails(self, client):
        await register(client)

        response = await client.post(
            "/api/v1/auth/login",
            json={"email": "learner@example.com", "password": "wrong-password"},
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["code"] == "AUTH_FAILED"

    async def test_unknown_email_fails(self, client):
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": "nobody@example.com", "password": PASSWORD},
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


class TestTokens:
    async def test_me_returns_current_user(self, client, auth_headers):
        response = await client.get("/api/v1/auth/me", headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["email"] == "learner@example.com"

    async def test_me_requires_token(self, client):
        response = await client.get("/api/v1/auth/me")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    async def test_me_rejects_garbage_token(self, client):
        response = await client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    async def test_refresh_issues_new_tokens(self, client):
        registered = await client.post(
            "/api/v1/auth/register",
            json={"email": "learner@example.com", "password": PASSWORD},
        )
        refresh_token = registered.json()["tokens"]["refresh_token"]

        response = await client.post("/api/v1/auth/refresh", json={"refresh_token": refresh_token})

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["access_token"]

    async def test_access_token_cannot_refresh(self, client):
        registered = await client.post(
            "/api/v1/auth/register",
            json={"email": "learner@example.com", "password": PASSWORD},
        )
        access_token = registered.json()["tokens"]["access_token"]

        response = await client.post("/api/v1/auth/refresh", json={"refresh_token": access_token})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["code"] == "INVALID_TOKEN"

    async def test_logout(self, client, auth_headers):
        response = await client.post("/api/v1/auth/logout", headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["message"] == "Signed out"

    async def test_disabled_account_is_locked_out(self, client, auth_headers, session_factory):
        async with session_factory() as session:
            await session.execute(update(User).values(is_active=False))
            await session.commit()

        me = await client.get("/api/v1/auth/me", headers=auth_headers)
        login = await client.post(
            "/api/v1/auth/login",
            json={"email": "learner@example.com", "password": PASSWORD},
        )

        assert me.status_code == status.HTTP_401_UNAUTHORIZED
        assert login.status_code == status.HTTP_401_UNAUTHORIZED
        assert login.json()["code"] == "AUTH_FAILED"
