"""
Xync Backend — Auth Endpoint & Middleware Tests
===============================================

What we test:
    ✅ Registration: 201 with user + token, 409 on a taken email (any case)
    ✅ Input validation: short passwords and bad emails are rejected
    ✅ Login: unknown email and wrong password are indistinguishable
    ✅ /auth/me: returns the caller, never the password hash
    ✅ Middleware: missing / malformed / tampered / expired tokens → 401
    ✅ Public paths: /health and /auth/* need no token
"""

from datetime import datetime, timedelta, timezone
from uuid import UUID

import pytest

from conftest import DEFAULT_PASSWORD, register
from xync.config import settings
from xync.security import issue_token


class TestRegister:

    @pytest.mark.asyncio
    async def test_register_returns_user_and_token(self, test_client):
        response = await register(test_client, "a@x.com", name="Alice")

        assert response.status_code == 201
        body = response.json()
        assert body["user"]["email"] == "a@x.com"
        assert body["user"]["name"] == "Alice"
        assert UUID(body["user"]["id"])
        assert body["token_type"] == "bearer"
        assert body["token"]
        assert "password_hash" not in body["user"]

    @pytest.mark.asyncio
    async def test_duplicate_email_conflicts(self, test_client):
        assert (await register(test_client, "a@x.com")).status_code == 201

        response = await register(test_client, "a@x.com")

        assert response.status_code == 409
        assert response.json()["error"] == "conflict"

    @pytest.mark.asyncio
    async def test_email_is_case_insensitive(self, test_client):
        assert (await register(test_client, "a@x.com")).status_code == 201

        response = await register(test_client, "  A@X.COM ")

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_short_password_rejected(self, test_client):
        response = await register(test_client, "a@x.com", password="pw1")
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_invalid_email_rejected(self, test_client):
        response = await register(test_client, "not-an-email")
        assert response.status_code == 422


class TestLogin:

    @pytest.mark.asyncio
    async def test_login_returns_token_for_same_user(self, test_client, alice):
        response = await test_client.post(
            "/auth/login", json={"email": "alice@x.com", "password": DEFAULT_PASSWORD}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["user"]["id"] == alice["id"]

        me = await test_client.get(
            "/auth/me", headers={"Authorization": f"Bearer {body['token']}"}
        )
        assert me.status_code == 200

    @pytest.mark.asyncio
    async def test_login_email_is_normalized(self, test_client, alice):
        response = await test_client.post(
            "/auth/login", json={"email": "ALICE@x.com", "password": DEFAULT_PASSWORD}
        )
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_wrong_password_and_unknown_email_look_identical(self, test_client, alice):
        wrong_password = await test_client.post(
            "/auth/login", json={"email": "alice@x.com", "password": "not the password"}
        )
        unknown_email = await test_client.post(
            "/auth/login", json={"email": "nobody@x.com", "password": "not the password"}
        )

        assert wrong_password.status_code == unknown_email.status_code == 401
        first, second = wrong_password.json(), unknown_email.json()
        assert first["error"] == second["error"]
        assert first["message"] == second["message"] == "Invalid email or password"
        assert wrong_password.headers["www-authenticate"] == "Bearer"


class TestCurrentUser:

    @pytest.mark.asyncio
    async def test_me_returns_caller(self, test_client, alice):
        response = await test_client.get("/auth/me", headers=alice["headers"])

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == alice["id"]
        assert body["email"] == "alice@x.com"
        assert "password_hash" not in body

    @pytest.mark.asyncio
    async def test_token_of_deleted_account_is_not_found(self, test_client, alice, db_session):
        from xync.services.user_service import user_service

        await user_service.delete_user(db_session, UUID(alice["id"]))

        response = await test_client.get("/auth/me", headers=alice["headers"])
        assert response.status_code == 404


class TestAuthenticationMiddleware:

    @pytest.mark.asyncio
    async def test_missing_header(self, test_client):
        response = await test_client.get("/bookmarks")

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"
        assert response.json()["error"] == "authentication_required"

    @pytest.mark.asyncio
    async def test_wrong_scheme(self, test_client):
        response = await test_client.get("/notes", headers={"Authorization": "Basic dXNlcjpwYXNz"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_garbage_token(self, test_client):
        response = await test_client.get("/tags", headers={"Authorization": "Bearer garbage"})

        assert response.status_code == 401
        assert response.json()["error"] == "invalid_token"

    @pytest.mark.asyncio
    async def test_token_signed_with_other_secret(self, test_client, alice):
        forged = issue_token(
            UUID(alice["id"]),
            datetime.now(timezone.utc),
            secret="some-other-secret-0123456789abcdef012345",
            lifetime_hours=1,
        )
        response = await test_client.get(
            "/categories", headers={"Authorization": f"Bearer {forged.token}"}
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_expired_and_invalid_tokens_share_one_message(self, test_client, alice):
        expired = issue_token(
            UUID(alice["id"]),
            datetime.now(timezone.utc) - timedelta(hours=25),
            secret=settings.jwt_secret,
            lifetime_hours=24,
        )
        expired_response = await test_client.get(
            "/bookmarks", headers={"Authorization": f"Bearer {expired.token}"}
        )
        garbage_response = await test_client.get(
            "/bookmarks", headers={"Authorization": "Bearer garbage"}
        )

        assert expired_response.status_code == 401
        assert expired_response.json()["message"] == garbage_response.json()["message"]

    @pytest.mark.asyncio
    async def test_unknown_path_requires_auth(self, test_client):
        response = await test_client.get("/does-not-exist")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_health_is_public(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, test_client):
        response = await test_client.get("/health", headers={"X-Request-ID": "trace-123"})
        assert response.headers["x-request-id"] == "trace-123"
