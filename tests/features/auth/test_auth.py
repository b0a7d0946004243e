"""Tests for the auth feature.
Covers: AuthService, token rotation and reuse detection, login endpoints, Google sign-in.
"""

import jwt
import pytest
import pytest_asyncio
from fastapi import status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.config.settings import settings
from src.database import client as db_client
from src.database.dependencies import get_db_session
from src.features.auth.exceptions import (
    InvalidCredentialsException,
    InvalidTokenException,
    RefreshTokenReuseException,
    TokenOwnerNotFoundException,
)
from src.features.auth.jwt_utils import create_access_token, create_refresh_token, decode_refresh_token
from src.features.auth.service import AuthService
from src.features.auth.token_store import RefreshTokenStore
from src.features.user.exceptions import UserNotFound
from src.features.user.models import OAUTH_PASSWORD_SENTINEL, User
from src.features.user.service import UserService
from src.main import app

# Token issuing


class TestTokenIssuing:
    def test_access_and_refresh_tokens_use_separate_secrets(self):
        access = create_access_token(7)
        refresh = create_refresh_token(7)

        assert jwt.decode(access, settings.access_token_secret, algorithms=["HS256"])["id"] == "7"
        assert decode_refresh_token(refresh)["id"] == "7"
        with pytest.raises(jwt.InvalidSignatureError):
            decode_refresh_token(access)

    def test_access_token_expires(self):
        claims = jwt.decode(create_access_token(1), settings.access_token_secret, algorithms=["HS256"])
        assert claims["exp"] - claims["iat"] == settings.access_token_expire_minutes * 60

    def test_refresh_token_has_no_expiry_by_default(self):
        assert "exp" not in decode_refresh_token(create_refresh_token(1))

    def test_refresh_tokens_are_unique(self):
        assert create_refresh_token(1) != create_refresh_token(1)


# AuthService.login


class TestLogin:
    async def test_success_appends_refresh_token(self, session, make_user):
        user = await make_user(username="alice", password="secret1")

        tokens = await AuthService.login(session, "alice", "secret1")

        assert tokens.id == user.id
        assert tokens.access_token
        assert tokens.refresh_token
        assert await RefreshTokenStore.list_tokens(session, user.id) == [tokens.refresh_token]

    async def test_each_login_adds_a_session(self, session, make_user):
        user = await make_user(username="alice", password="secret1")

        first = await AuthService.login(session, "alice", "secret1")
        second = await AuthService.login(session, "alice", "secret1")

        tokens = await RefreshTokenStore.list_tokens(session, user.id)
        assert tokens == [first.refresh_token, second.refresh_token]

    async def test_unknown_user_raises_not_found(self, session):
        with pytest.raises(UserNotFound):
            await AuthService.login(session, "ghost", "secret1")

    async def test_wrong_password_raises_unauthorized(self, session, make_user):
        await make_user(username="alice", password="secret1")

        with pytest.raises(InvalidCredentialsException):
            await AuthService.login(session, "alice", "wrong")

    async def test_oauth_account_cannot_use_password(self, session, make_user):
        user = await make_user(username="googler")
        user.hashed_password = OAUTH_PASSWORD_SENTINEL
        await session.commit()

        with pytest.raises(InvalidCredentialsException):
            await AuthService.login(session, "googler", OAUTH_PASSWORD_SENTINEL)


# AuthService.refresh_tokens


class TestRefreshTokens:
    async def test_rotation_replaces_presented_token(self, session, make_user):
        user = await make_user(username="alice", password="secret1")
        login = await AuthService.login(session, "alice", "secret1")

        rotated = await AuthService.refresh_tokens(session, login.refresh_token)

        tokens = await RefreshTokenStore.list_tokens(session, user.id)
        assert tokens == [rotated.refresh_token]
        assert rotated.refresh_token != login.refresh_token

    async def test_reused_token_clears_every_session(self, session, make_user):
        user = await make_user(username="alice", password="secret1")
        login = await AuthService.login(session, "alice", "secret1")
        other_device = await AuthService.login(session, "alice", "secret1")
        await AuthService.refresh_tokens(session, login.refresh_token)

        with pytest.raises(RefreshTokenReuseException):
            await AuthService.refresh_tokens(session, login.refresh_token)

        assert await RefreshTokenStore.list_tokens(session, user.id) == []
        with pytest.raises(RefreshTokenReuseException):
            await AuthService.refresh_tokens(session, other_device.refresh_token)

    async def test_bad_signature_raises_with_verifier_message(self, session, make_user):
        user = await make_user()
        forged = jwt.encode({"id": str(user.id)}, "some-other-secret-that-is-long-enough", algorithm="HS256")

        with pytest.raises(InvalidTokenException) as exc_info:
            await AuthService.refresh_tokens(session, forged)
        assert exc_info.value.detail == "Signature verification failed"

    async def test_access_token_is_not_a_refresh_token(self, session, make_user):
        user = await make_user()

        with pytest.raises(InvalidTokenException):
            await AuthService.refresh_tokens(session, create_access_token(user.id))

    async def test_unknown_owner_raises(self, session):
        with pytest.raises(TokenOwnerNotFoundException):
            await AuthService.refresh_tokens(session, create_refresh_token(999))


# AuthService.logout


class TestLogout:
    async def test_removes_only_that_session(self, session, make_user):
        user = await make_user(username="alice", password="secret1")
        first = await AuthService.login(session, "alice", "secret1")
        second = await AuthService.login(session, "alice", "secret1")

        await AuthService.logout(session, first.refresh_token)

        assert await RefreshTokenStore.list_tokens(session, user.id) == [second.refresh_token]

    async def test_second_logout_is_reuse(self, session, make_user):
        user = await make_user(username="alice", password="secret1")
        first = await AuthService.login(session, "alice", "secret1")
        await AuthService.login(session, "alice", "secret1")
        await AuthService.logout(session, first.refresh_token)

        with pytest.raises(RefreshTokenReuseException):
            await AuthService.logout(session, first.refresh_token)

        assert await RefreshTokenStore.list_tokens(session, user.id) == []


# Endpoints


class TestAuthEndpoints:
    async def test_register_then_login(self, client):
        response = await client.post(
            "/user/register",
            json={"username": "alice", "password": "secret1", "email": "alice@example.com", "name": "Alice"},
        )
        assert response.status_code == status.HTTP_201_CREATED
        assert response.json() == {"Message": "New user created"}

        response = await client.post("/user/login", json={"username": "alice", "password": "secret1"})
        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert set(body) == {"id", "accessToken", "refreshToken"}
        assert body["accessToken"]
        assert body["refreshToken"]

    async def test_login_unknown_user_returns_404(self, client):
        response = await client.post("/user/login", json={"username": "ghost", "password": "secret1"})
        assert response.status_code == status.HTTP_404_NOT_FOUND

    async def test_login_wrong_password_returns_401(self, client, make_user):
        await make_user(username="alice", password="secret1")
        response = await client.post("/user/login", json={"username": "alice", "password": "nope"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    async def test_login_missing_field_returns_400(self, client):
        response = await client.post("/user/login", json={"username": "alice"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    async def test_refresh_twice_fails_and_revokes(self, client, session, make_user, bearer):
        user = await make_user(username="alice", password="secret1")
        login = (await client.post("/user/login", json={"username": "alice", "password": "secret1"})).json()

        first = await client.post("/user/refreshToken", headers=bearer(login["refreshToken"]))
        assert first.status_code == status.HTTP_200_OK
        assert set(first.json()) == {"accessToken", "refreshToken"}

        second = await client.post("/user/refreshToken", headers=bearer(login["refreshToken"]))
        assert second.status_code == status.HTTP_403_FORBIDDEN
        assert second.json() == {"detail": "Invalid request"}

        assert await RefreshTokenStore.list_tokens(session, user.id) == []
        third = await client.post("/user/refreshToken", headers=bearer(first.json()["refreshToken"]))
        assert third.status_code == status.HTTP_403_FORBIDDEN

    async def test_refresh_without_token_returns_401(self, client):
        response = await client.post("/user/refreshToken")
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json() == {"detail": "Unauthorized"}

    async def test_refresh_with_garbage_returns_403(self, client, bearer):
        response = await client.post("/user/refreshToken", headers=bearer("not-a-jwt"))
        assert response.status_code == status.HTTP_403_FORBIDDEN

    async def test_logout_then_reuse(self, client, make_user, bearer):
        await make_user(username="alice", password="secret1")
        login = (await client.post("/user/login", json={"username": "alice", "password": "secret1"})).json()

        response = await client.post("/user/logout", headers=bearer(login["refreshToken"]))
        assert response.status_code == status.HTTP_200_OK
        assert response.content == b""

        response = await client.post("/user/logout", headers=bearer(login["refreshToken"]))
        assert response.status_code == status.HTTP_403_FORBIDDEN

        response = await client.post("/user/refreshToken", headers=bearer(login["refreshToken"]))
        assert response.status_code == status.HTTP_403_FORBIDDEN

    async def test_logout_without_token_returns_401(self, client):
        response = await client.post("/user/logout")
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


# Google sign-in


class TestGoogleLogin:
    async def test_first_login_creates_oauth_account(self, client, session, google_client):
        google_client.register("code-1", "carol@gmail.com", name="Carol", picture="https://img/carol.png")

        response = await client.post("/user/google/login", json={"code": "code-1"})

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        user = await session.get(User, body["id"])
        assert user.username == "carol"
        assert user.name == "Carol"
        assert user.picture == "https://img/carol.png"
        assert user.hashed_password == OAUTH_PASSWORD_SENTINEL
        assert await RefreshTokenStore.list_tokens(session, user.id) == [body["refreshToken"]]

    async def test_existing_account_is_reused_and_picture_backfilled(self, client, make_user, google_client):
        user = await make_user(username="dave", email="dave@gmail.com")
        google_client.register("code-2", "dave@gmail.com", picture="https://img/dave.png")

        response = await client.post("/user/google/login", json={"code": "code-2"})

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["id"] == user.id
        assert user.picture == "https://img/dave.png"

    async def test_taken_username_gets_suffix(self, session, make_user, google_client):
        await make_user(username="erin", email="erin@example.com")
        google_client.register("code-3", "erin@gmail.com")

        tokens = await AuthService.google_login(session, "code-3", google_client)

        user = await UserService.get_user(session, tokens.id)
        assert user.username.startswith("erin-")
        assert user.name == "erin"

    async def test_rejected_code_returns_400(self, client):
        response = await client.post("/user/google/login", json={"code": "bogus"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"detail": "Google Invalid request"}


# Reuse detection through the production session lifecycle


@pytest_asyncio.fixture
async def request_sessions(db_engine, monkeypatch):
    """Serve every request from its own session via the real ``get_session``.

    That session commits on success and rolls back when the endpoint raises,
    so only explicitly committed work outlives a failed request.
    """
    factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    monkeypatch.setattr(db_client, "_async_session_factory", factory)
    app.dependency_overrides.pop(get_db_session, None)
    return factory


class TestRevocationOutlivesFailedRequest:
    credentials = {"username": "alice", "password": "secret1"}

    async def _register_and_login_twice(self, client):
        response = await client.post(
            "/user/register", json={**self.credentials, "email": "alice@example.com", "name": "Alice"}
        )
        assert response.status_code == status.HTTP_201_CREATED

        phone = (await client.post("/user/login", json=self.credentials)).json()
        laptop = (await client.post("/user/login", json=self.credentials)).json()
        return phone, laptop

    async def test_reused_refresh_token_revokes_all_sessions(self, client, request_sessions, bearer, caplog):
        phone, laptop = await self._register_and_login_twice(client)

        rotated = await client.post("/user/refreshToken", headers=bearer(phone["refreshToken"]))
        assert rotated.status_code == status.HTTP_200_OK

        reused = await client.post("/user/refreshToken", headers=bearer(phone["refreshToken"]))
        assert reused.status_code == status.HTTP_403_FORBIDDEN

        async with request_sessions() as fresh:
            assert await RefreshTokenStore.list_tokens(fresh, phone["id"]) == []

        for token in (laptop["refreshToken"], rotated.json()["refreshToken"]):
            response = await client.post("/user/refreshToken", headers=bearer(token))
            assert response.status_code == status.HTTP_403_FORBIDDEN

        reuse_records = [r for r in caplog.records if "reuse detected" in r.getMessage()]
        assert reuse_records[0].user_id == phone["id"]

    async def test_repeated_logout_revokes_all_sessions(self, client, request_sessions, bearer):
        phone, laptop = await self._register_and_login_twice(client)

        assert (await client.post("/user/logout", headers=bearer(phone["refreshToken"]))).status_code == 200
        repeated = await client.post("/user/logout", headers=bearer(phone["refreshToken"]))
        assert repeated.status_code == status.HTTP_403_FORBIDDEN

        async with request_sessions() as fresh:
            assert await RefreshTokenStore.list_tokens(fresh, phone["id"]) == []

        response = await client.post("/user/refreshToken", headers=bearer(laptop["refreshToken"]))
        assert response.status_code == status.HTTP_403_FORBIDDEN
