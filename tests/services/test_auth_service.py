from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from fastapi import Response
from sqlalchemy.exc import OperationalError

from app.services.auth_service import (
    ACCESS_TOKEN_COOKIE,
    REFRESH_TOKEN_COOKIE,
    AuthService,
    validate_register_data,
)
from app.utils.auth import (
    REFRESH_TOKEN,
    create_access_token,
    create_refresh_token,
    extract_user_id_from_token,
)
from app.utils.exceptions import (
    EMAIL_NOT_FOUND,
    EMAIL_TAKEN,
    INVALID_PASSWORD,
    INVALID_REFRESH_TOKEN,
    INVALID_TOKEN,
    NICKNAME_TAKEN,
    NO_ACCESS_TOKEN,
    USER_NOT_FOUND,
    AuthError,
    ConflictError,
    NotFoundError,
    ValidationError,
)


async def _register(auth_service, email="a@b.co", password="secret1", nickname="Al"):
    return await auth_service.register(email, password, nickname)


class TestRegisterValidation:
    @pytest.mark.parametrize(
        "email,password,nickname",
        [
            ("", "secret1", "Al"),
            ("a@b.co", "", "Al"),
            ("a@b.co", "secret1", ""),
            ("not-an-email", "secret1", "Al"),
            ("a@b", "secret1", "Al"),
            ("a@b.co", "12345", "Al"),
            ("a@b.co", "x" * 101, "Al"),
            ("a@b.co", "secret1", "A"),
            ("a@b.co", "secret1", "N" * 51),
        ],
    )
    def test_rejects_invalid_input(self, email, password, nickname):
        with pytest.raises(ValidationError) as exc_info:
            validate_register_data(email, password, nickname)
        assert exc_info.value.status_code == 400

    def test_accepts_boundary_values(self):
        validate_register_data("a@b.co", "123456", "Al")
        validate_register_data("a@b.co", "x" * 100, "N" * 50)


class TestRegister:
    @pytest.mark.asyncio
    async def test_register_returns_user_without_hash(self, auth_service, user_db_handler):
        user = await _register(auth_service)

        assert user.id == 1
        assert user.email == "a@b.co"
        assert user.nickname == "Al"
        assert "password_hash" not in user.model_dump()
        stored = user_db_handler.users[1]
        assert stored.password_hash != "secret1"

    @pytest.mark.asyncio
    async def test_register_normalizes_email_and_nickname(self, auth_service):
        user = await _register(auth_service, email="  A@B.Co ", nickname="  Al  ")

        assert user.email == "a@b.co"
        assert user.nickname == "Al"

    @pytest.mark.asyncio
    async def test_duplicate_email_is_case_insensitive(self, auth_service):
        await _register(auth_service)

        with pytest.raises(ConflictError) as exc_info:
            await _register(auth_service, email="A@B.CO", nickname="Other")

        assert exc_info.value.status_code == 409
        assert exc_info.value.code == EMAIL_TAKEN

    @pytest.mark.asyncio
    async def test_duplicate_nickname(self, auth_service):
        await _register(auth_service)

        with pytest.raises(ConflictError) as exc_info:
            await _register(auth_service, email="other@b.co")

        assert exc_info.value.code == NICKNAME_TAKEN

    @pytest.mark.asyncio
    async def test_conflict_detected_at_insert(self, auth_service, user_db_handler):
        # The pre-check passes but the unique constraint fires on insert
        user_db_handler.get_user_by_email = AsyncMock(return_value=None)
        user_db_handler.get_user_by_nickname = AsyncMock(return_value=None)
        user_db_handler.create_user = AsyncMock(
            side_effect=ConflictError("Email is already in use.", code=EMAIL_TAKEN)
        )

        with pytest.raises(ConflictError) as exc_info:
            await _register(auth_service)

        assert exc_info.value.code == EMAIL_TAKEN


class TestLogin:
    @pytest.mark.asyncio
    async def test_login_issues_token_pair(self, auth_service):
        registered = await _register(auth_service)

        user, tokens = await auth_service.login(" A@B.CO ", "secret1")

        assert user.id == registered.id
        assert extract_user_id_from_token(tokens.access_token) == user.id
        assert extract_user_id_from_token(tokens.refresh_token, REFRESH_TOKEN) == user.id

    @pytest.mark.asyncio
    async def test_unknown_email(self, auth_service):
        with pytest.raises(AuthError) as exc_info:
            await auth_service.login("nobody@b.co", "secret1")

        assert exc_info.value.status_code == 400
        assert exc_info.value.code == EMAIL_NOT_FOUND

    @pytest.mark.asyncio
    async def test_wrong_password(self, auth_service):
        await _register(auth_service)

        with pytest.raises(AuthError) as exc_info:
            await auth_service.login("a@b.co", "wrong-password")

        assert exc_info.value.status_code == 400
        assert exc_info.value.code == INVALID_PASSWORD

    @pytest.mark.asyncio
    async def test_missing_credentials(self, auth_service):
        with pytest.raises(ValidationError):
            await auth_service.login("", "secret1")
        with pytest.raises(ValidationError):
            await auth_service.login("a@b.co", None)


class TestLoginAttempts:
    @pytest.mark.asyncio
    async def test_records_one_attempt(self, auth_service, login_attempt_db_handler):
        user = await _register(auth_service)

        recorded = await auth_service.record_login_attempt(
            "a@b.co", ip_address="10.0.0.1", user_agent="pytest"
        )

        assert recorded is True
        assert await login_attempt_db_handler.count_for_user(user.id) == 1
        attempt = login_attempt_db_handler.attempts[0]
        assert attempt.ip_address == "10.0.0.1"
        assert attempt.user_agent == "pytest"

    @pytest.mark.asyncio
    async def test_unknown_email_records_nothing(self, auth_service, login_attempt_db_handler):
        assert await auth_service.record_login_attempt("nobody@b.co") is False
        assert login_attempt_db_handler.attempts == []

    @pytest.mark.asyncio
    async def test_database_failure_is_swallowed(self, auth_service, login_attempt_db_handler):
        await _register(auth_service)
        login_attempt_db_handler.record_failed_attempt = AsyncMock(
            side_effect=OperationalError("INSERT", {}, Exception("connection lost"))
        )

        assert await auth_service.record_login_attempt("a@b.co") is False

    @pytest.mark.asyncio
    async def test_unreachable_database_is_swallowed(self, auth_service, login_attempt_db_handler):
        await _register(auth_service)
        login_attempt_db_handler.record_failed_attempt = AsyncMock(
            side_effect=ConnectionRefusedError(111, "Connection refused")
        )

        assert await auth_service.record_login_attempt("a@b.co") is False


class TestTokens:
    @pytest.mark.asyncio
    async def test_refresh_issues_new_access_token(self, auth_service):
        user = await _register(auth_service)

        access_token = await auth_service.refresh_access_token(create_refresh_token(user.id))

        assert extract_user_id_from_token(access_token) == user.id

    @pytest.mark.asyncio
    async def test_refresh_rejects_access_token(self, auth_service):
        user = await _register(auth_service)

        with pytest.raises(AuthError) as exc_info:
            await auth_service.refresh_access_token(create_access_token(user.id))

        assert exc_info.value.status_code == 401
        assert exc_info.value.code == INVALID_REFRESH_TOKEN

    @pytest.mark.asyncio
    async def test_refresh_for_deleted_user(self, auth_service):
        with pytest.raises(NotFoundError) as exc_info:
            await auth_service.refresh_access_token(create_refresh_token(999))

        assert exc_info.value.status_code == 404
        assert exc_info.value.code == USER_NOT_FOUND

    def test_user_id_from_cookie(self):
        assert AuthService.get_user_id_from_cookie(
            {ACCESS_TOKEN_COOKIE: create_access_token(8)}
        ) == 8

    def test_missing_cookie(self):
        with pytest.raises(AuthError) as exc_info:
            AuthService.get_user_id_from_cookie({})

        assert exc_info.value.status_code == 401
        assert exc_info.value.code == NO_ACCESS_TOKEN

    def test_invalid_cookie(self):
        with pytest.raises(AuthError) as exc_info:
            AuthService.get_user_id_from_cookie({ACCESS_TOKEN_COOKIE: "garbage"})

        assert exc_info.value.code == INVALID_TOKEN

    def test_cookies_are_http_only(self, auth_service):
        response = Response()
        tokens = auth_service.issue_tokens(SimpleNamespace(id=1))

        auth_service.set_auth_cookies(response, tokens)

        cookies = response.headers.getlist("set-cookie")
        assert len(cookies) == 2
        assert any(c.startswith(f"{ACCESS_TOKEN_COOKIE}=") and "Max-Age=900" in c for c in cookies)
        assert any(c.startswith(f"{REFRESH_TOKEN_COOKIE}=") and "Max-Age=604800" in c for c in cookies)
        assert all("HttpOnly" in c and "SameSite=lax" in c for c in cookies)
        assert not any("Secure" in c for c in cookies)

    @pytest.mark.asyncio
    async def test_get_user(self, auth_service):
        registered = await _register(auth_service)

        assert (await auth_service.get_user(registered.id)).email == "a@b.co"
        with pytest.raises(NotFoundError):
            await auth_service.get_user(404)
