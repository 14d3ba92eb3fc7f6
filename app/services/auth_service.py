"""
Authentication service: registration, login, token issuance and refresh.

Tokens are stateless JWTs delivered as HTTP-only cookies. Logging out clears
the cookies but cannot revoke tokens already issued; they stay valid until
they expire.
"""

import asyncio
import re

from fastapi import Response
from sqlalchemy.exc import SQLAlchemyError

from app.config import settings
from app.db_handlers.login_attempt import LoginAttemptDBHandler
from app.db_handlers.user import UserDBHandler
from app.models.user import User
from app.schemas import TokenPair, UserInfo
from app.utils.auth import (
    REFRESH_TOKEN,
    create_access_token,
    create_refresh_token,
    extract_user_id_from_token,
    get_password_hash,
    verify_password,
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
from app.utils.logger import setup_logger

logger = setup_logger("auth_service")

ACCESS_TOKEN_COOKIE = "accessToken"
REFRESH_TOKEN_COOKIE = "refreshToken"

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_LENGTH = 100
MIN_NICKNAME_LENGTH = 2
MAX_NICKNAME_LENGTH = 50


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def normalize_nickname(nickname: str | None) -> str:
    return (nickname or "").strip()


def validate_register_data(email: str, password: str, nickname: str) -> None:
    if not email or not password or not nickname:
        raise ValidationError("Email, password and nickname are required.")

    if not EMAIL_PATTERN.match(email):
        raise ValidationError("Please enter a valid email address.")

    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long."
        )
    if len(password) > MAX_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at most {MAX_PASSWORD_LENGTH} characters long."
        )

    if not MIN_NICKNAME_LENGTH <= len(nickname) <= MAX_NICKNAME_LENGTH:
        raise ValidationError(
            f"Nickname must be between {MIN_NICKNAME_LENGTH} and {MAX_NICKNAME_LENGTH} characters."
        )


class AuthService:
    def __init__(
        self,
        user_db_handler: UserDBHandler | None = None,
        login_attempt_db_handler: LoginAttemptDBHandler | None = None,
    ):
        self.user_db_handler = user_db_handler or UserDBHandler()
        self.login_attempt_db_handler = (
            login_attempt_db_handler or LoginAttemptDBHandler()
        )

    # ----- registration -----

    async def check_existing_user(self, email: str, nickname: str) -> None:
        if await self.user_db_handler.get_user_by_email(email):
            raise ConflictError("Email is already in use.", code=EMAIL_TAKEN)
        if await self.user_db_handler.get_user_by_nickname(nickname):
            raise ConflictError("Nickname is already in use.", code=NICKNAME_TAKEN)

    async def register(
        self, email: str | None, password: str | None, nickname: str | None
    ) -> UserInfo:
        """Create an account and return it without the password hash."""
        email = normalize_email(email)
        nickname = normalize_nickname(nickname)
        password = password or ""

        validate_register_data(email, password, nickname)
        try:
            await self.check_existing_user(email, nickname)
        except ConflictError as e:
            logger.warning(f"Registration rejected for {email}: {e.message}")
            raise

        password_hash = await asyncio.to_thread(get_password_hash, password)
        user = await self.user_db_handler.create_user(
            email=email, nickname=nickname, password_hash=password_hash
        )
        logger.info(f"Registered user {user.id} ({user.email})")
        return UserInfo.model_validate(user)

    # ----- login -----

    async def check_email_and_password(self, email: str, password: str) -> User:
        user = await self.user_db_handler.get_user_by_email(email)
        if user is None:
            raise AuthError(
                "No account exists for this email.",
                status_code=400,
                code=EMAIL_NOT_FOUND,
            )

        if not await asyncio.to_thread(verify_password, password, user.password_hash):
            raise AuthError(
                "The password does not match.",
                status_code=400,
                code=INVALID_PASSWORD,
            )
        return user

    async def login(
        self, email: str | None, password: str | None
    ) -> tuple[UserInfo, TokenPair]:
        email = normalize_email(email)
        if not email or not password:
            raise ValidationError("Email and password are required.")

        user = await self.check_email_and_password(email, password)
        tokens = self.issue_tokens(user)
        logger.info(f"User {user.id} logged in")
        return UserInfo.model_validate(user), tokens

    async def record_login_attempt(
        self,
        email: str | None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> bool:
        """
        Best-effort audit of a password-mismatch failure.

        Never raises: a failed audit write must not change the login response.
        Returns whether a row was written.
        """
        try:
            user = await self.user_db_handler.get_user_by_email(normalize_email(email))
            if user is None:
                return False
            await self.login_attempt_db_handler.record_failed_attempt(
                user.id, ip_address=ip_address, user_agent=user_agent
            )
            logger.warning(f"Failed login recorded for user {user.id} from {ip_address}")
            return True
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Failed to record login attempt for {email}: {e}", exc_info=True)
            return False

    # ----- tokens -----

    def issue_tokens(self, user: User) -> TokenPair:
        return TokenPair(
            access_token=create_access_token(user.id),
            refresh_token=create_refresh_token(user.id),
        )

    @staticmethod
    def _cookie_options() -> dict:
        return {
            "httponly": True,
            "secure": settings.is_production,
            "samesite": "lax",
            "path": "/",
        }

    def set_access_cookie(self, response: Response, access_token: str) -> None:
        response.set_cookie(
            ACCESS_TOKEN_COOKIE,
            access_token,
            max_age=settings.access_token_expire_minutes * 60,
            **self._cookie_options(),
        )

    def set_auth_cookies(self, response: Response, tokens: TokenPair) -> None:
        self.set_access_cookie(response, tokens.access_token)
        response.set_cookie(
            REFRESH_TOKEN_COOKIE,
            tokens.refresh_token,
            max_age=settings.refresh_token_expire_days * 24 * 60 * 60,
            **self._cookie_options(),
        )

    async def refresh_access_token(self, refresh_token: str) -> str:
        """Mint a new access token from a valid refresh token."""
        user_id = extract_user_id_from_token(refresh_token, REFRESH_TOKEN)
        if user_id is None:
            raise AuthError("Invalid refresh token.", code=INVALID_REFRESH_TOKEN)

        user = await self.user_db_handler.get(user_id)
        if user is None:
            raise NotFoundError("User not found.", code=USER_NOT_FOUND)

        return create_access_token(user.id)

    def logout(self, response: Response) -> None:
        options = self._cookie_options()
        for cookie_name in (ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE):
            response.delete_cookie(cookie_name, **options)

    @staticmethod
    def get_user_id_from_cookie(cookies: dict[str, str]) -> int:
        """Authenticate a request from its access-token cookie."""
        access_token = cookies.get(ACCESS_TOKEN_COOKIE)
        if not access_token:
            raise AuthError("No access token.", code=NO_ACCESS_TOKEN)

        user_id = extract_user_id_from_token(access_token)
        if user_id is None:
            raise AuthError("Invalid token.", code=INVALID_TOKEN)
        return user_id

    async def get_user(self, user_id: int) -> UserInfo:
        user = await self.user_db_handler.get(user_id)
        if user is None:
            raise NotFoundError("User not found.", code=USER_NOT_FOUND)
        return UserInfo.model_validate(user)
