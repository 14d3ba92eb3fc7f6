from __future__ import annotations

import re

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db_handlers.base import BaseDBHandler, check_local_db
from app.models.user import User
from app.utils.exceptions import EMAIL_TAKEN, NICKNAME_TAKEN, ConflictError
from app.utils.logger import setup_logger

logger = setup_logger("db_handlers.user")

NICKNAME_CONSTRAINT = "uq_users_nickname"

_CONSTRAINT_IN_MESSAGE = re.compile(r'constraint "([^"]+)"')


def _violated_constraint(error: IntegrityError) -> str | None:
    """Name of the unique constraint behind ``error``, if it can be determined.

    asyncpg reports it as ``constraint_name`` on the driver exception, which
    SQLAlchemy's adapter chains as ``__cause__`` of ``error.orig``. Other
    drivers only carry it in the message text, so the first quoted name after
    ``constraint`` is used there.
    """
    orig = getattr(error, "orig", None)
    for candidate in (orig, getattr(orig, "__cause__", None)):
        name = getattr(candidate, "constraint_name", None)
        if isinstance(name, str) and name:
            return name

    match = _CONSTRAINT_IN_MESSAGE.search(str(orig if orig is not None else error))
    return match.group(1) if match else None


class UserDBHandler(BaseDBHandler[User]):
    def __init__(self):
        super().__init__(User)

    @check_local_db
    async def get_user_by_email(
        self, email: str, *, db: AsyncSession = None
    ) -> User | None:
        """Get a user by email."""
        try:
            stmt = select(User).filter(User.email == email)
            result = await db.execute(stmt)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving user by email '{email}': {e}")
            raise

    @check_local_db
    async def get_user_by_nickname(
        self, nickname: str, *, db: AsyncSession = None
    ) -> User | None:
        """Get a user by nickname."""
        stmt = select(User).filter(User.nickname == nickname)
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    @check_local_db
    async def create_user(
        self, email: str, nickname: str, password_hash: str, *, db: AsyncSession = None
    ) -> User:
        """
        Insert a user row.

        A unique constraint violation (a concurrent registration won the race
        after the pre-checks) is reported as a ``ConflictError``.
        """
        try:
            return await self.create(
                {"email": email, "nickname": nickname, "password_hash": password_hash},
                db=db,
            )
        except IntegrityError as e:
            if _violated_constraint(e) == NICKNAME_CONSTRAINT:
                raise ConflictError(
                    "Nickname is already in use.", code=NICKNAME_TAKEN
                ) from e
            raise ConflictError("Email is already in use.", code=EMAIL_TAKEN) from e
