from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from app.db_handlers.base import BaseDBHandler, check_local_db
from app.models.login_attempt import LoginAttempt


class LoginAttemptDBHandler(BaseDBHandler[LoginAttempt]):
    def __init__(self):
        super().__init__(LoginAttempt)

    @check_local_db
    async def record_failed_attempt(
        self,
        user_id: int,
        ip_address: str | None = None,
        user_agent: str | None = None,
        *,
        db: AsyncSession = None,
    ) -> LoginAttempt:
        """Append one failed-login row for ``user_id``."""
        return await self.create(
            {
                "user_id": user_id,
                "failed_at": datetime.now(UTC),
                "ip_address": ip_address,
                "user_agent": user_agent,
            },
            db=db,
        )

    @check_local_db
    async def count_for_user(self, user_id: int, *, db: AsyncSession = None) -> int:
        return await self.count(db=db, user_id=user_id)
