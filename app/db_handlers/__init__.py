from app.db_handlers.base import BaseDBHandler, check_local_db
from app.db_handlers.generated_image import GeneratedImageDBHandler
from app.db_handlers.login_attempt import LoginAttemptDBHandler
from app.db_handlers.user import UserDBHandler

__all__ = [
    "BaseDBHandler",
    "check_local_db",
    "UserDBHandler",
    "LoginAttemptDBHandler",
    "GeneratedImageDBHandler",
]
