from app.dependencies.auth import (
    get_auth_service,
    get_current_user,
    get_current_user_id,
)
from app.dependencies.images import get_image_service

__all__ = [
    "get_auth_service",
    "get_current_user",
    "get_current_user_id",
    "get_image_service",
]
