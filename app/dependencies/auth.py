"""
Authentication dependencies for FastAPI route protection.

The access token travels in the ``accessToken`` HTTP-only cookie; these
dependencies resolve it to the caller's user id without a database lookup.
"""

from fastapi import Depends, Request

from app.schemas import UserInfo
from app.services.auth_service import AuthService


def get_auth_service() -> AuthService:
    return AuthService()


async def get_current_user_id(request: Request) -> int:
    """
    Dependency returning the authenticated user's id.

    Raises ``AuthError`` (401) with ``NO_ACCESS_TOKEN`` or ``INVALID_TOKEN``.
    """
    return AuthService.get_user_id_from_cookie(request.cookies)


async def get_current_user(
    user_id: int = Depends(get_current_user_id),
    auth_service: AuthService = Depends(get_auth_service),
) -> UserInfo:
    """Dependency loading the authenticated user's profile."""
    return await auth_service.get_user(user_id)
