# Authentication API routes: registration, login, token refresh, logout and profile

from fastapi import APIRouter, Depends, Request, Response, status

from app.dependencies.auth import get_auth_service, get_current_user
from app.schemas import (
    AuthResponse,
    MessageResponse,
    RefreshResponse,
    UserInfo,
    UserLogin,
    UserRegister,
)
from app.services.auth_service import REFRESH_TOKEN_COOKIE, AuthService
from app.utils.exceptions import INVALID_PASSWORD, NO_REFRESH_TOKEN, AuthError, ValidationError
from app.utils.logger import setup_logger

logger = setup_logger("api.auth")

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


def get_client_ip(request: Request) -> str:
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip
    if request.client:
        return request.client.host
    return "unknown"


@router.post(
    "/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED
)
async def register_user(
    user_data: UserRegister,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Register a new user with email, password and nickname."""
    user = await auth_service.register(
        user_data.email, user_data.password, user_data.nickname
    )
    return AuthResponse(message="Registration completed.", user=user)


@router.post("/login", response_model=AuthResponse)
async def login_user(
    user_data: UserLogin,
    request: Request,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Authenticate the user and set the access and refresh token cookies."""
    try:
        user, tokens = await auth_service.login(user_data.email, user_data.password)
    except AuthError as e:
        if e.code == INVALID_PASSWORD:
            await auth_service.record_login_attempt(
                user_data.email,
                ip_address=get_client_ip(request),
                user_agent=request.headers.get("user-agent", "unknown"),
            )
        raise

    auth_service.set_auth_cookies(response, tokens)
    return AuthResponse(message="Login completed.", user=user)


@router.post("/refresh", response_model=RefreshResponse)
async def refresh_access_token(
    request: Request,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Issue a new access token from the refresh token cookie (or header)."""
    refresh_token = request.cookies.get(REFRESH_TOKEN_COOKIE) or request.headers.get(
        REFRESH_TOKEN_COOKIE
    )
    if not refresh_token:
        raise ValidationError("No refresh token.", code=NO_REFRESH_TOKEN)

    access_token = await auth_service.refresh_access_token(refresh_token)
    auth_service.set_access_cookie(response, access_token)
    return RefreshResponse(message="Access token refreshed.", access_token=access_token)


@router.post("/logout", response_model=MessageResponse)
async def logout_user(
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Clear the token cookies."""
    auth_service.logout(response)
    return MessageResponse(message="Logged out.")


@router.get("/me", response_model=UserInfo)
async def get_current_user_info(current_user: UserInfo = Depends(get_current_user)):
    """Retrieve the current authenticated user's profile information."""
    return current_user
