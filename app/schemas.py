"""
Request and response models for the HTTP API.

JSON bodies use camelCase keys; Python code uses the snake_case field names.
Request fields are optional at the schema level so that missing values reach
the services and are reported as 400 validation errors with a readable message.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ===== Auth =====


class UserRegister(CamelModel):
    email: str | None = Field(default=None, description="Email for the new account")
    password: str | None = Field(
        default=None, description="Password for the new account"
    )
    nickname: str | None = Field(default=None, description="Public display name")


class UserLogin(CamelModel):
    email: str | None = Field(default=None, description="Email for login")
    password: str | None = Field(default=None, description="Password for login")


class UserInfo(CamelModel):
    id: int = Field(..., description="User identifier")
    email: str
    nickname: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class AuthResponse(CamelModel):
    message: str
    user: UserInfo


class RefreshResponse(CamelModel):
    message: str
    access_token: str


class MessageResponse(CamelModel):
    message: str = Field(..., description="Response message")


class TokenPair(CamelModel):
    access_token: str
    refresh_token: str


# ===== Images =====


class GenerateImageRequest(CamelModel):
    prompt: str | None = Field(default=None, description="Text prompt for the image")
    model: str | None = Field(
        default=None, description="Provider model; the configured default if omitted"
    )


class GenerateImageResponse(CamelModel):
    success: bool = True
    image_url: str


class PreviewImageResponse(CamelModel):
    data_url: str


class ImageOwner(CamelModel):
    id: int
    nickname: str


class GeneratedImageInfo(CamelModel):
    id: int
    user_id: int
    prompt: str
    image_url: str
    model: str
    size: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
    user: ImageOwner | None = None


class PaginatedImages(CamelModel):
    success: bool = True
    images: list[GeneratedImageInfo]
    total_count: int
    current_page: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool


class UserImagesResponse(CamelModel):
    success: bool = True
    images: list[GeneratedImageInfo]


class ImageDetailResponse(CamelModel):
    success: bool = True
    image: GeneratedImageInfo
