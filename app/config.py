"""
Centralized configuration management using pydantic-settings.
This module provides a single source of truth for all application configuration.
"""


import os

from dotenv import load_dotenv
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.utils.logger import setup_logger

load_dotenv(override=True)


logger = setup_logger("core_config")

DEFAULT_JWT_SECRET = "your-secret-key-change-this-in-production"


class Settings(BaseSettings):
    """
    Application settings managed by pydantic-settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        # Allow override from environment variables
        env_prefix="",
    )

    environment: str = Field(
        default="development",
        alias="ENVIRONMENT",
        description="Deployment environment (development, production, testing)",
    )

    # ===== Database Configuration =====
    image_gallery_schema: str = Field(
        default="image_gallery",
        alias="IMAGE_GALLERY_SCHEMA",
        description="Database schema name",
    )

    app_database_url: str | None = Field(
        default=None,
        alias="IMAGE_GALLERY_DATABASE_URL",
        description="Application database URL",
    )

    # ===== Authentication Configuration =====
    jwt_secret: str = Field(
        default=DEFAULT_JWT_SECRET,
        alias="JWT_SECRET",
        description="Secret key used to sign access and refresh tokens",
    )

    jwt_algorithm: str = Field(
        default="HS256",
        alias="JWT_ALGORITHM",
        description="JWT signing algorithm",
    )

    access_token_expire_minutes: int = Field(
        default=15,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
        description="Access token lifetime in minutes",
    )

    refresh_token_expire_days: int = Field(
        default=7,
        alias="REFRESH_TOKEN_EXPIRE_DAYS",
        description="Refresh token lifetime in days",
    )

    bcrypt_rounds: int = Field(
        default=12,
        alias="BCRYPT_ROUNDS",
        description="bcrypt cost factor for password hashing",
    )

    # ===== OpenAI Configuration =====
    openai_api_key: str | None = Field(
        default=None,
        alias="OPENAI_API_KEY",
        description="OpenAI API key for accessing the image generation API",
    )

    openai_base_url: str | None = Field(
        default=None,
        alias="OPENAI_BASE_URL",
        description="OpenAI API base URL, defaults to https://api.openai.com/v1",
    )

    default_image_model: str = Field(
        default="dall-e-3",
        alias="DEFAULT_IMAGE_MODEL",
        description="Default image model used when a request does not name one",
    )

    default_image_size: str = Field(
        default="1024x1024",
        alias="DEFAULT_IMAGE_SIZE",
        description="Square image size requested from OpenAI",
    )

    # ===== Stable Diffusion Configuration =====
    stable_diffusion_api_url: str | None = Field(
        default=None,
        alias="STABLE_DIFFUSION_API_URL",
        description="Base URL of a Stable Diffusion WebUI instance",
    )

    stable_diffusion_api_key: str | None = Field(
        default=None,
        alias="STABLE_DIFFUSION_API_KEY",
        description="Credentials sent as HTTP Basic token to Stable Diffusion",
    )

    stable_diffusion_image_size: str = Field(
        default="768x768",
        alias="STABLE_DIFFUSION_IMAGE_SIZE",
        description="Square image size requested from Stable Diffusion",
    )

    # ===== Timeout Configuration =====
    image_download_timeout: float = Field(
        default=60.0,
        alias="IMAGE_DOWNLOAD_TIMEOUT",
        description="Timeout in seconds for downloading provider-hosted images",
    )

    stable_diffusion_timeout: float = Field(
        default=120.0,
        alias="STABLE_DIFFUSION_TIMEOUT",
        description="Timeout in seconds for a Stable Diffusion txt2img call",
    )

    # ===== Storage Configuration =====
    upload_root: str = Field(
        default="uploads",
        alias="UPLOAD_ROOT",
        description="Root directory for stored image files",
    )

    # ===== Gallery Configuration =====
    gallery_default_page_size: int = Field(
        default=20,
        alias="GALLERY_DEFAULT_PAGE_SIZE",
        description="Number of images per gallery page when no limit is given",
    )

    gallery_max_page_size: int = Field(
        default=100,
        alias="GALLERY_MAX_PAGE_SIZE",
        description="Upper bound for the gallery page size",
    )

    # ===== Server Configuration =====
    server_host: str = Field(
        default="0.0.0.0", alias="SERVER_HOST", description="Server host address"
    )

    server_port: int = Field(
        default=8080, alias="SERVER_PORT", description="Server port number"
    )

    server_workers: int = Field(
        default=1, alias="SERVER_WORKERS", description="Number of uvicorn workers"
    )

    # ===== CORS Configuration =====
    cors_allow_origins: list[str] = Field(
        default_factory=lambda: [
            "http://localhost:3000",  # Frontend dev server
            "http://127.0.0.1:3000",  # Local IP variant
        ],
        alias="CORS_ALLOW_ORIGINS",
        description="CORS allowed origins",
    )

    # Cookies carry the tokens, so credentials must be allowed
    cors_allow_credentials: bool = Field(
        default=True,
        alias="CORS_ALLOW_CREDENTIALS",
        description="Whether to allow credentials in CORS requests",
    )

    cors_allow_methods: list[str] = Field(
        default_factory=lambda: ["*"],
        alias="CORS_ALLOW_METHODS",
        description="CORS allowed methods",
    )

    cors_allow_headers: list[str] = Field(
        default_factory=lambda: ["*"],
        alias="CORS_ALLOW_HEADERS",
        description="CORS allowed headers",
    )

    # User-facing hint for database connection errors
    db_unavailable_hint: str = os.getenv(
        "DB_UNAVAILABLE_HINT",
        "Database connection failed. The server may be offline or network connectivity is down.",
    )

    @model_validator(mode="after")
    def validate_settings(self) -> "Settings":
        """Validate settings and log warnings for missing critical configurations."""

        if self.jwt_secret == DEFAULT_JWT_SECRET:
            logger.warning("JWT_SECRET not set, using the insecure default secret.")

        if not self.openai_api_key:
            logger.warning("OPENAI_API_KEY environment variable not set.")

        if not self.app_database_url:
            logger.warning("IMAGE_GALLERY_DATABASE_URL environment variable not set.")

        if self.gallery_max_page_size < 1:
            raise ValueError("GALLERY_MAX_PAGE_SIZE must be at least 1")

        logger.debug(f"Using database schema: {self.image_gallery_schema}")
        logger.debug(f"Upload root: {self.upload_root}")

        return self

    @property
    def schema_name(self) -> str:
        return self.image_gallery_schema

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


# Global settings instance
settings = Settings()

SCHEMA_NAME = settings.schema_name
