"""
Application error taxonomy.

Services raise these typed errors; ``main.create_app`` registers a single
handler that turns any ``AppError`` into a JSON response carrying the status
code, the message and the optional machine-readable ``code`` tag.
"""

from fastapi import status


class AppError(Exception):
    """Base class for errors that map directly onto an HTTP response."""

    default_status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        code: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code or self.default_status_code
        self.code = code

    def to_dict(self) -> dict:
        body = {"message": self.message}
        if self.code:
            body["code"] = self.code
        return body

    def __repr__(self):
        return f"<{type(self).__name__}(status={self.status_code}, code={self.code!r}, message={self.message!r})>"


class ValidationError(AppError):
    default_status_code = status.HTTP_400_BAD_REQUEST


class AuthError(AppError):
    """Tagged authentication failure (bad password, missing or invalid token)."""

    default_status_code = status.HTTP_401_UNAUTHORIZED


class ConflictError(AppError):
    default_status_code = status.HTTP_409_CONFLICT


class NotFoundError(AppError):
    default_status_code = status.HTTP_404_NOT_FOUND


class ImageGenerationError(AppError):
    """The external image provider failed or refused the request."""

    default_status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class StorageError(AppError):
    """Downloading, decoding or writing an image file failed."""

    default_status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class DatabaseError(AppError):
    default_status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


# Error codes carried in the ``code`` field
INVALID_PASSWORD = "INVALID_PASSWORD"
EMAIL_NOT_FOUND = "EMAIL_NOT_FOUND"
INVALID_TOKEN = "INVALID_TOKEN"
NO_ACCESS_TOKEN = "NO_ACCESS_TOKEN"
NO_REFRESH_TOKEN = "NO_REFRESH_TOKEN"
INVALID_REFRESH_TOKEN = "INVALID_REFRESH_TOKEN"
USER_NOT_FOUND = "USER_NOT_FOUND"
EMAIL_TAKEN = "EMAIL_TAKEN"
NICKNAME_TAKEN = "NICKNAME_TAKEN"
