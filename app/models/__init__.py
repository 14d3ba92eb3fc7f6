"""
Database models for the image gallery.

Architecture: User → GeneratedImage, User → LoginAttempt.
"""

from app.models.generated_image import GeneratedImage
from app.models.login_attempt import LoginAttempt
from app.models.user import User

__all__ = [
    "User",
    "LoginAttempt",
    "GeneratedImage",
]
