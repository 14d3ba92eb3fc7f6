"""
User model for authentication and image ownership.

Architecture:
    User → LoginAttempt (failed logins)
    User → GeneratedImage (gallery entries)

Users are created at registration and never deleted. Email and nickname are
unique; the database constraints are the final arbiter of uniqueness.
"""

from sqlalchemy import Column, String, UniqueConstraint
from sqlalchemy.orm import relationship

from app.models.base import SCHEMA_NAME, Base, IntegerIDMixin, TimestampMixin


class User(Base, IntegerIDMixin, TimestampMixin):
    """
    Registered account that owns generated images.
    """

    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        UniqueConstraint("nickname", name="uq_users_nickname"),
        {"schema": SCHEMA_NAME},
    )

    email = Column(
        String(255),
        nullable=False,
        comment="Unique, lower-cased email used for login",
    )

    nickname = Column(
        String(50),
        nullable=False,
        comment="Unique display name shown in the gallery",
    )

    password_hash = Column(
        String(255),
        nullable=False,
        comment="Bcrypt hashed password",
    )

    login_attempts = relationship(
        "LoginAttempt",
        back_populates="user",
        doc="Failed login attempts recorded for this user",
    )

    images = relationship(
        "GeneratedImage",
        back_populates="user",
        doc="Images generated by this user",
    )

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', nickname='{self.nickname}')>"
