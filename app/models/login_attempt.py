"""
LoginAttempt model: append-only audit trail of failed logins.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql.functions import now as db_now

from app.models.base import SCHEMA_NAME, Base, IntegerIDMixin, TimestampMixin


class LoginAttempt(Base, IntegerIDMixin, TimestampMixin):
    """A password-mismatch login failure for an existing user."""

    __tablename__ = "login_attempts"
    __table_args__ = (
        Index("ix_login_attempts_user_id", "user_id"),
        {"schema": SCHEMA_NAME},
    )

    user_id = Column(
        Integer,
        ForeignKey(f"{SCHEMA_NAME}.users.id"),
        nullable=False,
        comment="User whose password check failed",
    )

    failed_at = Column(
        DateTime(timezone=True),
        server_default=db_now(),
        nullable=False,
        comment="When the failed attempt happened",
    )

    ip_address = Column(String(255), nullable=True)
    user_agent = Column(String(512), nullable=True)

    user = relationship("User", back_populates="login_attempts")

    def __repr__(self):
        return f"<LoginAttempt(id={self.id}, user_id={self.user_id}, failed_at={self.failed_at})>"
