"""
GeneratedImage model linking a prompt and provider model to a stored file.

Rows are created only after the image file has been written under the upload
root, so ``image_url`` always points at a servable file. Rows are immutable.
"""

from sqlalchemy import Column, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from app.models.base import SCHEMA_NAME, Base, IntegerIDMixin, TimestampMixin


class GeneratedImage(Base, IntegerIDMixin, TimestampMixin):
    """An image produced by an external provider for one user."""

    __tablename__ = "generated_images"
    __table_args__ = (
        Index("ix_generated_images_user_id", "user_id"),
        Index("ix_generated_images_created_at", "created_at"),
        {"schema": SCHEMA_NAME},
    )

    user_id = Column(
        Integer,
        ForeignKey(f"{SCHEMA_NAME}.users.id"),
        nullable=False,
        comment="Owner of the image",
    )

    prompt = Column(Text, nullable=False, comment="Prompt sent to the provider")

    image_url = Column(
        String(512),
        nullable=False,
        comment="API-relative path under /api/uploads where the file is served",
    )

    model = Column(String(100), nullable=False, comment="Provider model identifier")

    size = Column(String(20), nullable=False, comment="Image size, e.g. 1024x1024")

    user = relationship("User", back_populates="images")

    def __repr__(self):
        return f"<GeneratedImage(id={self.id}, user_id={self.user_id}, model='{self.model}')>"
