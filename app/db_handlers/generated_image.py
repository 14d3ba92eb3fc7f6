from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.db_handlers.base import BaseDBHandler, check_local_db
from app.models.generated_image import GeneratedImage
from app.utils.logger import setup_logger

logger = setup_logger("db_handlers.generated_image")


class GeneratedImageDBHandler(BaseDBHandler[GeneratedImage]):
    def __init__(self):
        super().__init__(GeneratedImage)

    @check_local_db
    async def create_image(
        self, obj_dict: dict[str, Any], *, db: AsyncSession = None
    ) -> GeneratedImage:
        """Insert an image row and return it with its owner loaded."""
        image = await self.create(obj_dict, db=db)
        await db.refresh(image, attribute_names=["user"])
        logger.info(
            f"Stored image record {image.id} for user {image.user_id} ({image.image_url})"
        )
        return image

    @check_local_db
    async def get_page(
        self, *, skip: int, limit: int, db: AsyncSession = None
    ) -> list[GeneratedImage]:
        """One gallery page, newest first, owners preloaded."""
        return await self.get_multi_by_attributes(
            db=db,
            skip=skip,
            limit=limit,
            order_by=[GeneratedImage.created_at.desc(), GeneratedImage.id.desc()],
            options=[selectinload(GeneratedImage.user)],
        )

    @check_local_db
    async def count_all(self, *, db: AsyncSession = None) -> int:
        return await self.count(db=db)

    @check_local_db
    async def get_by_user(
        self, user_id: int, *, db: AsyncSession = None
    ) -> list[GeneratedImage]:
        """All images of one user, newest first."""
        return await self.get_multi_by_attributes(
            db=db,
            user_id=user_id,
            limit=None,
            order_by=[GeneratedImage.created_at.desc(), GeneratedImage.id.desc()],
            options=[selectinload(GeneratedImage.user)],
        )

    @check_local_db
    async def get_with_owner(
        self, image_id: int, *, db: AsyncSession = None
    ) -> GeneratedImage | None:
        return await self.get_by_attributes(
            db=db, id=image_id, options=[selectinload(GeneratedImage.user)]
        )
