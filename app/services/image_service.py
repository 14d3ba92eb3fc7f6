"""
Image Generation and Gallery Service.

Generation flow: validate the prompt, call the provider that serves the
requested model, write the returned image under the upload root, then insert
the ``GeneratedImage`` row. Failures at any step raise typed ``AppError``s
that the route layer turns into responses.

Gallery flow: paginated, newest-first listing with the owner's nickname, plus
per-user and per-id lookups.
"""

import asyncio
import math
from collections.abc import Callable
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError

from app.config import settings
from app.db_handlers.generated_image import GeneratedImageDBHandler
from app.schemas import (
    GeneratedImageInfo,
    GenerateImageResponse,
    PaginatedImages,
    PreviewImageResponse,
)
from app.services.image_interface import ImageProviderInterface, ProviderImage
from app.services.image_provider_service import (
    get_image_client,
    image_size_for_provider,
    resolve_provider_for_model,
)
from app.services.image_storage import (
    UPLOADS_API_PREFIX,
    resolve_upload_path,
    save_image_to_file_system,
)
from app.utils.exceptions import (
    DatabaseError,
    ImageGenerationError,
    NotFoundError,
    ValidationError,
)
from app.utils.logger import setup_logger

logger = setup_logger("image_service")

ProviderGetter = Callable[[str], ImageProviderInterface | None]


def normalize_pagination(
    page: int | None, limit: int | None, max_limit: int | None = None
) -> tuple[int, int]:
    """Clamp to ``page >= 1`` and ``1 <= limit <= max_limit``."""
    max_limit = max_limit or settings.gallery_max_page_size
    page = max(page or 1, 1)
    if limit is None:
        limit = settings.gallery_default_page_size
    limit = min(max(limit, 1), max_limit)
    return page, limit


def build_page(
    images: list[GeneratedImageInfo], total_count: int, page: int, limit: int
) -> PaginatedImages:
    total_pages = math.ceil(total_count / limit)
    return PaginatedImages(
        images=images,
        total_count=total_count,
        current_page=page,
        total_pages=total_pages,
        has_next_page=page < total_pages,
        has_prev_page=page > 1,
    )


class ImageService:
    def __init__(
        self,
        image_db_handler: GeneratedImageDBHandler | None = None,
        provider_getter: ProviderGetter = get_image_client,
        upload_root: Path | None = None,
    ):
        self.image_db_handler = image_db_handler or GeneratedImageDBHandler()
        self.provider_getter = provider_getter
        self.upload_root = upload_root

    async def _request_image(self, prompt: str | None, model: str | None) -> ProviderImage:
        prompt = (prompt or "").strip()
        if not prompt:
            raise ValidationError("A prompt is required.")

        model = (model or "").strip() or settings.default_image_model
        provider_name = resolve_provider_for_model(model)
        client = self.provider_getter(provider_name)
        if client is None:
            raise ImageGenerationError(
                f"Image provider '{provider_name}' is not configured."
            )

        return await client.generate_image(
            prompt, model, image_size_for_provider(provider_name)
        )

    async def generate_image(
        self, prompt: str | None, model: str | None, user_id: int
    ) -> GenerateImageResponse:
        """Generate, store and record one image for ``user_id``."""
        generated = await self._request_image(prompt, model)
        prompt = prompt.strip()

        image_url = await save_image_to_file_system(
            generated.source, user_id, self.upload_root
        )

        try:
            await self.image_db_handler.create_image(
                {
                    "user_id": user_id,
                    "prompt": prompt,
                    "image_url": image_url,
                    "model": generated.model,
                    "size": generated.size,
                }
            )
        except SQLAlchemyError as e:
            logger.error(
                f"Failed to record generated image for user {user_id}: {e}",
                exc_info=True,
            )
            self._discard_file(image_url)
            raise DatabaseError("Failed to save image information.") from e
        except BaseException:
            self._discard_file(image_url)
            raise

        logger.info(f"User {user_id} generated {image_url} with {generated.model}")
        return GenerateImageResponse(image_url=image_url)

    async def preview_image(
        self, prompt: str | None, model: str | None
    ) -> PreviewImageResponse:
        """Generate an image without storing it, returned as a data URL."""
        generated = await self._request_image(prompt, model)
        return PreviewImageResponse(data_url=generated.as_data_url())

    def _discard_file(self, image_url: str) -> None:
        relative = image_url.removeprefix(UPLOADS_API_PREFIX)
        path = resolve_upload_path(relative, self.upload_root)
        if path is None:
            return
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not remove orphaned image file {path}: {e}")

    async def get_all_images(
        self, page: int | None = 1, limit: int | None = None
    ) -> PaginatedImages:
        page, limit = normalize_pagination(page, limit)
        skip = (page - 1) * limit

        # Two independent sessions; count and page may disagree under concurrent writes
        rows, total_count = await asyncio.gather(
            self.image_db_handler.get_page(skip=skip, limit=limit),
            self.image_db_handler.count_all(),
        )
        images = [GeneratedImageInfo.model_validate(row) for row in rows]
        return build_page(images, total_count, page, limit)

    async def get_user_images(self, user_id: int) -> list[GeneratedImageInfo]:
        rows = await self.image_db_handler.get_by_user(user_id)
        return [GeneratedImageInfo.model_validate(row) for row in rows]

    async def get_image_by_id(self, image_id: int) -> GeneratedImageInfo:
        image = await self.image_db_handler.get_with_owner(image_id)
        if image is None:
            raise NotFoundError("Image not found.")
        return GeneratedImageInfo.model_validate(image)
