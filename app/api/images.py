"""
Image API Routes - generation and gallery endpoints.

Generation requires the access-token cookie; the gallery endpoints are public.
"""

from fastapi import APIRouter, Depends, Query

from app.dependencies.auth import get_current_user_id
from app.dependencies.images import get_image_service
from app.schemas import (
    GenerateImageRequest,
    GenerateImageResponse,
    ImageDetailResponse,
    PaginatedImages,
    PreviewImageResponse,
    UserImagesResponse,
)
from app.services.image_service import ImageService
from app.utils.exceptions import ValidationError
from app.utils.logger import setup_logger

logger = setup_logger("api.images")

router = APIRouter(prefix="/api", tags=["Images"])


@router.get("/")
async def read_root():
    """API health check endpoint."""
    return {"message": "Image Gallery API is running!"}


@router.post("/generate-image", response_model=GenerateImageResponse)
async def generate_image(
    request_data: GenerateImageRequest,
    user_id: int = Depends(get_current_user_id),
    image_service: ImageService = Depends(get_image_service),
):
    """Generate an image for the current user and add it to the gallery."""
    return await image_service.generate_image(
        request_data.prompt, request_data.model, user_id
    )


@router.post("/generate-image-preview", response_model=PreviewImageResponse)
async def generate_image_preview(
    request_data: GenerateImageRequest,
    user_id: int = Depends(get_current_user_id),
    image_service: ImageService = Depends(get_image_service),
):
    """Generate an image and return it as a data URL without storing it."""
    logger.info(f"Preview generation requested by user {user_id}")
    return await image_service.preview_image(request_data.prompt, request_data.model)


@router.get("/images", response_model=PaginatedImages)
async def get_all_images(
    page: int = Query(1, description="One-based page number"),
    limit: int | None = Query(None, description="Images per page"),
    image_service: ImageService = Depends(get_image_service),
):
    """List gallery images, newest first, with pagination metadata."""
    return await image_service.get_all_images(page, limit)


@router.get("/images/user", response_model=UserImagesResponse)
async def get_user_images(
    user_id: int | None = Query(None, alias="userId"),
    image_service: ImageService = Depends(get_image_service),
):
    """List all images of one user, newest first."""
    if user_id is None:
        raise ValidationError("A userId is required.")
    images = await image_service.get_user_images(user_id)
    return UserImagesResponse(images=images)


@router.get("/images/{image_id}", response_model=ImageDetailResponse)
async def get_image(
    image_id: int,
    image_service: ImageService = Depends(get_image_service),
):
    """Retrieve one image with its owner's nickname."""
    image = await image_service.get_image_by_id(image_id)
    return ImageDetailResponse(image=image)
