from app.services.image_service import ImageService


def get_image_service() -> ImageService:
    return ImageService()
