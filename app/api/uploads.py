"""
Upload serving route: streams stored image files back to clients.
"""

import asyncio

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse, Response

from app.services.image_storage import guess_content_type, resolve_upload_path
from app.utils.logger import setup_logger

logger = setup_logger("api.uploads")

router = APIRouter(prefix="/api/uploads", tags=["Uploads"])

CACHE_CONTROL = "public, max-age=31536000, immutable"


@router.get("/{file_path:path}")
async def serve_upload(file_path: str):
    """Serve a file below the upload root with a content type from its extension."""
    path = resolve_upload_path(file_path)
    if path is None or not path.is_file():
        return PlainTextResponse("File not found", status_code=404)

    try:
        content = await asyncio.to_thread(path.read_bytes)
    except OSError as e:
        logger.error(f"Error serving upload {file_path}: {e}", exc_info=True)
        return PlainTextResponse("Internal Server Error", status_code=500)

    return Response(
        content=content,
        media_type=guess_content_type(path.name),
        headers={"Cache-Control": CACHE_CONTROL},
    )
