"""
Food Catalog Backend: Image Serving Route
==========================================

What:  GET /api/uploads/foods/{filename} returns a stored food image.
How:   The filename is resolved through FileStore.path_for, which refuses
       anything outside the upload directory. Only regular files are served.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from food_catalog.exceptions import NotFoundError
from food_catalog.services.file_store import FileStore, get_file_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/uploads", tags=["Uploads"])


@router.get(
    "/foods/{filename}",
    summary="Serve an uploaded food image",
    responses={
        200: {"description": "Image file"},
        404: {"description": "File not found"},
    },
)
async def serve_image(
    filename: str,
    store: FileStore = Depends(get_file_store),
) -> FileResponse:
    path = store.path_for(filename)
    info = await store.info(filename)
    if info is None:
        raise NotFoundError(resource="file", resource_id=filename)

    logger.debug("Serving image %s (%d bytes)", filename, info.size)

    # media_type is guessed from the extension; FileResponse adds
    # Last-Modified and ETag
    return FileResponse(
        path=str(path),
        headers={"Cache-Control": "public, max-age=86400"},
    )
