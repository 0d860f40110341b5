"""
Food Catalog Backend: Image Upload Staging
===========================================

What:  FastAPI dependency that accepts the optional multipart field `image`,
       writes it to the upload directory and yields a StagedFile.
Who:   POST /api/foods and PUT /api/foods/{id}.
When:  Resolved before the route body runs, so the lifecycle service always
       receives an image that is already on disk (or None).

Ownership:
    From the moment stage() returns, the file belongs to FoodService: it is
    either claimed by the record or deleted as compensation. A write that
    fails part-way is removed by FileStore.stage itself.
"""

import logging
from typing import Optional

from fastapi import Depends, File, UploadFile

from food_catalog.services.file_store import FileStore, StagedFile, get_file_store

logger = logging.getLogger(__name__)

IMAGE_FIELD = "image"


async def staged_image(
    image: Optional[UploadFile] = File(
        default=None,
        description="Optional food image (jpg, jpeg, png, gif, webp)",
    ),
    store: FileStore = Depends(get_file_store),
) -> Optional[StagedFile]:
    """Stage the uploaded image, or return None when no file was sent."""
    if image is None or not image.filename:
        return None

    try:
        content = await image.read()
    finally:
        await image.close()

    logger.debug("Received upload field=%s filename=%s size=%d", IMAGE_FIELD, image.filename, len(content))
    return await store.stage(image.filename, content)
