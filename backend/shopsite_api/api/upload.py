"""Image upload endpoints"""

import logging
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from shopsite_api.api import dependencies
from shopsite_api.core.auth import verify_api_key
from shopsite_api.core.config import settings
from shopsite_api.models.errors import ApplicationError, ErrorCode, missing_field
from shopsite_api.models.schemas import (
    UploadImagesRequest,
    UploadImagesResponse,
    UploadUrlsRequest,
    UploadUrlsResponse,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def _upload_error(error: ApplicationError) -> JSONResponse:
    if error.code == ErrorCode.INVALID_INPUT:
        return JSONResponse(status_code=400, content={"ok": False, "error": error.message})
    return JSONResponse(
        status_code=error.http_status,
        content={"ok": False, "error": "Image upload failed", "details": error.message},
    )


# POST /api/upload-images: server-side upload of base64 images.
# Per-image failures come back in `errors`; the request itself still succeeds.
@router.post("/upload-images")
async def upload_images(request: UploadImagesRequest, api_key: str = Depends(verify_api_key)):
    try:
        if not request.site_id:
            raise missing_field("siteId")
        if not request.images:
            raise missing_field("images")

        uploader = dependencies.build_uploader()
        batch = await uploader.upload_batch(
            request.site_id,
            request.images,
            parallel=settings.upload_mode == "parallel",
        )
    except ApplicationError as e:
        logger.error(f"[UPLOAD IMAGES] {e.code.value}: {e.message}")
        return _upload_error(e)

    logger.info(f"[UPLOAD IMAGES] {len(batch.image_urls)} succeeded, {len(batch.errors)} failed")
    response = UploadImagesResponse(ok=True, image_urls=batch.image_urls, errors=batch.errors or None)
    return response.model_dump(by_alias=True, exclude_none=True)


# POST /api/get-upload-urls: signed PUT URLs for direct client uploads.
@router.post("/get-upload-urls")
async def get_upload_urls(request: UploadUrlsRequest, api_key: str = Depends(verify_api_key)):
    try:
        if not request.site_id:
            raise missing_field("siteId")
        if not request.filenames:
            raise missing_field("filenames")

        uploader = dependencies.build_uploader()
        urls = await uploader.signed_upload_urls(request.site_id, request.filenames)
    except ApplicationError as e:
        logger.error(f"[UPLOAD URLS] {e.code.value}: {e.message}")
        return JSONResponse(status_code=e.http_status, content={"error": e.message})
    except Exception as e:
        logger.error(f"[UPLOAD URLS] Failed to sign URLs: {e}", exc_info=True)
        return JSONResponse(status_code=500, content={"error": str(e)})

    return UploadUrlsResponse(urls=urls).model_dump(by_alias=True)
