"""Image upload to Google Cloud Storage"""

import asyncio
import base64
import binascii
import json
import logging
import re
from datetime import timedelta
from typing import List, Optional, Tuple
from google.cloud import storage
from shopsite_api.core.config import Settings
from shopsite_api.models.errors import ApplicationError, ErrorCode
from shopsite_api.models.schemas import (
    BatchUploadResult,
    ImageUpload,
    SignedUpload,
    UploadError,
    UploadResult,
)

logger = logging.getLogger(__name__)

CACHE_CONTROL = "public, max-age=31536000"
SIGNED_UPLOAD_CONTENT_TYPE = "image/jpeg"
DEFAULT_SIGNED_URL_MINUTES = 15

DATA_URL_PATTERN = re.compile(r"^data:([^;,]+);base64,(.+)$", re.DOTALL)

EXTENSION_MIME_TYPES = {
    "png": "image/png",
    "webp": "image/webp",
    "gif": "image/gif",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
}


def mime_type_for(filename: str) -> str:
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    return EXTENSION_MIME_TYPES.get(ext, "image/jpeg")


def normalize_data_url(data: str, filename: str) -> str:
    """Prefix raw base64 with a data URL header inferred from the filename"""
    if data.startswith("data:"):
        return data
    return f"data:{mime_type_for(filename)};base64,{data}"


def decode_data_url(data_url: str) -> Tuple[str, bytes]:
    """
    Split a data URL into its MIME type and decoded bytes.

    Raises:
        ValueError: If the value is not a base64 data URL
    """
    match = DATA_URL_PATTERN.match(data_url.strip())
    if not match:
        raise ValueError("Invalid data URL format")
    try:
        payload = base64.b64decode(match.group(2), validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Invalid base64 payload: {e}") from e
    return match.group(1), payload


def public_url(bucket_name: str, path: str) -> str:
    return f"https://storage.googleapis.com/{bucket_name}/{path}"


class GCSUploader:
    """Stores site images under {siteId}/{filename} in a single bucket"""

    def __init__(
        self,
        client: storage.Client,
        bucket_name: str,
        signed_url_minutes: int = DEFAULT_SIGNED_URL_MINUTES,
    ):
        self.client = client
        self.bucket_name = bucket_name
        self.signed_url_minutes = signed_url_minutes
        self.bucket = client.bucket(bucket_name)

    @classmethod
    def from_settings(cls, settings: Settings) -> "GCSUploader":
        """
        Build an uploader from service account credentials in settings.

        Raises:
            ApplicationError: CONFIGURATION_ERROR when credentials or bucket are missing or malformed
        """
        if not settings.gcp_service_account_json or not settings.gcs_bucket_name:
            logger.error("[GCS UPLOAD] GCP_SERVICE_ACCOUNT_JSON or GCS_BUCKET_NAME is not set")
            raise ApplicationError(
                code=ErrorCode.CONFIGURATION_ERROR,
                message="Storage is not configured",
                hint="Set GCP_SERVICE_ACCOUNT_JSON and GCS_BUCKET_NAME",
            )
        try:
            info = json.loads(settings.gcp_service_account_json)
            client = storage.Client.from_service_account_info(info, project=info.get("project_id"))
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.error(f"[GCS UPLOAD] Invalid service account credentials: {type(e).__name__}")
            raise ApplicationError(
                code=ErrorCode.CONFIGURATION_ERROR,
                message="Invalid storage credentials",
                hint="GCP_SERVICE_ACCOUNT_JSON must be a service account key in JSON form",
            ) from e
        return cls(client, settings.gcs_bucket_name, settings.gcs_signed_url_minutes)

    def _store(self, path: str, content_type: str, payload: bytes) -> None:
        blob = self.bucket.blob(path)
        blob.cache_control = CACHE_CONTROL
        blob.upload_from_string(payload, content_type=content_type)
        blob.make_public()

    async def upload(self, site_id: str, filename: str, data_url: str) -> UploadResult:
        """Upload one data URL and return its public URL"""
        content_type, payload = decode_data_url(data_url)
        path = f"{site_id}/{filename}"
        await asyncio.to_thread(self._store, path, content_type, payload)
        url = public_url(self.bucket_name, path)
        logger.info(f"[GCS UPLOAD] ✓ {path} ({len(payload)} bytes)")
        return UploadResult(public_url=url, file_path=path)

    async def _upload_item(self, site_id: str, item: ImageUpload) -> Tuple[str, Optional[str], Optional[str]]:
        key = item.key or "unknown"
        if not item.key or not item.filename or not item.base64:
            logger.warning(f"[GCS UPLOAD] Skipping '{key}': missing key, filename or base64 data")
            return key, None, "Missing required fields"
        try:
            data_url = normalize_data_url(item.base64, item.filename)
            result = await self.upload(site_id, item.filename, data_url)
            return key, result.public_url, None
        except Exception as e:
            logger.error(f"[GCS UPLOAD] Failed to upload '{key}': {e}")
            return key, None, str(e)

    async def upload_batch(
        self,
        site_id: str,
        images: List[ImageUpload],
        parallel: bool = False,
    ) -> BatchUploadResult:
        """
        Upload every image, collecting per-item failures instead of raising.

        Args:
            site_id: Folder the images are stored under
            images: Items with key, filename and base64 payload
            parallel: Upload concurrently instead of one at a time

        Returns:
            Map of key to public URL, plus one error per failed item.
            A repeated key is reported as an error and not uploaded.
        """
        logger.info(f"[GCS UPLOAD] Uploading {len(images)} image(s) for site '{site_id}'")
        seen = set()
        unique: List[ImageUpload] = []
        duplicates: List[str] = []
        for item in images:
            if item.key and item.key in seen:
                duplicates.append(item.key)
                continue
            seen.add(item.key)
            unique.append(item)

        if parallel:
            outcomes = await asyncio.gather(*(self._upload_item(site_id, item) for item in unique))
        else:
            outcomes = [await self._upload_item(site_id, item) for item in unique]

        result = BatchUploadResult()
        for key, url, error in outcomes:
            if url:
                result.image_urls[key] = url
            else:
                result.errors.append(UploadError(key=key, error=error or "Upload failed"))
        for key in duplicates:
            logger.warning(f"[GCS UPLOAD] Skipping duplicate key '{key}'")
            result.errors.append(UploadError(key=key, error="Duplicate image key"))

        if images and not result.image_urls:
            logger.warning(f"[GCS UPLOAD] All {len(images)} uploads failed for site '{site_id}'")
        elif result.errors:
            logger.warning(f"[GCS UPLOAD] {len(result.errors)}/{len(images)} uploads failed")
        return result

    def _signed_url(self, path: str) -> str:
        return self.bucket.blob(path).generate_signed_url(
            version="v4",
            expiration=timedelta(minutes=self.signed_url_minutes),
            method="PUT",
            content_type=SIGNED_UPLOAD_CONTENT_TYPE,
        )

    async def signed_upload_urls(self, site_id: str, filenames: List[str]) -> List[SignedUpload]:
        """Signed PUT URLs so clients can upload directly to the bucket"""
        urls = []
        for filename in filenames:
            path = f"{site_id}/{filename}"
            signed = await asyncio.to_thread(self._signed_url, path)
            urls.append(SignedUpload(
                filename=filename,
                signed_url=signed,
                public_url=public_url(self.bucket_name, path),
            ))
        logger.info(f"[GCS UPLOAD] Issued {len(urls)} signed upload URL(s) for site '{site_id}'")
        return urls
