"""End-to-end flows: generate a site, then publish it"""

import asyncio
import logging
from typing import Dict, List, Optional, Tuple
from shopsite_api.core.assembler import assemble_website_data
from shopsite_api.core.asset_uploader import GCSUploader
from shopsite_api.core.config import Settings
from shopsite_api.core.content_generator import generate_copy
from shopsite_api.core.genai_client import GenerationClient
from shopsite_api.core.html_renderer import (
    MODE_PLACEHOLDER,
    gallery_key,
    render_css,
    render_html,
)
from shopsite_api.core.image_generator import generate_images
from shopsite_api.core.placeholders import substitute_placeholders
from shopsite_api.core.retry import RetryPolicy
from shopsite_api.core.site_deployer import (
    VercelDeployer,
    build_site_files,
    calculate_payload_size,
    sanitize_project_name,
)
from shopsite_api.models.errors import missing_field
from shopsite_api.models.schemas import (
    DeploymentRequest,
    ImageUpload,
    SiteDeployment,
    UploadError,
)
from shopsite_api.models.website_data import ShopInputs, WebsiteData

logger = logging.getLogger(__name__)

DEFAULT_SITE_ID = "site"

MIME_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/webp": "webp",
    "image/gif": "gif",
}


def make_site_id(shop_name: str) -> str:
    return sanitize_project_name(shop_name) or DEFAULT_SITE_ID


async def generate_website(inputs: ShopInputs, client: GenerationClient, settings: Settings) -> WebsiteData:
    """
    Generate copy and images for a shop and assemble the website record.

    A text generation failure propagates and cancels in-flight image calls;
    image failures are absorbed by the image generator.
    """
    policy = RetryPolicy(max_attempts=settings.image_max_attempts, backoff_delay=settings.image_retry_delay)
    parallel = settings.image_generation_mode == "parallel"

    def _images():
        return generate_images(
            inputs,
            client,
            count=settings.image_count,
            policy=policy,
            throttle_delay=settings.image_throttle_delay,
            parallel=parallel,
        )

    logger.info(f"[PIPELINE] Generating website for '{inputs.shop_name}' ({settings.image_generation_mode})")
    if parallel:
        images_task = asyncio.ensure_future(_images())
        try:
            content = await generate_copy(inputs, client)
        except Exception:
            # No point paying for images once the copy has failed
            images_task.cancel()
            raise
        images = await images_task
    else:
        content = await generate_copy(inputs, client)
        images = await _images()

    return assemble_website_data(inputs, content, images)


def _image_slots(data: WebsiteData) -> List[Tuple[str, str]]:
    slots = [("hero", data.hero.image_url), ("about", data.about.image_url)]
    slots.extend((gallery_key(i), url) for i, url in enumerate(data.gallery))
    return slots


def _extension(data_url: str) -> str:
    mime = data_url[len("data:"):].split(";", 1)[0].lower()
    return MIME_EXTENSIONS.get(mime, "jpg")


def collect_image_assets(data: WebsiteData) -> Tuple[List[ImageUpload], Dict[str, str]]:
    """
    Split the record's image slots into uploads and ready URLs.

    Returns:
        (images to upload, map of slot key to a URL needing no upload)
        Slots without an image map to "" so their tokens resolve to an empty src.
    """
    uploads: List[ImageUpload] = []
    hosted: Dict[str, str] = {}
    for key, ref in _image_slots(data):
        if ref.startswith("data:"):
            uploads.append(ImageUpload(key=key, filename=f"{key}.{_extension(ref)}", base64=ref))
        else:
            hosted[key] = ref
    return uploads, hosted


async def deploy_site(
    request: DeploymentRequest,
    uploader: Optional[GCSUploader],
    deployer: VercelDeployer,
    parallel_uploads: bool = False,
) -> SiteDeployment:
    """
    Upload images if needed, resolve placeholders and deploy the site.

    Pre-uploaded imageUrls take precedence; otherwise images are uploaded
    server-side. Upload failures are collected and never block deployment.

    Raises:
        ApplicationError: INVALID_INPUT for a missing siteId or html, DEPLOY_* from the deployer
    """
    if not request.site_id:
        raise missing_field("siteId")
    if not request.html:
        raise missing_field("html")

    site_id = request.site_id
    logger.info(f"[DEPLOY SITE] Starting deployment for siteId: {site_id}")

    url_map: Dict[str, str] = {}
    upload_errors: List[UploadError] = []
    if request.image_urls:
        logger.info(f"[DEPLOY SITE] Using {len(request.image_urls)} pre-uploaded image URLs")
        url_map = dict(request.image_urls)
    elif request.images:
        if uploader is None:
            logger.warning("[DEPLOY SITE] Storage is not configured; deploying without uploaded images")
            upload_errors = [UploadError(key=i.key or "unknown", error="Storage is not configured") for i in request.images]
        else:
            batch = await uploader.upload_batch(site_id, request.images, parallel=parallel_uploads)
            url_map = dict(batch.image_urls)
            upload_errors = batch.errors
    else:
        logger.info("[DEPLOY SITE] No images to process")

    substituted = substitute_placeholders(request.html, url_map)
    files = build_site_files(substituted.html, request.css)
    size_mb = calculate_payload_size(files)
    logger.info(f"[DEPLOY SITE] Payload {size_mb:.2f} MB, deploying to Vercel")

    result = await deployer.deploy(site_id, files)
    uploaded = {k: v for k, v in url_map.items() if v}
    return SiteDeployment(
        deployment_url=result.deployment_url,
        uploaded_images=uploaded,
        upload_errors=upload_errors,
        unresolved_placeholders=substituted.unresolved,
    )


async def publish_website(
    data: WebsiteData,
    site_id: Optional[str],
    uploader: Optional[GCSUploader],
    deployer: VercelDeployer,
    escape: bool = True,
    parallel_uploads: bool = False,
) -> SiteDeployment:
    """Render a website record with image tokens, host its images and deploy it"""
    site_id = site_id or make_site_id(data.shop_name)
    html = render_html(data, mode=MODE_PLACEHOLDER, escape=escape)
    uploads, url_map = collect_image_assets(data)

    upload_errors: List[UploadError] = []
    if uploads:
        if uploader is None:
            logger.warning(f"[PUBLISH] Storage is not configured; {len(uploads)} image(s) not hosted")
            upload_errors = [UploadError(key=u.key or "unknown", error="Storage is not configured") for u in uploads]
        else:
            batch = await uploader.upload_batch(site_id, uploads, parallel=parallel_uploads)
            url_map.update(batch.image_urls)
            upload_errors = batch.errors
    # Failed slots resolve to an empty src rather than a stray token
    for error in upload_errors:
        url_map.setdefault(error.key, "")

    request = DeploymentRequest(site_id=site_id, html=html, css=render_css(), image_urls=url_map)
    deployment = await deploy_site(request, uploader, deployer)
    deployment.upload_errors = upload_errors
    logger.info(f"[PUBLISH] ✓ '{data.shop_name}' published at {deployment.deployment_url}")
    return deployment
