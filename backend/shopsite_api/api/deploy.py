"""Deployment endpoints"""

import logging
from fastapi import APIRouter, BackgroundTasks, Depends
from fastapi.responses import JSONResponse
from shopsite_api.api import dependencies
from shopsite_api.core.auth import verify_api_key
from shopsite_api.core.config import settings
from shopsite_api.core.detached import run_detached
from shopsite_api.core.pipeline import deploy_site, make_site_id, publish_website
from shopsite_api.core.site_deployer import build_site_files, sanitize_project_name
from shopsite_api.models.errors import ApplicationError, ErrorCode, missing_field
from shopsite_api.models.schemas import (
    ClaimResponse,
    DeploymentRequest,
    DeploySiteResponse,
    LegacyDeployRequest,
    PublishRequest,
    SiteDeployment,
)
from shopsite_api.models.website_data import WebsiteData

router = APIRouter()
logger = logging.getLogger(__name__)

LEGACY_PROJECT_SUFFIX = "-barber"


# Formats deploy failures: 400 names the missing field, everything else is a
# 500 that echoes the error code so clients can tell categories apart.
def _deploy_error(error: Exception) -> JSONResponse:
    if isinstance(error, ApplicationError):
        if error.code == ErrorCode.INVALID_INPUT:
            return JSONResponse(status_code=400, content={"ok": False, "error": error.message})
        details, code = error.message, error.code.value
    else:
        details, code = str(error), ErrorCode.DEPLOY_FAILED.value
    return JSONResponse(
        status_code=500,
        content={"ok": False, "error": "Deployment failed", "details": details, "code": code},
    )


def _site_response(deployment: SiteDeployment) -> dict:
    response = DeploySiteResponse(
        ok=True,
        deployment_url=deployment.deployment_url,
        uploaded_images=deployment.uploaded_images,
        stripe_link=settings.stripe_payment_link or None,
    )
    return response.model_dump(by_alias=True)


# POST /api/deploy-site: resolve image placeholders and deploy HTML/CSS to Vercel.
@router.post("/deploy-site")
async def deploy_site_endpoint(request: DeploymentRequest, api_key: str = Depends(verify_api_key)):
    """Deploy a rendered site, uploading images server-side when no URLs are given"""
    try:
        if not request.site_id:
            raise missing_field("siteId")
        if not request.html:
            raise missing_field("html")

        needs_upload = bool(request.images) and not request.image_urls
        uploader = dependencies.optional_uploader() if needs_upload else None
        deployer = dependencies.build_deployer()
        deployment = await deploy_site(
            request,
            uploader,
            deployer,
            parallel_uploads=settings.upload_mode == "parallel",
        )
    except ApplicationError as e:
        logger.error(f"[DEPLOY SITE] {e.code.value}: {e.message}")
        return _deploy_error(e)
    except Exception as e:
        logger.exception("[DEPLOY SITE] Unexpected deployment failure")
        return _deploy_error(e)

    return _site_response(deployment)


# POST /api/deploy: single-file deployment kept for older clients.
@router.post("/deploy")
async def legacy_deploy(request: LegacyDeployRequest, api_key: str = Depends(verify_api_key)):
    if not request.shop_name or not request.html_content:
        return JSONResponse(
            status_code=400,
            content={"error": "Missing required fields: shopName and htmlContent"},
        )

    project_name = f"{sanitize_project_name(request.shop_name)}{LEGACY_PROJECT_SUFFIX}"
    try:
        deployer = dependencies.build_deployer()
        result = await deployer.deploy(project_name, build_site_files(request.html_content)[:1])
    except ApplicationError as e:
        logger.error(f"[DEPLOY] {e.code.value}: {e.message}")
        return JSONResponse(status_code=500, content={"error": "Deployment failed", "details": e.message})

    return {
        "success": True,
        "deploymentUrl": result.deployment_url,
        "message": "Website deployed successfully to Vercel!",
    }


# POST /api/publish: render a WebsiteData record, host its images and deploy it.
@router.post("/publish")
async def publish(request: PublishRequest, api_key: str = Depends(verify_api_key)):
    try:
        if request.website is None:
            raise missing_field("website")

        deployment = await publish_website(
            request.website,
            request.site_id,
            dependencies.optional_uploader(),
            dependencies.build_deployer(),
            escape=settings.html_escape_content,
            parallel_uploads=settings.upload_mode == "parallel",
        )
    except ApplicationError as e:
        logger.error(f"[PUBLISH] {e.code.value}: {e.message}")
        return _deploy_error(e)
    except Exception as e:
        logger.exception("[PUBLISH] Unexpected publish failure")
        return _deploy_error(e)

    return _site_response(deployment)


async def _publish_claimed(data: WebsiteData, site_id: str) -> SiteDeployment:
    return await publish_website(
        data,
        site_id,
        dependencies.optional_uploader(),
        dependencies.build_deployer(),
        escape=settings.html_escape_content,
        parallel_uploads=settings.upload_mode == "parallel",
    )


# POST /api/claim: answer with the payment link right away and publish
# the site afterwards; publish failures are only logged.
@router.post("/claim", response_model=ClaimResponse)
async def claim(
    data: WebsiteData,
    background_tasks: BackgroundTasks,
    api_key: str = Depends(verify_api_key),
) -> ClaimResponse:
    site_id = make_site_id(data.shop_name)
    background_tasks.add_task(run_detached, f"publish '{site_id}'", lambda: _publish_claimed(data, site_id))
    logger.info(f"[CLAIM] Scheduled publish for '{site_id}'")
    return ClaimResponse(ok=True, redirect_url=settings.stripe_payment_link or None, site_id=site_id)
