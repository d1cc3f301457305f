"""Vendor clients built from settings for each request"""

import logging
from typing import Optional
from shopsite_api.core.asset_uploader import GCSUploader
from shopsite_api.core.config import settings
from shopsite_api.core.genai_client import GenerationClient, GenerationConfig
from shopsite_api.core.site_deployer import VercelDeployer
from shopsite_api.models.errors import ApplicationError

logger = logging.getLogger(__name__)


def build_generation_client() -> GenerationClient:
    return GenerationClient(GenerationConfig.from_settings(settings))


def build_uploader() -> GCSUploader:
    return GCSUploader.from_settings(settings)


def optional_uploader() -> Optional[GCSUploader]:
    """Uploader, or None when storage is not configured"""
    try:
        return build_uploader()
    except ApplicationError as e:
        logger.warning(f"[STORAGE] Uploads unavailable: {e.message}")
        return None


def build_deployer() -> VercelDeployer:
    return VercelDeployer.from_settings(settings)
