"""API request/response schemas

Request fields are optional at the model level so that handlers can answer a
missing field with a 400 naming it, instead of a generic 422.
"""

from typing import Dict, List, Optional
from pydantic import BaseModel, Field
from shopsite_api.models.website_data import CamelModel, WebsiteData


class ImageUpload(CamelModel):
    """One image to be stored: slot key, target filename and base64 payload"""
    key: Optional[str] = None
    filename: Optional[str] = None
    base64: Optional[str] = None


class UploadImagesRequest(CamelModel):
    """POST /api/upload-images request"""
    site_id: Optional[str] = None
    images: Optional[List[ImageUpload]] = None


class UploadError(CamelModel):
    key: str
    error: str


class UploadResult(CamelModel):
    public_url: str
    file_path: str


class BatchUploadResult(CamelModel):
    image_urls: Dict[str, str] = Field(default_factory=dict)
    errors: List[UploadError] = Field(default_factory=list)


class UploadImagesResponse(CamelModel):
    ok: bool
    image_urls: Dict[str, str]
    errors: Optional[List[UploadError]] = None


class UploadUrlsRequest(CamelModel):
    """POST /api/get-upload-urls request"""
    site_id: Optional[str] = None
    filenames: Optional[List[str]] = None


class SignedUpload(CamelModel):
    filename: str
    signed_url: str
    public_url: str


class UploadUrlsResponse(CamelModel):
    urls: List[SignedUpload]


class DeploymentRequest(CamelModel):
    """POST /api/deploy-site request"""
    site_id: Optional[str] = None
    html: Optional[str] = None
    css: Optional[str] = None
    images: Optional[List[ImageUpload]] = None
    image_urls: Optional[Dict[str, str]] = None


class VercelFile(BaseModel):
    """File entry in a Vercel deployment payload"""
    file: str
    data: str
    encoding: str = "base64"


class DeploymentResult(CamelModel):
    deployment_url: str
    inspector_url: Optional[str] = None
    deployment_id: Optional[str] = None


class SiteDeployment(CamelModel):
    """Outcome of the deploy-site flow"""
    deployment_url: str
    uploaded_images: Dict[str, str] = Field(default_factory=dict)
    upload_errors: List[UploadError] = Field(default_factory=list)
    unresolved_placeholders: List[str] = Field(default_factory=list)


class DeploySiteResponse(CamelModel):
    ok: bool
    deployment_url: str
    uploaded_images: Dict[str, str]
    stripe_link: Optional[str] = None


class LegacyDeployRequest(CamelModel):
    """POST /api/deploy request (single-shot, no image pipeline)"""
    shop_name: Optional[str] = None
    html_content: Optional[str] = None


class PublishRequest(CamelModel):
    """POST /api/publish request"""
    website: Optional[WebsiteData] = None
    site_id: Optional[str] = None


class ClaimResponse(CamelModel):
    ok: bool
    redirect_url: Optional[str] = None
    site_id: str
