"""Static site deployment to Vercel"""

import asyncio
import base64
import logging
import re
from typing import Any, Dict, List, Optional
import httpx
from shopsite_api.core.config import Settings
from shopsite_api.models.errors import ApplicationError, ErrorCode
from shopsite_api.models.schemas import DeploymentResult, VercelFile

logger = logging.getLogger(__name__)

VERCEL_DEPLOYMENTS_URL = "https://api.vercel.com/v13/deployments"
DEFAULT_DEPLOY_TIMEOUT = 120.0
MAX_PROJECT_NAME_LENGTH = 50
PAYLOAD_WARNING_MB = 4.5
DEFAULT_CSS = "/* No custom styles */"


def sanitize_project_name(name: str) -> str:
    """
    Turn a shop name into a valid Vercel project name.

    "My Shop!!" -> "my-shop"
    """
    slug = re.sub(r"[^a-z0-9]+", "-", (name or "").lower()).strip("-")
    return slug[:MAX_PROJECT_NAME_LENGTH].rstrip("-")


def _encode(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def build_site_files(html: str, css: Optional[str] = None) -> List[VercelFile]:
    return [
        VercelFile(file="index.html", data=_encode(html)),
        VercelFile(file="styles.css", data=_encode(css or DEFAULT_CSS)),
    ]


def validate_deployment_files(files: List[VercelFile]) -> None:
    """
    Check a deployment payload before sending it.

    Raises:
        ApplicationError: DEPLOY_FAILED if the list is empty or an entry is incomplete
    """
    if not files:
        raise ApplicationError(code=ErrorCode.DEPLOY_FAILED, message="No files to deploy")
    for f in files:
        if not f.file or not f.data:
            raise ApplicationError(
                code=ErrorCode.DEPLOY_FAILED,
                message=f"Invalid deployment file: {f.file or '<unnamed>'}",
            )
    if not any(f.file == "index.html" for f in files):
        logger.warning("[VERCEL] Deployment has no index.html")


def calculate_payload_size(files: List[VercelFile]) -> float:
    """Approximate payload size in MB, warning when it nears the API limit"""
    size_mb = sum(len(f.data) for f in files) / (1024 * 1024)
    if size_mb > PAYLOAD_WARNING_MB:
        logger.warning(f"[VERCEL] Payload is {size_mb:.2f} MB, above {PAYLOAD_WARNING_MB} MB")
    return size_mb


def deployment_url(body: Dict[str, Any]) -> str:
    """Best available URL from a deployment response"""
    if body.get("url"):
        return f"https://{body['url']}"
    aliases = body.get("alias") or []
    if aliases:
        return f"https://{aliases[0]}"
    if body.get("inspectorUrl"):
        return body["inspectorUrl"]
    return "Unknown"


def _vendor_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:500]
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        return error.get("message") or error.get("code") or str(error)
    return str(body)[:500]


def classify_deploy_error(response: httpx.Response) -> ApplicationError:
    """Map a failed Vercel response to a typed error"""
    status = response.status_code
    detail = _vendor_detail(response)
    if status in (401, 403):
        return ApplicationError(
            code=ErrorCode.DEPLOY_AUTH,
            message="Vercel rejected the deployment token",
            hint="Check VERCEL_TOKEN and team permissions",
        )
    if status == 413:
        return ApplicationError(
            code=ErrorCode.DEPLOY_PAYLOAD_TOO_LARGE,
            message="Deployment payload is too large",
            hint="Upload images to storage instead of inlining them",
        )
    if status == 429:
        return ApplicationError(
            code=ErrorCode.DEPLOY_RATE_LIMITED,
            message="Vercel rate limit reached",
            retryable=True,
            hint="Wait before deploying again",
        )
    if status == 400:
        return ApplicationError(code=ErrorCode.DEPLOY_FAILED, message=f"Invalid deployment request: {detail}")
    return ApplicationError(code=ErrorCode.DEPLOY_FAILED, message=f"Vercel returned {status}: {detail}")


class VercelDeployer:
    """Creates production deployments through the Vercel REST API"""

    def __init__(
        self,
        token: str,
        team_id: Optional[str] = None,
        project_name: Optional[str] = None,
        timeout: float = DEFAULT_DEPLOY_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.token = token
        self.team_id = team_id or None
        self.project_name = project_name or None
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "VercelDeployer":
        if not settings.vercel_token:
            logger.error("[VERCEL] VERCEL_TOKEN is not set")
            raise ApplicationError(
                code=ErrorCode.CONFIGURATION_ERROR,
                message="Deployment is not configured",
                hint="Set VERCEL_TOKEN",
            )
        return cls(
            token=settings.vercel_token,
            team_id=settings.vercel_team_id,
            project_name=settings.vercel_project_name,
            timeout=settings.deploy_timeout_seconds,
        )

    async def deploy(self, project_name: str, files: List[VercelFile]) -> DeploymentResult:
        """
        Deploy files as a production deployment.

        A configured fixed project name overrides project_name; either is
        sanitized. Never retried.

        Raises:
            ApplicationError: DEPLOY_* code describing the failure
        """
        validate_deployment_files(files)
        name = sanitize_project_name(self.project_name or project_name)
        if not name:
            raise ApplicationError(code=ErrorCode.DEPLOY_FAILED, message="Missing project name")
        payload = {
            "name": name,
            "files": [f.model_dump() for f in files],
            "target": "production",
            "projectSettings": {"framework": None},
        }
        params = {"teamId": self.team_id} if self.team_id else None
        headers = {"Authorization": f"Bearer {self.token}", "Content-Type": "application/json"}

        logger.info(f"[VERCEL] Deploying '{name}' ({len(files)} files)")
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                # Caps the whole call; the client timeout alone applies per phase
                response = await asyncio.wait_for(
                    client.post(VERCEL_DEPLOYMENTS_URL, json=payload, headers=headers, params=params),
                    timeout=self.timeout,
                )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            logger.error(f"[VERCEL] Deployment timed out after {self.timeout}s")
            raise ApplicationError(code=ErrorCode.DEPLOY_FAILED, message="Deployment timed out") from e
        except httpx.HTTPError as e:
            logger.error(f"[VERCEL] Request failed: {e}")
            raise ApplicationError(code=ErrorCode.DEPLOY_FAILED, message=f"Deployment request failed: {e}") from e

        if response.status_code >= 400:
            error = classify_deploy_error(response)
            logger.error(f"[VERCEL] {error.code.value} ({response.status_code}): {error.message}")
            raise error

        body = response.json()
        result = DeploymentResult(
            deployment_url=deployment_url(body),
            inspector_url=body.get("inspectorUrl"),
            deployment_id=body.get("id"),
        )
        logger.info(f"[VERCEL] ✓ Deployed {result.deployment_url}")
        return result
