"""HTML rendering endpoint"""

import logging
from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse
from shopsite_api.core.auth import verify_api_key
from shopsite_api.core.config import settings
from shopsite_api.core.html_renderer import MODE_INLINE, render_html
from shopsite_api.models.website_data import WebsiteData

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/render", response_class=HTMLResponse)
async def render(
    data: WebsiteData,
    mode: str = Query(default=MODE_INLINE, pattern="^(inline|placeholder)$"),
    api_key: str = Depends(verify_api_key),
) -> HTMLResponse:
    """Render a website record as a standalone HTML page"""
    html = render_html(data, mode=mode, escape=settings.html_escape_content)
    return HTMLResponse(content=html)
