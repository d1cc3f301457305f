"""FastAPI application entry point"""

import logging
import sys
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from shopsite_api.api import deploy, generate, render, upload
from shopsite_api.core.config import settings

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    force=True,
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root():
    """Health check endpoint"""
    return {"status": "healthy", "version": settings.api_version}


@app.get("/health")
async def health():
    """Health check for monitoring"""
    return {"status": "healthy"}


app.include_router(generate.router, prefix="/api", tags=["generate"])
app.include_router(upload.router, prefix="/api", tags=["upload"])
app.include_router(deploy.router, prefix="/api", tags=["deploy"])
app.include_router(render.router, prefix="/api", tags=["render"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("shopsite_api.main:app", host="0.0.0.0", port=8000)
