"""Website generation endpoint"""

import logging
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from shopsite_api.api import dependencies
from shopsite_api.core.auth import verify_api_key
from shopsite_api.core.config import settings
from shopsite_api.core.pipeline import generate_website
from shopsite_api.models.errors import ApplicationError, ErrorCode, missing_field
from shopsite_api.models.website_data import ShopInputs

router = APIRouter()
logger = logging.getLogger(__name__)


# POST /api/generate: copy + images -> assembled WebsiteData.
# Config and upstream failures surface as {message} with the error's status.
@router.post("/generate")
async def generate(inputs: ShopInputs, api_key: str = Depends(verify_api_key)):
    """Generate a complete website record for a shop"""
    try:
        missing = inputs.missing_fields()
        if missing:
            raise missing_field(missing[0])

        client = dependencies.build_generation_client()
        data = await generate_website(inputs, client, settings)
    except ApplicationError as e:
        logger.error(f"[GENERATE] {e.code.value}: {e.message}")
        return JSONResponse(status_code=e.http_status, content={"message": e.message, "code": e.code.value})
    except Exception as e:
        logger.error(f"[GENERATE] Unexpected failure: {e}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"message": "Failed to generate website content.", "code": ErrorCode.GENERATION_FAILED.value},
        )

    return data.model_dump(by_alias=True)
