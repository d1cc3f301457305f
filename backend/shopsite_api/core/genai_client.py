"""OpenAI SDK wrapper used by the content and image generators"""

import logging
from typing import Any, Dict, Optional
from openai import AsyncOpenAI, AuthenticationError, PermissionDeniedError
from pydantic import BaseModel
from shopsite_api.core.config import Settings
from shopsite_api.models.errors import ApplicationError, ErrorCode

logger = logging.getLogger(__name__)

# Aspect ratio requested by a prompt -> closest size the image endpoint accepts
ASPECT_RATIO_SIZES = {
    "16:9": "1536x1024",
    "4:3": "1536x1024",
    "1:1": "1024x1024",
}


class GenerationConfig(BaseModel):
    """Credentials and model choices for one generation request"""
    api_key: str
    text_model: str = "gpt-4o-mini"
    image_model: str = "gpt-image-1"
    timeout: float = 90.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "GenerationConfig":
        """
        Build the config from settings, failing fast when the key is missing.

        Raises:
            ApplicationError: CONFIGURATION_ERROR if OPENAI_API_KEY is not set
        """
        if not settings.openai_api_key:
            logger.error("[GENAI] OPENAI_API_KEY is not set")
            raise ApplicationError(
                code=ErrorCode.CONFIGURATION_ERROR,
                message="Server configuration error: API Key missing.",
            )
        return cls(
            api_key=settings.openai_api_key,
            text_model=settings.openai_text_model,
            image_model=settings.openai_image_model,
            timeout=settings.openai_timeout_seconds,
        )


class GenerationClient:
    """
    Thin async wrapper over the OpenAI client.

    Text calls translate vendor failures into ApplicationError. Image calls let
    exceptions propagate so the caller's retry policy can handle them.
    """

    def __init__(self, config: GenerationConfig, client: Optional[AsyncOpenAI] = None):
        self.config = config
        self.client = client or AsyncOpenAI(api_key=config.api_key, timeout=config.timeout)

    async def complete_json(
        self,
        system_prompt: str,
        user_message: str,
        schema: Dict[str, Any],
        schema_name: str = "response",
        temperature: float = 0.7,
    ) -> str:
        """
        Request a schema-constrained JSON completion and return the raw text.

        Raises:
            ApplicationError: UPSTREAM_AUTH when the key is rejected,
                GENERATION_FAILED for any other vendor failure
        """
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_message},
        ]
        response_format = {
            "type": "json_schema",
            "json_schema": {"name": schema_name, "schema": schema, "strict": True},
        }
        try:
            logger.info(f"[GENAI] Calling {self.config.text_model}")
            response = await self.client.chat.completions.create(
                model=self.config.text_model,
                messages=messages,
                temperature=temperature,
                response_format=response_format,
            )
        except (AuthenticationError, PermissionDeniedError) as e:
            logger.error(f"[GENAI] Credential rejected by upstream: {e}")
            raise ApplicationError(
                code=ErrorCode.UPSTREAM_AUTH,
                message="The generation service rejected the API key.",
                hint="Select a valid API key and try again.",
            )
        except Exception as e:
            logger.error(f"[GENAI] Text generation failed: {e}")
            raise ApplicationError(
                code=ErrorCode.GENERATION_FAILED,
                message="Failed to generate website content.",
                retryable=True,
            )

        if not response.choices:
            logger.error("[GENAI] Response carried no choices")
            raise ApplicationError(
                code=ErrorCode.GENERATION_FAILED,
                message="Failed to generate website content.",
                retryable=True,
            )

        text = response.choices[0].message.content or ""
        logger.info(f"[GENAI] Response received ({len(text)} chars)")
        return text

    async def generate_image(self, prompt: str, aspect_ratio: str = "1:1") -> Optional[str]:
        """
        Generate one image and return it as a base64 data URL.

        Returns None when the response carries no image data.
        """
        kwargs: Dict[str, Any] = {
            "model": self.config.image_model,
            "prompt": prompt,
            "size": ASPECT_RATIO_SIZES.get(aspect_ratio, "1024x1024"),
            "n": 1,
        }
        # gpt-image models always return base64; dall-e needs it requested
        if self.config.image_model.startswith("dall-e"):
            kwargs["response_format"] = "b64_json"

        response = await self.client.images.generate(**kwargs)
        if not response.data:
            return None
        b64 = getattr(response.data[0], "b64_json", None)
        if not b64:
            return None
        return f"data:image/png;base64,{b64}"

