"""Website copy generation"""

import json
import logging
import re
from typing import Any, Dict
from shopsite_api.core.genai_client import GenerationClient
from shopsite_api.models.website_data import ShopInputs

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a copywriter for premium barbershops. "
    "Return only JSON that matches the provided schema."
)

COPY_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "hero": {
            "type": "object",
            "properties": {
                "heading": {"type": "string"},
                "tagline": {"type": "string"},
            },
            "required": ["heading", "tagline"],
            "additionalProperties": False,
        },
        "about": {
            "type": "object",
            "properties": {
                "heading": {"type": "string"},
                "paragraphs": {"type": "array", "items": {"type": "string"}},
            },
            "required": ["heading", "paragraphs"],
            "additionalProperties": False,
        },
        "services": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "title": {"type": "string"},
                    "subtitle": {"type": "string"},
                    "description": {"type": "string"},
                },
                "required": ["title", "subtitle", "description"],
                "additionalProperties": False,
            },
        },
        "contact": {
            "type": "object",
            "properties": {
                "email": {"type": "string"},
                "address": {"type": "string"},
            },
            "required": ["email", "address"],
            "additionalProperties": False,
        },
    },
    "required": ["hero", "about", "services", "contact"],
    "additionalProperties": False,
}


def build_copy_prompt(inputs: ShopInputs) -> str:
    return (
        f'Generate luxury barbershop website content for "{inputs.shop_name}" in "{inputs.area}".\n'
        f"Phone: {inputs.phone}.\n"
        "Tone: Premium, high-end, masculine, professional.\n"
        f'Hero heading MUST explicitly include both the shop name ("{inputs.shop_name}") '
        f'and the area ("{inputs.area}").\n'
        "Include:\n"
        "1. A catchy hero heading and tagline.\n"
        '2. "About Us" section with 2 detailed paragraphs.\n'
        "3. Details for 4 services: Haircuts, Beard Styling, Traditional Shave, and Precision Fade.\n"
        "4. A professional email.\n"
        f"5. A full address in {inputs.area}."
    )


def parse_copy_json(text: str) -> Dict[str, Any]:
    """
    Parse the model output into a dict.

    Falls back to the outermost {...} block, then to an empty dict, so the
    assembler's field defaults take over instead of failing the request.
    """
    if not text:
        return {}
    candidates = [text]
    m = re.search(r"\{.*\}", text, flags=re.S)
    if m and m.group(0) != text:
        candidates.append(m.group(0))

    for candidate in candidates:
        try:
            data = json.loads(candidate)
        except (json.JSONDecodeError, TypeError):
            continue
        if isinstance(data, dict):
            return data
        logger.warning(f"[CONTENT] Expected a JSON object, got {type(data).__name__}")
        return {}

    logger.warning(f"[CONTENT] Could not parse generated copy ({len(text)} chars); using defaults")
    return {}


async def generate_copy(inputs: ShopInputs, client: GenerationClient) -> Dict[str, Any]:
    """
    Generate the hero/about/services/contact copy for a shop.

    Raises:
        ApplicationError: if the upstream call itself fails
    """
    logger.info(f"[CONTENT] Generating copy for '{inputs.shop_name}' in '{inputs.area}'")
    text = await client.complete_json(
        system_prompt=SYSTEM_PROMPT,
        user_message=build_copy_prompt(inputs),
        schema=COPY_SCHEMA,
        schema_name="website_copy",
    )
    content = parse_copy_json(text)
    logger.info(f"[CONTENT] Parsed copy with keys: {sorted(content.keys())}")
    return content
