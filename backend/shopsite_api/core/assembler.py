"""Merge generated copy and image slots into a WebsiteData record"""

import logging
import re
from typing import Any, Dict, List, Optional
from shopsite_api.models.website_data import (
    MAX_GALLERY_IMAGES,
    SERVICE_COUNT,
    AboutSection,
    ContactInfo,
    HeroSection,
    ServiceItem,
    ShopInputs,
    WebsiteData,
    icon_for_index,
)

logger = logging.getLogger(__name__)

DEFAULT_TAGLINE = "Elite Grooming Standards"
DEFAULT_ABOUT_HEADING = "The Artisan Standard"
DEFAULT_ABOUT_DESCRIPTION = ["Dedicated to traditional craft and modern style."]

DEFAULT_SERVICES = (
    {
        "title": "Haircuts",
        "subtitle": "Classic & Modern Cuts",
        "description": "Precision cuts tailored to your face shape and personal style.",
    },
    {
        "title": "Beard Styling",
        "subtitle": "Shape & Define",
        "description": "Expert beard trimming, shaping and conditioning for a sharp finish.",
    },
    {
        "title": "Traditional Shave",
        "subtitle": "Hot Towel Ritual",
        "description": "A straight razor shave with hot towels, rich lather and soothing balm.",
    },
    {
        "title": "Precision Fade",
        "subtitle": "Seamless Blends",
        "description": "Skin, low, mid or high fades blended with meticulous detail.",
    },
)

HERO_SLOT = 0
ABOUT_SLOT = 1
FIRST_SERVICE_SLOT = 2


def fallback_heading(inputs: ShopInputs) -> str:
    return f"{inputs.shop_name} in {inputs.area}"


def fallback_email(inputs: ShopInputs) -> str:
    local = re.sub(r"\s", "", inputs.shop_name.lower())
    return f"contact@{local}.com"


def _text(value: Any) -> Optional[str]:
    """Return a usable non-empty string, or None if missing/garbled"""
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _section(content: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = content.get(key)
    return value if isinstance(value, dict) else {}


def _paragraphs(about: Dict[str, Any]) -> List[str]:
    raw = about.get("paragraphs")
    if raw is None:
        raw = about.get("description")
    if isinstance(raw, str):
        raw = [raw]
    if not isinstance(raw, list):
        return list(DEFAULT_ABOUT_DESCRIPTION)
    paragraphs = [p for p in (_text(item) for item in raw) if p]
    return paragraphs or list(DEFAULT_ABOUT_DESCRIPTION)


def slot_image(images: List[str], index: int) -> str:
    """Image at index, walking back toward earlier slots when it is missing or empty"""
    for j in range(min(index, len(images) - 1), -1, -1):
        if images[j]:
            return images[j]
    return ""


def _services(content: Dict[str, Any], images: List[str]) -> List[ServiceItem]:
    raw = content.get("services")
    generated = [s for s in raw if isinstance(s, dict)] if isinstance(raw, list) else []
    if len(generated) != SERVICE_COUNT:
        logger.warning(f"[ASSEMBLER] Got {len(generated)} services, normalizing to {SERVICE_COUNT}")

    services = []
    for i in range(SERVICE_COUNT):
        default = DEFAULT_SERVICES[i]
        source = generated[i] if i < len(generated) else {}
        services.append(ServiceItem(
            title=_text(source.get("title")) or default["title"],
            subtitle=_text(source.get("subtitle")) or default["subtitle"],
            description=_text(source.get("description")) or default["description"],
            icon=icon_for_index(i),
            image_url=slot_image(images, FIRST_SERVICE_SLOT + i),
        ))
    return services


def assemble_website_data(
    inputs: ShopInputs,
    content: Optional[Dict[str, Any]],
    images: Optional[List[str]],
) -> WebsiteData:
    """
    Build a structurally complete WebsiteData.

    Every field the generator omitted or garbled is replaced by its fallback
    default, so the result always has 4 services and string image fields.
    """
    content = content if isinstance(content, dict) else {}
    images = [img if isinstance(img, str) else "" for img in (images or [])]

    hero = _section(content, "hero")
    about = _section(content, "about")
    contact = _section(content, "contact")

    data = WebsiteData(
        shop_name=inputs.shop_name,
        area=inputs.area,
        phone=inputs.phone,
        hero=HeroSection(
            heading=_text(hero.get("heading")) or fallback_heading(inputs),
            tagline=_text(hero.get("tagline")) or DEFAULT_TAGLINE,
            image_url=slot_image(images, HERO_SLOT),
        ),
        about=AboutSection(
            heading=_text(about.get("heading")) or DEFAULT_ABOUT_HEADING,
            description=_paragraphs(about),
            image_url=slot_image(images, ABOUT_SLOT),
        ),
        services=_services(content, images),
        gallery=images[:MAX_GALLERY_IMAGES],
        contact=ContactInfo(
            address=_text(contact.get("address")) or inputs.area,
            email=_text(contact.get("email")) or fallback_email(inputs),
        ),
    )
    logger.info(
        f"[ASSEMBLER] Assembled '{data.shop_name}': {len(data.services)} services, "
        f"{len(data.gallery)} gallery images"
    )
    return data
