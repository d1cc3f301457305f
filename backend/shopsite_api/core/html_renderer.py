"""Render a WebsiteData record into the static site HTML"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Dict, List
from jinja2 import Environment, FileSystemLoader
from shopsite_api.models.website_data import ServiceIcon, WebsiteData, icon_svg
from shopsite_api.utils.sanitization import escape_attr_url, escape_html

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
PAGE_TEMPLATE = "site.html.j2"
STYLESHEET = "styles.css"

MODE_INLINE = "inline"
MODE_PLACEHOLDER = "placeholder"
RENDER_MODES = (MODE_INLINE, MODE_PLACEHOLDER)


def placeholder(key: str) -> str:
    """Substitution token for an image slot"""
    return "{{" + key + "}}"


def gallery_key(index: int) -> str:
    return f"gallery{index}"


@lru_cache(maxsize=2)
def _environment(escape: bool) -> Environment:
    # Escaping goes through the `text` filter so SVG markup and
    # placeholder tokens pass through untouched.
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=False,
        keep_trailing_newline=True,
    )
    env.filters["text"] = escape_html if escape else (lambda value: "" if value is None else str(value))
    env.filters["src"] = escape_attr_url
    return env


def _brand(shop_name: str) -> Dict[str, str]:
    first, _, rest = shop_name.strip().partition(" ")
    return {"brand_first": first, "brand_rest": rest.strip()}


def _gallery(data: WebsiteData, mode: str) -> List[Dict[str, object]]:
    items = []
    for i, url in enumerate(data.gallery):
        if mode == MODE_PLACEHOLDER:
            items.append({"index": i + 1, "src": placeholder(gallery_key(i))})
        elif url:
            items.append({"index": i + 1, "src": url})
    return items


def render_html(data: WebsiteData, mode: str = MODE_INLINE, escape: bool = True) -> str:
    """
    Produce the complete single-page site.

    Args:
        data: Assembled website record
        mode: "inline" embeds image references directly; "placeholder" emits
            {{hero}}, {{about}} and {{galleryN}} tokens for later substitution
        escape: Escape text fields for HTML (False reproduces raw output)

    Returns:
        HTML document as a string
    """
    if mode not in RENDER_MODES:
        raise ValueError(f"Unknown render mode: {mode}")

    if mode == MODE_PLACEHOLDER:
        hero_src, about_src = placeholder("hero"), placeholder("about")
    else:
        hero_src, about_src = data.hero.image_url, data.about.image_url

    context = {
        "shop_name": data.shop_name,
        "area": data.area,
        "phone": data.phone,
        "tel": "".join(data.phone.split()),
        "hero": data.hero,
        "about": data.about,
        "contact": data.contact,
        "hero_src": hero_src,
        "about_src": about_src,
        "brand_icon": icon_svg(ServiceIcon.SCISSORS),
        "services": [
            {
                "title": s.title,
                "subtitle": s.subtitle,
                "description": s.description,
                "icon": s.icon.value,
                "svg": icon_svg(s.icon),
            }
            for s in data.services
        ],
        "gallery": _gallery(data, mode),
        **_brand(data.shop_name),
    }
    html = _environment(escape).get_template(PAGE_TEMPLATE).render(**context)
    logger.debug(f"[RENDER] Rendered '{data.shop_name}' ({mode}, {len(html)} chars)")
    return html


def render_css() -> str:
    """Companion stylesheet referenced by the rendered page"""
    return (TEMPLATES_DIR / STYLESHEET).read_text(encoding="utf-8")
