"""Placeholder substitution for rendered HTML"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

logger = logging.getLogger(__name__)

PLACEHOLDER_PATTERN = re.compile(r"\{\{[^}]+\}\}")
INLINE_IMAGE_PATTERN = re.compile(r"data:image/[^;]+;base64,[A-Za-z0-9+/=]{100,}")


@dataclass
class SubstitutionResult:
    html: str
    unresolved: List[str] = field(default_factory=list)
    stripped_images: int = 0


def replace_placeholders(html: str, url_map: Dict[str, str]) -> str:
    """Replace every literal {{key}} with its URL"""
    for key, url in url_map.items():
        html = html.replace("{{" + key + "}}", url)
    return html


def find_unresolved_placeholders(html: str) -> List[str]:
    return PLACEHOLDER_PATTERN.findall(html)


def strip_inline_images(html: str) -> Tuple[str, int]:
    """Remove embedded base64 images, returning the new HTML and how many were removed"""
    return INLINE_IMAGE_PATTERN.subn("", html)


def substitute_placeholders(html: str, url_map: Dict[str, str]) -> SubstitutionResult:
    """
    Swap image tokens for hosted URLs and clean up what is left.

    Unmatched tokens stay in the output and are reported, never raised.
    """
    html = replace_placeholders(html, url_map)

    unresolved = find_unresolved_placeholders(html)
    if unresolved:
        logger.warning(f"[PLACEHOLDERS] {len(unresolved)} unresolved: {', '.join(sorted(set(unresolved)))}")

    html, stripped = strip_inline_images(html)
    if stripped:
        logger.info(f"[PLACEHOLDERS] Stripped {stripped} inline base64 image(s)")

    return SubstitutionResult(html=html, unresolved=unresolved, stripped_images=stripped)
