"""Shared fixtures"""
import sys
from pathlib import Path

import pytest

# Add backend to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "backend"))

from shopsite_api.core.assembler import assemble_website_data
from shopsite_api.models.website_data import ShopInputs

# Long enough to be caught by the inline image pattern
PNG_B64 = "iVBORw0KGgo" + "A" * 121
PNG_DATA_URL = f"data:image/png;base64,{PNG_B64}"


@pytest.fixture
def shop_inputs():
    return ShopInputs(shop_name="The Gentlemen's Lounge", area="Brooklyn", phone="555 0100")


@pytest.fixture
def sample_content():
    return {
        "hero": {
            "heading": "The Gentlemen's Lounge in Brooklyn",
            "tagline": "Sharp Cuts, Timeless Style",
        },
        "about": {
            "heading": "Crafted by Hand",
            "paragraphs": [
                "Founded on old-school barbering.",
                "Every visit ends with a hot towel.",
            ],
        },
        "services": [
            {"title": "Haircuts", "subtitle": "Classic", "description": "Scissor and clipper work."},
            {"title": "Beard Styling", "subtitle": "Shape", "description": "Trim and condition."},
            {"title": "Traditional Shave", "subtitle": "Ritual", "description": "Straight razor."},
            {"title": "Precision Fade", "subtitle": "Blend", "description": "Skin to high fades."},
        ],
        "contact": {"email": "hello@gentlemens.com", "address": "12 Court St, Brooklyn"},
    }


@pytest.fixture
def sample_images():
    return [f"https://cdn.example.com/img{i}.png" for i in range(8)]


@pytest.fixture
def website_data(shop_inputs, sample_content, sample_images):
    return assemble_website_data(shop_inputs, sample_content, sample_images)


@pytest.fixture
def no_sleep():
    calls = []

    async def _sleep(delay):
        calls.append(delay)

    _sleep.calls = calls
    return _sleep
