"""Website content models"""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts both camelCase (wire) and snake_case (python) field names"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _image_ref(value: Optional[str]) -> str:
    # Image fields are never null downstream
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError("image reference must be a string")
    return value.strip()


class ShopInputs(CamelModel):
    """User-supplied form fields"""
    shop_name: str = ""
    area: str = ""
    phone: str = ""

    @field_validator("shop_name", "area", "phone", mode="before")
    @classmethod
    def strip_inputs(cls, v):
        if v is None:
            return ""
        return v.strip() if isinstance(v, str) else v

    def missing_fields(self) -> List[str]:
        """Wire names of required fields that are empty"""
        missing = []
        for name, alias in (("shop_name", "shopName"), ("area", "area"), ("phone", "phone")):
            if not getattr(self, name):
                missing.append(alias)
        return missing


class ServiceIcon(str, Enum):
    """Closed set of service icon categories"""
    SCISSORS = "scissors"
    RAZOR = "razor"
    MUSTACHE = "mustache"
    FACE = "face"


SERVICE_ICONS = (ServiceIcon.SCISSORS, ServiceIcon.RAZOR, ServiceIcon.MUSTACHE, ServiceIcon.FACE)

SERVICE_COUNT = 4
MAX_GALLERY_IMAGES = 8

_ICON_PATHS = {
    ServiceIcon.SCISSORS: (
        '<circle cx="6" cy="6" r="3"></circle><circle cx="6" cy="18" r="3"></circle>'
        '<path d="M20 4L8.12 15.88M14.47 14.48L20 20M8.12 8.12L12 12"></path>'
    ),
    ServiceIcon.RAZOR: (
        '<path d="M3 17l6-6 4 4-6 6H3v-4z"></path><path d="M9 11l8-8 4 4-8 8"></path>'
    ),
    ServiceIcon.MUSTACHE: (
        '<path d="M12 12c-2-3-6-4-9-1 2 0 3 3 6 3 1.5 0 2.5-1 3-2zm0 0c2-3 6-4 9-1-2 0-3 3-6 3-1.5 0-2.5-1-3-2z"></path>'
    ),
    ServiceIcon.FACE: (
        '<circle cx="12" cy="12" r="9"></circle><path d="M8 14s1.5 2 4 2 4-2 4-2"></path>'
        '<path d="M9 9h.01M15 9h.01"></path>'
    ),
}


def icon_for_index(index: int) -> ServiceIcon:
    return SERVICE_ICONS[index % len(SERVICE_ICONS)]


def icon_svg(icon: ServiceIcon) -> str:
    """SVG inner markup for a service icon"""
    return _ICON_PATHS[ServiceIcon(icon)]


class ServiceItem(CamelModel):
    title: str
    subtitle: str
    description: str
    icon: ServiceIcon
    image_url: str = ""

    @field_validator("image_url", mode="before")
    @classmethod
    def normalize_image(cls, v):
        return _image_ref(v)


class HeroSection(CamelModel):
    heading: str
    tagline: str
    image_url: str = ""

    @field_validator("image_url", mode="before")
    @classmethod
    def normalize_image(cls, v):
        return _image_ref(v)


class AboutSection(CamelModel):
    heading: str
    description: List[str]
    image_url: str = ""

    @field_validator("image_url", mode="before")
    @classmethod
    def normalize_image(cls, v):
        return _image_ref(v)


class ContactInfo(CamelModel):
    address: str
    email: str


class WebsiteData(CamelModel):
    """The assembled, structurally complete website record"""
    shop_name: str
    area: str
    phone: str
    hero: HeroSection
    about: AboutSection
    services: List[ServiceItem]
    gallery: List[str] = Field(default_factory=list, max_length=MAX_GALLERY_IMAGES)
    contact: ContactInfo

    @field_validator("gallery", mode="before")
    @classmethod
    def normalize_gallery(cls, v):
        if v is None:
            return []
        return [_image_ref(item) for item in v]
