"""Image generation for the fixed sequence of website image slots"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional
from shopsite_api.core.genai_client import GenerationClient
from shopsite_api.core.retry import RetryPolicy, attempt_with_retry
from shopsite_api.models.website_data import MAX_GALLERY_IMAGES, ShopInputs

logger = logging.getLogger(__name__)

MIN_IMAGE_COUNT = 3

DEFAULT_IMAGE_RETRY = RetryPolicy(max_attempts=2, backoff_delay=3.0)
DEFAULT_THROTTLE_DELAY = 1.5


@dataclass(frozen=True)
class ImagePrompt:
    slot: str
    prompt: str
    aspect_ratio: str = "1:1"


def build_image_prompts(inputs: ShopInputs, count: int = MAX_GALLERY_IMAGES) -> List[ImagePrompt]:
    """Ordered slot prompts: hero, interior, tools, then gallery shots"""
    shop, area = inputs.shop_name, inputs.area
    prompts = [
        ImagePrompt("hero", (
            f"Cinematic, high-end hero image of a master barber in a luxury shop in {area}, "
            "moody atmosphere, professional photography, dark wood and gold accents"
        ), "16:9"),
        ImagePrompt("interior", (
            f"Elegantly styled interior of a boutique barbershop called {shop}, leather vintage chairs, "
            "marble floors, soft warm lighting"
        ), "4:3"),
        ImagePrompt("tools", (
            "Close-up of premium gold-plated barber scissors and a silver straight razor on a clean "
            "marble surface, high luxury grooming tools"
        )),
        ImagePrompt("fade", (
            f"A sharp, professional skin fade haircut on a client at {shop}, clean edges, detailed texture, "
            "professional salon shot"
        )),
        ImagePrompt("lather", (
            "A master barber applying warm lather to a client with a silver shaving brush, "
            "luxury grooming ritual"
        )),
        ImagePrompt("styling", (
            f"Modern masculine hair styling session at {shop}, dynamic movement, luxury products, "
            "artistic lighting"
        )),
        ImagePrompt("lineup", (
            "Artistic close-up of a barber's hands using a straight razor for a precise beard lineup, "
            "high contrast, professional focus"
        )),
        ImagePrompt("entrance", (
            f"The sophisticated entrance of {shop} in {area}, architectural detail, "
            "premium brand logo on black window"
        )),
    ]
    count = max(MIN_IMAGE_COUNT, min(count, len(prompts)))
    return prompts[:count]


def fill_slots(results: List[Optional[str]]) -> List[str]:
    """Replace failed slots with the first successful image, or "" if there is none"""
    first = next((r for r in results if r), "")
    return [r if r else first for r in results]


async def generate_images(
    inputs: ShopInputs,
    client: GenerationClient,
    count: int = MAX_GALLERY_IMAGES,
    policy: RetryPolicy = DEFAULT_IMAGE_RETRY,
    throttle_delay: float = DEFAULT_THROTTLE_DELAY,
    parallel: bool = False,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> List[str]:
    """
    Generate one image per slot and return a fully populated slot list.

    Sequential mode waits throttle_delay between prompts to stay under the
    vendor rate limit; parallel mode fires every slot at once. A slot that
    exhausts its retries never fails the batch.
    """
    prompts = build_image_prompts(inputs, count)
    logger.info(f"[IMAGE GEN] Generating {len(prompts)} images ({'parallel' if parallel else 'sequential'})")

    async def _slot(p: ImagePrompt) -> Optional[str]:
        return await attempt_with_retry(
            lambda: client.generate_image(p.prompt, p.aspect_ratio),
            policy,
            label=f"image '{p.slot}'",
            sleep=sleep,
        )

    results: List[Optional[str]] = []
    if parallel:
        results = list(await asyncio.gather(*(_slot(p) for p in prompts)))
    else:
        for i, p in enumerate(prompts):
            results.append(await _slot(p))
            if i < len(prompts) - 1 and throttle_delay > 0:
                await sleep(throttle_delay)

    succeeded = sum(1 for r in results if r)
    if succeeded < len(results):
        logger.warning(f"[IMAGE GEN] {len(results) - succeeded}/{len(results)} slots failed; reusing first image")
    else:
        logger.info(f"[IMAGE GEN] ✓ All {len(results)} images generated")
    return fill_slots(results)
