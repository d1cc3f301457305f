"""Fire-and-forget work scheduled after a response is sent"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_DETACHED_TIMEOUT = 300.0


async def run_detached(
    label: str,
    operation: Callable[[], Awaitable[T]],
    timeout: float = DEFAULT_DETACHED_TIMEOUT,
) -> Optional[T]:
    """
    Await operation with an upper bound, logging instead of raising.

    Nobody is waiting on the result, so every failure ends here.
    """
    logger.info(f"[DETACHED] {label}: started")
    try:
        result = await asyncio.wait_for(operation(), timeout=timeout)
    except asyncio.TimeoutError:
        logger.error(f"[DETACHED] {label}: timed out after {timeout}s")
        return None
    except Exception as e:
        logger.error(f"[DETACHED] {label}: failed: {e!r}", exc_info=True)
        return None
    logger.info(f"[DETACHED] {label}: completed")
    return result
