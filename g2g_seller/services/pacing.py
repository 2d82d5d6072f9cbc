"""Human-looking pauses between remote calls."""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from g2g_seller.core.config import (
    BATCH_ITEM_DELAY_MS,
    OFFER_STEP_DELAY_MS,
    PACING_ENABLED,
    PRE_REFRESH_DELAY_MS,
    PRE_SEARCH_DELAY_MS,
    UPLOAD_STEP_DELAY_MS,
)
from g2g_seller.core.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class PacingWindow:
    name: str
    low_ms: int
    high_ms: int


PRE_REFRESH = PacingWindow("pre_refresh", *PRE_REFRESH_DELAY_MS)
PRE_SEARCH = PacingWindow("pre_search", *PRE_SEARCH_DELAY_MS)
OFFER_STEP = PacingWindow("offer_step", *OFFER_STEP_DELAY_MS)
UPLOAD_STEP = PacingWindow("upload_step", *UPLOAD_STEP_DELAY_MS)
BATCH_ITEM = PacingWindow("batch_item", *BATCH_ITEM_DELAY_MS)


class Pacer:
    """Sleeps a uniformly random time inside a window.

    Holds no state between calls; `sleep` and `rng` are injectable so tests
    can record the requested delays instead of waiting.
    """

    def __init__(
        self,
        enabled: bool = PACING_ENABLED,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.enabled = enabled
        self._sleep = sleep or asyncio.sleep
        self._rng = rng or random.Random()

    async def delay(self, window: PacingWindow) -> float:
        """Suspend the caller; returns the chosen delay in seconds (0 when disabled)."""
        if not self.enabled:
            return 0.0
        millis = self._rng.uniform(window.low_ms, window.high_ms)
        seconds = millis / 1000
        logger.debug("Pacing %s: sleeping %.0f ms", window.name, millis)
        await self._sleep(seconds)
        return seconds
