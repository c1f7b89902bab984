"""Client-side request throttling for remote providers."""

import asyncio
import time

from limits import parse
from limits.storage import MemoryStorage
from limits.strategies import MovingWindowRateLimiter

from contactcmd_ai.utils.logging import get_logger

logger = get_logger(__name__)


class RequestRateLimiter:
    """Moving-window request limiter using the limits library.

    Waits for the window to free up before a request is sent. It never
    re-sends anything, so it is not a retry policy.
    """

    def __init__(self, requests_per_minute: int = 60, identifier: str = "chat-completions"):
        self.storage = MemoryStorage()
        self.limiter = MovingWindowRateLimiter(self.storage)
        self.request_limit = parse(f"{requests_per_minute}/minute")
        self.identifier = identifier

    async def acquire(self) -> float:
        """Reserve one request slot, sleeping while the window is full.

        Returns:
            Seconds spent waiting
        """
        waited = 0.0
        while not self.limiter.hit(self.request_limit, self.identifier):
            window_stats = self.limiter.get_window_stats(self.request_limit, self.identifier)
            wait_time = max(0.05, window_stats.reset_time - time.time())
            logger.warning(f"Request rate limit reached, waiting {wait_time:.2f}s")
            await asyncio.sleep(wait_time)
            waited += wait_time
        return waited
