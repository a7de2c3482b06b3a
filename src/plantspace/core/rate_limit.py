"""In-process sliding-window rate limiting keyed by client IP.

State lives in this process only. Running several API processes behind a
load balancer gives each its own window, so the effective limit scales with
the number of processes.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable

from fastapi import Request

from plantspace.core.errors import RateLimitError
from plantspace.core.settings import settings

logger = logging.getLogger(__name__)


class SlidingWindowRateLimiter:
    """Allow at most ``max_requests`` per client within ``window_seconds``."""

    def __init__(
        self,
        window_seconds: float,
        max_requests: int,
        *,
        name: str = "default",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.window_seconds = window_seconds
        self.max_requests = max_requests
        self.name = name
        self._clock = clock
        self._requests: dict[str, list[float]] = {}

    def _prune(self, now: float) -> None:
        window_start = now - self.window_seconds
        for key in list(self._requests):
            recent = [stamp for stamp in self._requests[key] if stamp > window_start]
            if recent:
                self._requests[key] = recent
            else:
                del self._requests[key]

    def hit(self, key: str) -> None:
        """Record one request for ``key`` or raise if the window is full.

        Raises:
            RateLimitError: When ``key`` already used its allowance.
        """
        now = self._clock()
        self._prune(now)
        timestamps = self._requests.setdefault(key, [])
        if len(timestamps) >= self.max_requests:
            logger.warning("Rate limit %s exceeded for %s", self.name, key)
            raise RateLimitError(retry_after=math.ceil(self.window_seconds))
        timestamps.append(now)

    def reset(self) -> None:
        self._requests.clear()

    async def __call__(self, request: Request) -> None:
        if not settings.rate_limit_enabled:
            return
        client_key = request.client.host if request.client else "unknown"
        self.hit(client_key)


register_rate_limit = SlidingWindowRateLimiter(
    settings.register_rate_window_seconds,
    settings.register_rate_max_requests,
    name="register",
)
login_rate_limit = SlidingWindowRateLimiter(
    settings.login_rate_window_seconds,
    settings.login_rate_max_requests,
    name="login",
)
post_rate_limit = SlidingWindowRateLimiter(
    settings.post_rate_window_seconds,
    settings.post_rate_max_requests,
    name="post",
)
feed_rate_limit = SlidingWindowRateLimiter(
    settings.feed_rate_window_seconds,
    settings.feed_rate_max_requests,
    name="feed",
)
