"""
Rate Limiting

In-process fixed-window counter keyed by client IP. State lives in one
process only, which matches the single-instance deployment of the bridge.
"""

import logging
import time
from typing import Callable, Dict, Optional, Tuple

from fastapi import Request

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Fixed-window request counter per identifier.

    When the limit is exceeded within a window, `hit` returns the number of
    seconds until the window resets.
    """

    def __init__(
        self,
        max_requests: int = 100,
        window_seconds: int = 15 * 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: Dict[str, Tuple[float, int]] = {}

    def hit(self, identifier: str) -> Optional[int]:
        """
        Count one request for `identifier`.

        Returns:
            None if the request is allowed, otherwise the Retry-After value
            in seconds.
        """
        now = self._clock()
        self._prune(now)
        started, count = self._windows.get(identifier, (now, 0))
        count += 1
        self._windows[identifier] = (started, count)

        if count > self.max_requests:
            retry_after = max(1, int(started + self.window_seconds - now))
            logger.warning(
                "Rate limit exceeded",
                extra={"identifier": identifier, "requests": count, "limit": self.max_requests},
            )
            return retry_after
        return None

    def _prune(self, now: float) -> None:
        expired = [key for key, (started, _) in self._windows.items() if now - started >= self.window_seconds]
        for key in expired:
            del self._windows[key]


def get_client_ip(request: Request, trust_proxy: bool = False) -> str:
    """
    Get client IP address from request.

    X-Forwarded-For is only honoured with `trust_proxy` set (TRUST_PROXY).
    """
    forwarded = request.headers.get("X-Forwarded-For") if trust_proxy else None
    if forwarded:
        # Take first IP (original client)
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "unknown"
