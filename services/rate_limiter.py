"""
Fixed-window, in-memory rate limiter keyed by caller identity.

State lives for the lifetime of the process and is lost on restart. Each
process enforces its own ceiling, so N instances allow up to N times the
configured rate. Swap this class for one backed by a shared counter if that
matters; ``allow`` is the whole contract.
"""
import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from fastapi import Request

logger = logging.getLogger(__name__)


@dataclass
class RateLimitEntry:
    count: int
    reset_at: float


class RateLimiter:
    def __init__(self, max_requests: int = 10, window_seconds: float = 60, clock: Callable[[], float] = time.monotonic):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock
        self.entries: Dict[str, RateLimitEntry] = {}

    def allow(self, caller_id: str) -> bool:
        """Count one request for ``caller_id``; False once the window's ceiling is reached."""
        now = self.clock()
        entry = self.entries.get(caller_id)

        if entry is None or entry.reset_at <= now:
            # Expired windows are replaced, never incremented
            self.entries[caller_id] = RateLimitEntry(count=1, reset_at=now + self.window_seconds)
            return True

        if entry.count >= self.max_requests:
            logger.warning(f"Rate limit exceeded for: {caller_id}")
            return False

        entry.count += 1
        logger.debug(f"Current request count for {caller_id}: {entry.count}")
        return True


def get_caller_id(request: Request) -> str:
    """Best available client address: forwarded header, then socket peer."""
    forwarded: Optional[str] = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    client_ip = request.headers.get("client-ip")
    if client_ip:
        return client_ip.strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"
