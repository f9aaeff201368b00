"""In-memory fixed-window rate limiting."""

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from fastapi import Request

from app.models.auth import Denial
from app.models.config import RateLimitSettings

logger = logging.getLogger("wellness")


@dataclass
class RateLimitRecord:
    """Request count of one key within its current window."""

    count: int
    reset_time: float


class RateLimitStore:
    """
    Process-local counter store.

    Entries are never deleted; keys that stop receiving traffic are simply
    left behind. Counters are not shared between processes.
    """

    def __init__(self, window_seconds: float, clock: Callable[[], float] = time.time):
        self.window_seconds = window_seconds
        self._clock = clock
        self._records: dict[str, RateLimitRecord] = {}
        self._lock = threading.Lock()

    def increment(self, key: str) -> RateLimitRecord:
        """Count one request for ``key`` and return a snapshot of its record."""
        with self._lock:
            now = self._clock()
            record = self._records.get(key)

            if record is None or now > record.reset_time:
                record = RateLimitRecord(count=1, reset_time=now + self.window_seconds)
                self._records[key] = record
            else:
                record.count += 1

            return RateLimitRecord(count=record.count, reset_time=record.reset_time)

    def get(self, key: str) -> Optional[RateLimitRecord]:
        with self._lock:
            return self._records.get(key)

    def __len__(self) -> int:
        return len(self._records)


class RateLimiter:
    """Bounds request volume per (client address, route path)."""

    def __init__(
        self,
        window_seconds: float = 15 * 60,
        max_requests: int = 100,
        message: str = "Too many requests, please try again later",
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize rate limiter.

        Args:
            window_seconds: Length of the counting window
            max_requests: Requests allowed per key within one window
            message: Error message of the 429 response
            clock: Wall-clock source in seconds
        """
        self.max_requests = max_requests
        self.message = message
        self._clock = clock
        self.store = RateLimitStore(window_seconds, clock=clock)

    @classmethod
    def from_settings(cls, settings: RateLimitSettings, clock: Callable[[], float] = time.time) -> "RateLimiter":
        return cls(
            window_seconds=settings.window_seconds,
            max_requests=settings.max_requests,
            message=settings.message,
            clock=clock,
        )

    @staticmethod
    def client_address(request: Request) -> str:
        """Client IP, falling back to the first X-Forwarded-For entry, then "unknown"."""
        if request.client and request.client.host:
            return request.client.host

        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            first = forwarded.split(",")[0].strip()
            if first:
                return first

        return "unknown"

    def key_for(self, request: Request) -> str:
        return f"{self.client_address(request)}:{request.url.path}"

    def check(self, request: Request) -> Optional[Denial]:
        """
        Count the request and decide.

        Returns:
            A 429 denial once the window's limit is exceeded, otherwise None
        """
        key = self.key_for(request)
        record = self.store.increment(key)

        if record.count > self.max_requests:
            retry_after = max(0, math.ceil(record.reset_time - self._clock()))
            logger.warning(f"Rate limit exceeded for {key} ({record.count}/{self.max_requests})")
            return Denial(
                status_code=429,
                error=self.message,
                headers={"Retry-After": str(retry_after)},
            )

        return None

    __call__ = check
