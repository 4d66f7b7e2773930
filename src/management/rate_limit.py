"""Rate limiting for outbound Management API requests."""

from __future__ import annotations

import asyncio
import time


class TokenBucketRateLimiter:
    """Token bucket shared by every request a client sends.

    - `rate` tokens are added per second, up to `capacity`.
    - `capacity` defaults to `rate`, but never below one token: a bucket that
      can't hold a whole token could never satisfy `acquire()`.
    - `acquire()` consumes one token, sleeping until one is available.
    - Concurrent callers take turns on an internal lock so the bucket is never
      overdrawn.
    """

    def __init__(self, rate: float, capacity: float | None = None):
        if rate <= 0:
            raise ValueError(f"rate must be > 0. Got: {rate}")
        if capacity is not None and capacity < 1:
            raise ValueError(f"capacity must be >= 1. Got: {capacity}")

        self.rate: float = float(rate)
        self.capacity: float = float(capacity) if capacity is not None else max(1.0, self.rate)
        self.tokens: float = self.capacity
        self._updated_at: float = time.monotonic()
        self._lock = asyncio.Lock()

    def _refill(self) -> None:
        """Credit tokens for the time elapsed since the last refill."""
        now = time.monotonic()
        self.tokens = min(self.capacity, self.tokens + (now - self._updated_at) * self.rate)
        self._updated_at = now

    async def acquire(self) -> None:
        """Wait until at least one token is available, then consume it."""
        async with self._lock:
            self._refill()
            while self.tokens < 1.0:
                await asyncio.sleep((1.0 - self.tokens) / self.rate)
                self._refill()
            self.tokens -= 1.0
