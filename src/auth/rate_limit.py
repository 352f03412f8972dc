"""In-memory per-IP rate limiting as FastAPI dependencies.

Counters live in process memory, so limits apply per worker.
"""

import logging
import threading
import time
from collections import deque
from typing import Callable, Deque, Dict

from fastapi import HTTPException, Request

from src.core.config import RateLimitConfig, get_settings

logger = logging.getLogger(__name__)


class RateLimiter:
    """Sliding-window limiter keyed by client IP."""

    def __init__(
        self,
        name: str,
        limits: Callable[[RateLimitConfig], tuple],
        message: str,
    ):
        self.name = name
        self._limits = limits
        self.message = message
        self._hits: Dict[str, Deque[float]] = {}
        self._last_sweep = time.monotonic()
        self._lock = threading.Lock()

    @staticmethod
    def client_ip(request: Request, trust_forwarded_for: bool = False) -> str:
        """Socket peer address; ``X-Forwarded-For`` only counts behind a trusted proxy."""
        if trust_forwarded_for:
            forwarded = request.headers.get("X-Forwarded-For")
            if forwarded:
                return forwarded.split(",")[0].strip()
        return request.client.host if request.client else "unknown"

    def _expire(self, key: str, cutoff: float) -> Deque[float]:
        hits = self._hits.get(key)
        if hits is None:
            return deque()
        while hits and hits[0] <= cutoff:
            hits.popleft()
        if not hits:
            del self._hits[key]
        return hits

    def _sweep(self, cutoff: float):
        for key in [k for k, hits in self._hits.items() if not hits or hits[-1] <= cutoff]:
            del self._hits[key]

    def hit(self, key: str, max_requests: int, window_seconds: int) -> int:
        """Record a hit; returns seconds to wait (0 when the hit is allowed)."""
        now = time.monotonic()
        cutoff = now - window_seconds
        with self._lock:
            if now - self._last_sweep >= window_seconds:
                self._sweep(cutoff)
                self._last_sweep = now
            hits = self._expire(key, cutoff)
            if len(hits) >= max_requests:
                return max(1, int(hits[0] + window_seconds - now))
            hits.append(now)
            self._hits[key] = hits
            return 0

    def tracked_keys(self) -> int:
        with self._lock:
            return len(self._hits)

    def reset(self):
        with self._lock:
            self._hits.clear()

    async def __call__(self, request: Request):
        config = get_settings().rate_limit
        if not config.enabled:
            return

        max_requests, window_seconds = self._limits(config)
        client_ip = self.client_ip(request, config.trust_forwarded_for)
        retry_after = self.hit(client_ip, max_requests, window_seconds)
        if retry_after:
            logger.warning(f"Rate limit '{self.name}' exceeded for {client_ip}")
            raise HTTPException(
                status_code=429,
                detail=self.message,
                headers={"Retry-After": str(retry_after)},
            )


general_rate_limit = RateLimiter(
    "general",
    lambda c: (c.general_requests, c.general_window_seconds),
    "Too many requests. Please try again in a few minutes.",
)

login_rate_limit = RateLimiter(
    "login",
    lambda c: (c.login_requests, c.login_window_seconds),
    "Too many login attempts. Please try again in 15 minutes.",
)

upload_rate_limit = RateLimiter(
    "upload",
    lambda c: (c.upload_requests, c.upload_window_seconds),
    "Upload limit reached. Please try again later.",
)
