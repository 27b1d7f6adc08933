"""
Rate limiting for the credential endpoints.

Uses an in-memory sliding-window counter keyed by client IP.
For production with multiple issuer instances, swap to a Redis-backed store.
"""

import time
from functools import lru_cache
from typing import Dict, List

from fastapi import HTTPException, Request

from issuer.config import get_settings


class RateLimiter:
    """Simple in-memory sliding-window rate limiter."""

    def __init__(self, max_requests: int = 10, window_secs: int = 60) -> None:
        self.max_requests = max_requests
        self.window_secs = window_secs
        self._hits: Dict[str, List[float]] = {}
        self._last_sweep = time.monotonic()

    def check(self, key: str) -> None:
        """Raise HTTPException 429 if *key* has exceeded the rate limit."""
        now = time.monotonic()
        cutoff = now - self.window_secs

        if now - self._last_sweep >= self.window_secs:
            self._sweep(cutoff)
            self._last_sweep = now

        # Prune old entries
        hits = [t for t in self._hits.get(key, ()) if t > cutoff]

        if len(hits) >= self.max_requests:
            self._hits[key] = hits
            raise HTTPException(
                status_code=429,
                detail=f"Too many requests. Limit: {self.max_requests} per {self.window_secs}s.",
            )

        hits.append(now)
        self._hits[key] = hits

    def _sweep(self, cutoff: float) -> None:
        """Forget keys with no hits inside the window."""
        for key in [k for k, hits in self._hits.items() if not hits or hits[-1] <= cutoff]:
            del self._hits[key]

    def reset(self) -> None:
        self._hits.clear()


# ── Pre-configured limiters ──────────────────────────────────────────────────

@lru_cache()
def get_login_limiter() -> RateLimiter:
    settings = get_settings()
    return RateLimiter(settings.LOGIN_RATE_LIMIT, settings.RATE_LIMIT_WINDOW_SECS)


@lru_cache()
def get_register_limiter() -> RateLimiter:
    settings = get_settings()
    return RateLimiter(settings.REGISTER_RATE_LIMIT, settings.RATE_LIMIT_WINDOW_SECS)


def get_client_ip(request: Request, trust_proxy: bool = False) -> str:
    """
    Extract the client IP.

    ``X-Forwarded-For`` is only honoured with *trust_proxy*, i.e. when the
    issuer runs behind a reverse proxy that overwrites the header.
    """
    if trust_proxy:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"
