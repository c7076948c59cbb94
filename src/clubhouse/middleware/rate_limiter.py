"""Per-caller request throttling for the admin and credential APIs."""

from __future__ import annotations

import hashlib
import logging
import time
from collections import deque

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

logger = logging.getLogger("clubhouse")

UNTHROTTLED_PATHS = frozenset({"/health", "/ready"})
WINDOW_SECONDS = 60.0


def caller_key(request: Request) -> str:
    """Bucket by bearer token when present, else by client address.

    Tokens are hashed so raw credentials never sit in the bucket table.
    """
    authorization = request.headers.get("authorization")
    if authorization:
        return "tok:" + hashlib.sha256(authorization.encode()).hexdigest()
    return "ip:" + (request.client.host if request.client else "unknown")


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Sliding one-minute window per caller.

    Args:
        app: The ASGI application.
        rpm: Requests allowed per caller per minute. 0 turns throttling off.
    """

    def __init__(self, app, rpm: int = 60) -> None:
        super().__init__(app)
        self.rpm = rpm
        self._hits: dict[str, deque[float]] = {}
        self._last_sweep = 0.0

    def _sweep(self, now: float) -> None:
        """Drop buckets whose newest hit has left the window."""
        cutoff = now - WINDOW_SECONDS
        for key in [k for k, hits in self._hits.items() if not hits or hits[-1] <= cutoff]:
            del self._hits[key]
        self._last_sweep = now

    def _retry_after(self, key: str, now: float) -> int | None:
        """Record a hit for `key`, or return seconds to wait if the window is full."""
        if now - self._last_sweep >= WINDOW_SECONDS:
            self._sweep(now)
        hits = self._hits.get(key)
        if hits is not None:
            while hits and hits[0] <= now - WINDOW_SECONDS:
                hits.popleft()
            if len(hits) >= self.rpm:
                return int(WINDOW_SECONDS - (now - hits[0])) + 1
        else:
            hits = self._hits[key] = deque()
        hits.append(now)
        return None

    async def dispatch(self, request: Request, call_next) -> Response:
        if not self.rpm or request.url.path in UNTHROTTLED_PATHS:
            return await call_next(request)

        key = caller_key(request)
        wait = self._retry_after(key, time.monotonic())
        if wait is not None:
            logger.warning("rate limited path=%s bucket=%s", request.url.path, key[:12])
            return JSONResponse(
                status_code=429,
                content={"detail": "Rate limit exceeded. Retry later."},
                headers={"Retry-After": str(wait)},
            )
        return await call_next(request)
