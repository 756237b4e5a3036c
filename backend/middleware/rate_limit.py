"""Rate limiting middleware for IdeaForge API."""

import threading
import time
from collections import defaultdict, deque
from contextlib import ExitStack
from typing import Callable, Deque, Dict, Optional

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from ideaengine.errors import RateLimitExceeded


class SlidingWindowLimiter:
    """Fixed-capacity request budget per client over a rolling window.

    ``hit`` checks and records under one lock, so concurrent requests from
    the same client can never both take the last slot.
    """

    def __init__(self, limit: int, window_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: Dict[str, Deque[float]] = defaultdict(deque)
        self._lock = threading.Lock()

    def _live(self, key: str, now: float) -> Deque[float]:
        """Timestamps for ``key`` inside the window. Caller holds the lock."""
        window_start = now - self.window_seconds
        timestamps = self._hits[key]
        while timestamps and timestamps[0] <= window_start:
            timestamps.popleft()
        return timestamps

    def hit(self, key: str) -> bool:
        """Record a request for ``key``; False when the budget is spent."""
        return hit_all(key, self) is None

    def remaining(self, key: str) -> int:
        with self._lock:
            window_start = self._clock() - self.window_seconds
            return max(0, self.limit - sum(1 for t in self._hits.get(key, ()) if t > window_start))

    def prune(self) -> int:
        """Drop clients with no hits inside the window. Returns how many were removed."""
        with self._lock:
            window_start = self._clock() - self.window_seconds
            stale_keys = [
                key for key, timestamps in self._hits.items()
                if not timestamps or timestamps[-1] <= window_start
            ]
            for key in stale_keys:
                del self._hits[key]
            return len(stale_keys)


def hit_all(key: str, *limiters: SlidingWindowLimiter) -> Optional[SlidingWindowLimiter]:
    """Record one request for ``key`` against every limiter, or against none.

    Returns the first limiter whose budget is spent, or None when the
    request was admitted and recorded everywhere.
    """
    with ExitStack() as stack:
        for limiter in limiters:
            stack.enter_context(limiter._lock)
        admitted = []
        for limiter in limiters:
            now = limiter._clock()
            timestamps = limiter._live(key, now)
            if len(timestamps) >= limiter.limit:
                return limiter
            admitted.append((timestamps, now))
        for timestamps, now in admitted:
            timestamps.append(now)
    return None


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Two independent in-memory budgets keyed by client address.

    The general budget covers all API traffic; the AI budget covers only
    operations that call the external analysis service. In production, use
    Redis for distributed rate limiting.
    """

    # Prune stale client keys every 5 minutes
    _CLEANUP_INTERVAL = 300

    REMAINING_HEADER = "X-RateLimit-Remaining"

    # (method, path) pairs that call the AI service
    AI_ROUTES = (
        ("POST", "/api/ideas"),
        ("POST", "/api/ai/ask"),
    )

    def __init__(
        self,
        app,
        requests_per_window: int = 100,
        window_seconds: float = 15 * 60,
        ai_requests_per_window: int = 10,
        ai_window_seconds: float = 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(app)
        self.general = SlidingWindowLimiter(requests_per_window, window_seconds, clock)
        self.ai = SlidingWindowLimiter(ai_requests_per_window, ai_window_seconds, clock)
        self._clock = clock
        self._last_cleanup = clock()

    def _get_client_id(self, request: Request) -> str:
        """Get a client identifier from the request."""
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
        if request.client:
            return request.client.host
        return "unknown"

    def _is_ai_route(self, method: str, path: str) -> bool:
        """Check if this route triggers AI API calls."""
        path = path.rstrip("/") or "/"
        return (method, path) in self.AI_ROUTES

    def _cleanup_stale_keys(self) -> None:
        """Remove client keys with no recent requests to prevent unbounded growth."""
        now = self._clock()
        if now - self._last_cleanup < self._CLEANUP_INTERVAL:
            return
        self._last_cleanup = now
        self.general.prune()
        self.ai.prune()

    @staticmethod
    def _reject(message: str) -> JSONResponse:
        return JSONResponse(status_code=429, content=RateLimitExceeded(message).to_dict())

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        # Only API traffic is governed; health checks are exempt
        if not path.startswith("/api/") or path == "/api/health":
            return await call_next(request)

        self._cleanup_stale_keys()

        client_id = self._get_client_id(request)

        limiters = (self.general, self.ai) if self._is_ai_route(request.method, path) else (self.general,)
        # Both budgets must admit the request before either records it
        rejected_by = hit_all(client_id, *limiters)
        if rejected_by is self.ai:
            return self._reject("AI request rate limit exceeded. Please wait before trying again.")
        if rejected_by is not None:
            return self._reject("Too many requests from this client. Please try again later.")

        response = await call_next(request)
        response.headers[self.REMAINING_HEADER] = str(self.general.remaining(client_id))
        return response
