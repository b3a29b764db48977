# modules/common/ratelimit.py
"""
Per-client fixed-window throttling for the /api/ routes.

Each client IP may make `max_requests` calls per `window_seconds`; the window
starts at the first call. Counters live in process memory, so each worker
process keeps its own.
"""
import logging
import time
from typing import Dict, Tuple

from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger(__name__)

TOO_MANY_REQUESTS = "Too many requests from this IP, please try again later."


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, max_requests: int = 100, window_seconds: int = 900, path_prefix: str = "/api/"):
        super().__init__(app)
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.path_prefix = path_prefix
        # client key -> (attempts, window expires_at)
        self.hits: Dict[str, Tuple[int, float]] = {}

    @staticmethod
    def client_key(request: Request) -> str:
        return request.client.host if request.client else "unknown"

    def _hit(self, key: str, now: float) -> Tuple[int, float]:
        attempts, expires_at = self.hits.get(key, (0, 0.0))
        if now >= expires_at:
            attempts, expires_at = 0, now + self.window_seconds
        attempts += 1
        self.hits[key] = (attempts, expires_at)
        return attempts, expires_at

    def _prune(self, now: float) -> None:
        for key in [k for k, (_, expires_at) in self.hits.items() if now >= expires_at]:
            del self.hits[key]

    async def dispatch(self, request: Request, call_next):
        if not request.url.path.startswith(self.path_prefix) or request.method == "OPTIONS":
            return await call_next(request)

        now = time.time()
        if len(self.hits) > 10000:
            self._prune(now)
        key = self.client_key(request)
        attempts, expires_at = self._hit(key, now)
        remaining = max(self.max_requests - attempts, 0)
        headers = {
            "X-RateLimit-Limit": str(self.max_requests),
            "X-RateLimit-Remaining": str(remaining),
            "X-RateLimit-Reset": str(int(expires_at)),
        }

        if attempts > self.max_requests:
            retry_after = max(int(expires_at - now), 1)
            logger.warning("Rate limit exceeded for %s on %s %s", key, request.method, request.url.path)
            return JSONResponse(
                status_code=429,
                content={"message": TOO_MANY_REQUESTS},
                headers={**headers, "Retry-After": str(retry_after)},
            )

        response = await call_next(request)
        response.headers.update(headers)
        return response
