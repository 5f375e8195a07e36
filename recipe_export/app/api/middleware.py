import logging
import threading
import time
from collections import defaultdict, deque
from typing import Deque, Dict

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import PlainTextResponse

logger = logging.getLogger(__name__)

API_PREFIX = "/api"

SECURITY_HEADERS = {
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Content-Security-Policy": "default-src 'self'",
}


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Sliding-window request limit per client address on the API routes."""

    def __init__(self, app, max_requests: int = 5, window_seconds: float = 60.0):
        super().__init__(app)
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._hits: Dict[str, Deque[float]] = defaultdict(deque)
        self._lock = threading.Lock()

    def _allow(self, client: str) -> bool:
        now = time.monotonic()
        with self._lock:
            # Drop idle clients so the table does not grow without bound.
            for key in [k for k, hits in self._hits.items() if hits and now - hits[-1] > self.window_seconds]:
                del self._hits[key]
            hits = self._hits[client]
            while hits and now - hits[0] > self.window_seconds:
                hits.popleft()
            if len(hits) >= self.max_requests:
                return False
            hits.append(now)
            return True

    async def dispatch(self, request: Request, call_next):
        if not request.url.path.startswith(API_PREFIX):
            return await call_next(request)
        client = request.client.host if request.client else "127.0.0.1"
        if not self._allow(client):
            logger.warning("Rate limit exceeded for %s", client)
            return PlainTextResponse("Too Many Requests", status_code=429)
        return await call_next(request)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        if request.url.path.startswith(API_PREFIX):
            for header, value in SECURITY_HEADERS.items():
                response.headers[header] = value
        return response
