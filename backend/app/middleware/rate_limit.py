"""
Employees API — Write Throttling Middleware
==============================================

What:  Caps how many create/update/delete requests one client may send
       within a rolling window. Reads (GET, HEAD, OPTIONS) are never counted.
Why:   The API has no authentication, and every write runs the email
       uniqueness query plus an INSERT/UPDATE/DELETE. Listing and fetching
       stay free so dashboards polling the collection are unaffected.
How:   One WriteWindow per client address holds the monotonic timestamps of
       its accepted writes. A write arriving while the window is full is
       answered with 429 and a Retry-After equal to the seconds until the
       oldest write leaves the window.

Disabled by default (RATE_LIMIT_ENABLED). State is per process: with N
workers a client can place up to N × RATE_LIMIT_REQUESTS writes per window.
"""

import logging
import math
import time
from collections import deque
from typing import Deque, Dict, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from app.config import settings

logger = logging.getLogger(__name__)

WRITE_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})

THROTTLED_MESSAGE = "Demasiadas solicitudes, intente de nuevo en {seconds} segundos"


class WriteWindow:
    """Rolling window of one client's accepted writes."""

    def __init__(self) -> None:
        self._stamps: Deque[float] = deque()

    def expire(self, now: float, window: int) -> None:
        while self._stamps and self._stamps[0] <= now - window:
            self._stamps.popleft()

    def admit(self, now: float, limit: int, window: int) -> Optional[int]:
        """
        Record a write at `now` if the window has room.

        Returns None when admitted, otherwise the whole seconds the client
        should wait before the oldest write expires (at least 1).
        """
        self.expire(now, window)
        if len(self._stamps) < limit:
            self._stamps.append(now)
            return None
        return max(1, math.ceil(self._stamps[0] + window - now))

    def __len__(self) -> int:
        return len(self._stamps)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Answers 429 once a client exceeds its write allowance."""

    def __init__(self, app, clock=time.monotonic, **kwargs):
        super().__init__(app, **kwargs)
        self._clock = clock
        self._windows: Dict[str, WriteWindow] = {}

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method not in WRITE_METHODS:
            return await call_next(request)

        # Behind a proxy this is the proxy's address
        client = request.client.host if request.client else "unknown"
        now = self._clock()

        window = self._windows.get(client)
        if window is None:
            self._forget_idle(now)
            window = self._windows[client] = WriteWindow()

        retry_after = window.admit(
            now, settings.rate_limit_requests, settings.rate_limit_window
        )
        if retry_after is None:
            return await call_next(request)

        logger.warning(
            "Write throttled for %s: %s %s (retry in %ds)",
            client,
            request.method,
            request.url.path,
            retry_after,
        )
        return JSONResponse(
            status_code=429,
            content={
                "status": "error",
                "message": THROTTLED_MESSAGE.format(seconds=retry_after),
                "retry_after": retry_after,
            },
            headers={"Retry-After": str(retry_after)},
        )

    def _forget_idle(self, now: float) -> None:
        # Runs only when a new client shows up, so the map tracks active writers
        for client, window in list(self._windows.items()):
            window.expire(now, settings.rate_limit_window)
            if not window:
                del self._windows[client]
