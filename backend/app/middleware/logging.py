"""
Employees API — Access Log Middleware
========================================

What:  One access line per request on the "employees_api.access" logger.
How:   Times the downstream handler and emits
           <METHOD> <path> -> <status> in <ms>ms rid=<id> client=<ip>
       with the same values attached as `extra` fields, so a JSON
       formatter can pick them up. The matched route template
       (e.g. /employees/{employee_id}) is attached as `route`, which lets
       log queries group requests by operation rather than by id.

Levels: 5xx → ERROR, 4xx → WARNING, else INFO. A handler that raises is
logged as status 500 and the exception is re-raised for Starlette.
Health checks are skipped. Bodies are never logged: they carry email and
phone numbers.
"""

import logging
import time
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.middleware.request_id import request_id_var

logger = logging.getLogger("employees_api.access")

QUIET_PATHS = frozenset({"/health"})


def level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


def _route_template(request: Request) -> Optional[str]:
    route = request.scope.get("route")
    return getattr(route, "path", None)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        status = 500
        try:
            response = await call_next(request)
            status = response.status_code
            return response
        finally:
            self._emit(request, status, (time.perf_counter() - started) * 1000)

    @staticmethod
    def _emit(request: Request, status: int, elapsed_ms: float) -> None:
        fields = {
            "request_id": request_id_var.get(""),
            "method": request.method,
            "path": request.url.path,
            "route": _route_template(request),
            "status": status,
            "duration_ms": round(elapsed_ms, 2),
            "client_ip": request.client.host if request.client else "unknown",
        }
        logger.log(
            level_for(status),
            "%s %s -> %d in %.1fms rid=%s client=%s",
            fields["method"],
            fields["path"],
            status,
            elapsed_ms,
            fields["request_id"],
            fields["client_ip"],
            extra=fields,
        )
