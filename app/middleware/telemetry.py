"""Prometheus request instrumentation."""

from __future__ import annotations

import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from app.telemetry import observe_request


class TelemetryMiddleware(BaseHTTPMiddleware):
    """Count requests and their latency per route template."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start_time = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
        finally:
            # The matched route is only known once routing has run.
            observe_request(
                request.method,
                self._route_label(request),
                status_code,
                time.perf_counter() - start_time,
            )
        return response

    @staticmethod
    def _route_label(request: Request) -> str:
        """Use the route template so ids do not explode label cardinality."""

        route = request.scope.get("route")
        path = getattr(route, "path", None)
        return path or "unmatched"
