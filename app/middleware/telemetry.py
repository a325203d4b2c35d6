"""Telemetry middleware for request instrumentation."""

from __future__ import annotations

import time
from typing import Any

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from app.telemetry import observe_request


class TelemetryMiddleware(BaseHTTPMiddleware):
    """Collect request metrics for Prometheus."""

    # Scrapes and static assets would drown out the school endpoints.
    excluded_prefixes: tuple[str, ...] = ("/metrics", "/static")

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        if request.url.path.startswith(self.excluded_prefixes):
            return await call_next(request)

        start_time = time.perf_counter()
        method = request.method

        try:
            response = await call_next(request)
        except Exception:  # pragma: no cover - defensive
            duration_seconds = time.perf_counter() - start_time
            observe_request(method, self._resolve_route(request), 500, duration_seconds)
            raise

        duration_seconds = time.perf_counter() - start_time
        observe_request(
            method,
            self._resolve_route(request),
            response.status_code,
            duration_seconds,
        )
        return response

    @staticmethod
    def _resolve_route(request: Request) -> str:
        """Return the matched route template, or the raw path when unmatched."""

        scope_route: Any = request.scope.get("route")
        path = getattr(scope_route, "path", None)
        return path or request.url.path
