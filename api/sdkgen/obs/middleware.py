from __future__ import annotations
import time
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from sdkgen.obs.metrics import inc_counter, record_duration
from sdkgen.obs.prometheus_metrics import prometheus_metrics

class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware to collect HTTP metrics."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        method = request.method
        route = request.scope.get("route")
        path = getattr(route, "path", request.url.path)

        try:
            response: Response = await call_next(request)
        except Exception:
            inc_counter("http_requests_errors_total", {"method": method, "path": path, "status": "500"})
            raise

        duration = time.time() - start_time
        labels = {"method": method, "path": path, "status": str(response.status_code)}

        inc_counter("http_requests_total", labels)
        record_duration("http_request_duration_ms", duration * 1000, labels)
        prometheus_metrics.record_request(method, path, response.status_code, duration)

        if response.status_code >= 400:
            inc_counter("http_requests_errors_total", labels)

        return response
