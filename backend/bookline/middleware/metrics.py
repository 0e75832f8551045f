"""
Prometheus metrics middleware.

Collects HTTP request metrics (counter + histogram) and exposes the
authorization and appointment-validation counters the domain code updates.
"""

import time

from prometheus_client import Counter, Histogram
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

# ── HTTP metrics ─────────────────────────────────────────────────────────────

http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status_code"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

# ── Authorization metrics ────────────────────────────────────────────────────

authorization_decisions_total = Counter(
    "authorization_decisions_total",
    "Permission gate decisions enforced on requests",
    ["decision"],
)

# ── Appointment metrics ──────────────────────────────────────────────────────

appointment_validation_failures_total = Counter(
    "appointment_validation_failures_total",
    "Appointment form validation failures",
    ["kind"],
)

appointments_forwarded_total = Counter(
    "appointments_forwarded_total",
    "Appointments forwarded to the booking backend",
    ["mode", "outcome"],
)


_UNLABELLED_PATHS = frozenset({"/metrics", "/api/health"})


def _normalize_path(path: str) -> str:
    """Replace member and appointment ids with {id}: /api/team/team_3 -> /api/team/{id}."""
    parts = path.strip("/").split("/")
    return "/" + "/".join(
        "{id}" if i > 1 and (p.startswith("team_") or p.isdigit() or len(p) > 20) else p
        for i, p in enumerate(parts)
    )


class PrometheusMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        if request.url.path in _UNLABELLED_PATHS:
            return await call_next(request)

        path = _normalize_path(request.url.path)
        status_code = 500
        started = time.perf_counter()
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            http_requests_total.labels(
                method=request.method, path=path, status_code=status_code,
            ).inc()
            http_request_duration_seconds.labels(method=request.method, path=path).observe(
                time.perf_counter() - started
            )
