"""
Prometheus Metrics Middleware

Provides request and pipeline metrics for monitoring:
- HTTP request latency and count by route pattern and status
- Active request gauge
- Application stage transitions by kind and target stage
- Simulasi submissions by category

Usage:
    from simhire.middleware.metrics import setup_metrics

    app = FastAPI()
    setup_metrics(app)

Metrics Endpoint:
    GET /metrics - Prometheus-format metrics
"""

import time
import logging
from typing import Callable, Optional

from fastapi import FastAPI, Request, Response
from fastapi.responses import PlainTextResponse
from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    CONTENT_TYPE_LATEST,
    generate_latest,
    REGISTRY,
)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.routing import Match

logger = logging.getLogger(__name__)

REQUEST_LATENCY = Histogram(
    "simhire_http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint", "status"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
)

REQUEST_COUNT = Counter(
    "simhire_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

ACTIVE_REQUESTS = Gauge(
    "simhire_http_requests_active",
    "Number of in-flight HTTP requests",
    ["method", "endpoint"],
)

STAGE_TRANSITIONS = Counter(
    "simhire_stage_transitions_total",
    "Application status changes persisted",
    ["kind", "stage"],  # kind: job | internship
)

SIMULASI_SUBMISSIONS = Counter(
    "simhire_simulasi_submissions_total",
    "Simulasi results submitted",
    ["category", "rank"],
)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Records latency, count and in-flight gauge for every API request."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        endpoint = self._get_endpoint(request)
        method = request.method

        if endpoint == "/metrics":
            return await call_next(request)

        ACTIVE_REQUESTS.labels(method=method, endpoint=endpoint).inc()
        start_time = time.perf_counter()
        status = "500"

        try:
            response = await call_next(request)
            status = str(response.status_code)
        except Exception as e:
            logger.error(f"Request error on {method} {endpoint}: {e}")
            raise
        finally:
            # Routing has run by now; nested routers record the matched route in the scope
            matched = self._matched_route_path(request) or endpoint
            duration = time.perf_counter() - start_time
            REQUEST_LATENCY.labels(method=method, endpoint=matched, status=status).observe(duration)
            REQUEST_COUNT.labels(method=method, endpoint=matched, status=status).inc()
            ACTIVE_REQUESTS.labels(method=method, endpoint=endpoint).dec()

        return response

    def _get_endpoint(self, request: Request) -> str:
        """
        Route pattern (e.g. /api/applications/{application_id}/status) rather
        than the concrete path, to keep label cardinality bounded.
        """
        for route in request.app.routes:
            path = getattr(route, "path", None)
            if path is None:
                continue
            match, _ = route.matches(request.scope)
            if match == Match.FULL:
                return path
        return request.url.path

    def _matched_route_path(self, request: Request) -> Optional[str]:
        """
        Pattern of the route that handled the request, or None when nothing
        matched. Falls back to re-templating the concrete path from the
        matched path params when the route only knows its local path.
        """
        path = request.url.path
        route_path = getattr(request.scope.get("route"), "path", None)
        if route_path and route_path.count("/") == path.count("/"):
            return route_path

        params = request.scope.get("path_params") or {}
        if not route_path and not params:
            return None
        names = {str(value): name for name, value in params.items()}
        return "/".join(
            f"{{{names[segment]}}}" if segment in names else segment
            for segment in path.split("/")
        )


def metrics_endpoint(request: Request) -> Response:
    return PlainTextResponse(
        content=generate_latest(REGISTRY),
        media_type=CONTENT_TYPE_LATEST,
    )


def setup_metrics(app: FastAPI) -> None:
    app.add_middleware(PrometheusMiddleware)
    app.add_route("/metrics", metrics_endpoint, methods=["GET"])
    logger.info("Prometheus metrics configured")


def record_stage_transition(kind: str, stage: str) -> None:
    STAGE_TRANSITIONS.labels(kind=kind, stage=stage).inc()


def record_simulasi_submission(category: str, rank: str) -> None:
    SIMULASI_SUBMISSIONS.labels(category=category, rank=rank).inc()
