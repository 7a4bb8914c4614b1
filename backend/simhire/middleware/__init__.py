"""
Middleware Package

Contains FastAPI middleware for Prometheus request metrics and the
pipeline counters recorded by the API routes.
"""

from simhire.middleware.metrics import (
    PrometheusMiddleware,
    setup_metrics,
    record_stage_transition,
    record_simulasi_submission,
)

__all__ = [
    "PrometheusMiddleware",
    "setup_metrics",
    "record_stage_transition",
    "record_simulasi_submission",
]
