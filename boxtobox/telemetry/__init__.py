"""
Telemetry: Prometheus metrics and optional Sentry error tracking.
"""

from boxtobox.telemetry.metrics import (
    record_upstream_request,
    record_upstream_error,
    record_board_generation,
    record_cell_query,
    get_metrics_text,
)
from boxtobox.telemetry.sentry import init_sentry, is_sentry_enabled

__all__ = [
    "record_upstream_request",
    "record_upstream_error",
    "record_board_generation",
    "record_cell_query",
    "get_metrics_text",
    "init_sentry",
    "is_sentry_enabled",
]
