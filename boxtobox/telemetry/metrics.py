"""
Prometheus metrics for upstream queries and board generation.

Labels are restricted to low-cardinality values:
- endpoint:    "sparql", "search" (max ~5)
- status_code: "200", "429", "500", "0" (max ~10)
- error_code:  "timeout", "rate_limit", "http_error", "transport" (max ~5)
- outcome:     "accepted", "fallback", "ok", "empty", "error" (max ~5)

Never use labels, player names or query text as metric labels.
"""

import logging

from prometheus_client import (
    Counter,
    Histogram,
    generate_latest,
    CONTENT_TYPE_LATEST,
    REGISTRY,
)

logger = logging.getLogger(__name__)

# =============================================================================
# UPSTREAM (WIKIDATA) METRICS
# =============================================================================

b2b_upstream_requests_total = Counter(
    "b2b_upstream_requests_total",
    "Total requests to Wikidata endpoints",
    ["endpoint", "status_code"],
)

b2b_upstream_errors_total = Counter(
    "b2b_upstream_errors_total",
    "Total failed requests to Wikidata endpoints",
    ["endpoint", "error_code"],
)

b2b_upstream_latency_ms = Histogram(
    "b2b_upstream_latency_ms",
    "Upstream request latency in milliseconds",
    ["endpoint"],
    buckets=[50, 100, 250, 500, 1000, 2500, 5000, 10000, 30000],
)

# =============================================================================
# BOARD METRICS
# =============================================================================

b2b_board_generation_total = Counter(
    "b2b_board_generation_total",
    "Board generation results",
    ["outcome"],
)

b2b_board_generation_attempts = Histogram(
    "b2b_board_generation_attempts",
    "Attempts used per board generation",
    buckets=[1, 2, 3, 5, 8, 10, 20],
)

b2b_cell_queries_total = Counter(
    "b2b_cell_queries_total",
    "Per-cell query outcomes during precomputation and validation",
    ["outcome"],
)


def record_upstream_request(endpoint: str, status_code: int, latency_ms: float) -> None:
    """Record an upstream request with its latency."""
    try:
        b2b_upstream_requests_total.labels(endpoint=endpoint, status_code=str(status_code)).inc()
        b2b_upstream_latency_ms.labels(endpoint=endpoint).observe(latency_ms)
    except Exception as e:
        logger.warning(f"Failed to record upstream request metric: {e}")


def record_upstream_error(endpoint: str, error_code: str) -> None:
    try:
        b2b_upstream_errors_total.labels(endpoint=endpoint, error_code=error_code).inc()
    except Exception as e:
        logger.warning(f"Failed to record upstream error metric: {e}")


def record_board_generation(outcome: str, attempts: int) -> None:
    try:
        b2b_board_generation_total.labels(outcome=outcome).inc()
        b2b_board_generation_attempts.observe(attempts)
    except Exception as e:
        logger.warning(f"Failed to record board generation metric: {e}")


def record_cell_query(outcome: str) -> None:
    try:
        b2b_cell_queries_total.labels(outcome=outcome).inc()
    except Exception as e:
        logger.warning(f"Failed to record cell query metric: {e}")


def get_metrics_text() -> tuple[str, str]:
    """
    Generate Prometheus metrics text output.

    Returns:
        Tuple of (content, content_type)
    """
    return generate_latest(REGISTRY).decode("utf-8"), CONTENT_TYPE_LATEST
