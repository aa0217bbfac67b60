"""System-level metrics via Prometheus client."""

import logging

from prometheus_client import Counter, Histogram, start_http_server

logger = logging.getLogger(__name__)

# Counters
GENERATION_CALLS = Counter(
    "generation_calls_total",
    "Total number of requests sent to the generation service",
    ["kind"],
)

GENERATION_ATTEMPTS = Counter(
    "generation_attempts_total",
    "Generate/validate attempts per artifact kind",
    ["kind"],
)

TRANSPORT_ERRORS = Counter(
    "generation_transport_errors_total",
    "Generation requests that failed (timeout, service error, empty reply)",
    ["kind"],
)

CHECKLIST_VIOLATIONS = Counter(
    "checklist_violations_total",
    "Checklist items failed by generated source, per item",
    ["item"],
)

ARTIFACTS = Counter(
    "artifacts_total",
    "Artifacts finalized, by verdict",
    ["kind", "verdict"],
)

TOKENS_USED = Counter(
    "tokens_used_total",
    "Total tokens consumed across all generation calls",
)

PAGES_CRAWLED = Counter(
    "pages_crawled_total",
    "Pages captured by the site walker",
)

PAGE_FAILURES = Counter(
    "page_failures_total",
    "Pages skipped because they failed to load",
)

# Histograms
STAGE_LATENCY = Histogram(
    "stage_latency_seconds",
    "Time spent in each pipeline stage",
    ["stage"],
    buckets=[1, 5, 10, 30, 60, 120, 300, 600],
)

GENERATION_LATENCY = Histogram(
    "generation_latency_seconds",
    "Time spent in each generation request",
    ["kind"],
    buckets=[0.5, 1, 2, 5, 10, 30, 60, 120],
)

COST_PER_RUN = Histogram(
    "cost_per_run_usd",
    "Cost distribution per pipeline run in USD",
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 5.0],
)

RUN_DURATION = Histogram(
    "run_duration_seconds",
    "End-to-end pipeline latency",
    buckets=[30, 60, 120, 300, 600, 1200, 1800],
)


def start_metrics_server(port: int = 9090) -> None:
    """Start Prometheus metrics endpoint on /metrics. Port 0 disables it."""
    if not port:
        return
    try:
        start_http_server(port)
        logger.info(f"[metrics] Prometheus metrics available at http://localhost:{port}/metrics")
    except OSError as e:
        logger.warning(f"[metrics] Could not start metrics server: {e}")
