"""Prometheus metrics for commission calculations and month recalculations"""

from prometheus_client import Counter, Histogram

# Single-payment metrics
calculation_counter = Counter(
    "commission_calculation_total",
    "Commission calculations attempted",
    ["outcome"],  # saved | lookup_failed | invalid_assignment | persistence_failed
)

rebill_fallback_counter = Counter(
    "commission_rebill_parent_missing_total",
    "Rebills priced on their own tier because the parent had no stored calculation",
)

# Batch metrics
recalculation_counter = Counter(
    "commission_recalculation_total",
    "Month recalculations run",
    ["outcome"],  # success | partial_failure | cancelled
)

recalculation_duration_histogram = Histogram(
    "commission_recalculation_duration_seconds",
    "Time to recalculate every payment in a month",
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_recalculation(failed: int, cancelled: bool) -> None:
    """Record month recalculation outcome"""
    if cancelled:
        outcome = "cancelled"
    elif failed:
        outcome = "partial_failure"
    else:
        outcome = "success"
    recalculation_counter.labels(outcome=outcome).inc()
