"""Prometheus metrics for the EMI billing service.

Metrics are organized into two categories:

Business Metrics (for Product/Finance):
- emi_payments_applied_total: Installment payments applied to plans
- emi_installments_settled_total: Installments marked paid
- emi_allocation_rejected_total: Tendered amounts rejected by exact-match
- emi_plan_transitions_total: Plan status transitions by from/to
- emi_course_orders_total: Course purchase orders by payment type

Technical Metrics (for Engineering/SRE):
- emi_sweep_runs_total / emi_sweep_plans_total: Sweeper runs and per-plan results
- emi_sweep_latency_seconds: Sweep duration
- emi_gateway_requests_total / emi_gateway_failures_total: Gateway calls
- emi_gateway_latency_seconds: Gateway latency
- emi_notifications_total: Notifications by type/status
- emi_http_requests_total: HTTP requests by endpoint/status
"""

import time
from contextlib import contextmanager
from typing import Generator

from prometheus_client import Counter, Histogram, REGISTRY, generate_latest
from prometheus_client.exposition import CONTENT_TYPE_LATEST


# =============================================================================
# Business Metrics (Product/Finance dashboards)
# =============================================================================

payments_applied_total = Counter(
    "emi_payments_applied_total",
    "Total number of installment payments applied to plans",
    ["source"],  # overdue, monthly
)

installments_settled_total = Counter(
    "emi_installments_settled_total",
    "Total number of installments marked paid",
)

allocation_rejected_total = Counter(
    "emi_allocation_rejected_total",
    "Total number of tendered amounts rejected by the exact-match policy",
)

plan_transitions_total = Counter(
    "emi_plan_transitions_total",
    "Plan status transitions",
    ["from_status", "to_status"],
)

course_orders_total = Counter(
    "emi_course_orders_total",
    "Course purchase orders created",
    ["payment_type"],  # full, emi
)


# =============================================================================
# Technical Metrics (Engineering/SRE dashboards)
# =============================================================================

sweep_runs_total = Counter(
    "emi_sweep_runs_total",
    "Total number of batch sweeps",
    ["job"],  # overdue, reminders, repair
)

sweep_plans_total = Counter(
    "emi_sweep_plans_total",
    "Plans processed by the overdue sweep",
    ["result"],  # locked, unlocked, unchanged, failed
)

sweep_latency = Histogram(
    "emi_sweep_latency_seconds",
    "Batch sweep duration in seconds",
    ["job"],
    buckets=[0.1, 0.5, 1.0, 5.0, 15.0, 60.0, 300.0],
)

gateway_latency = Histogram(
    "emi_gateway_latency_seconds",
    "Payment gateway call latency in seconds",
    ["operation"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

gateway_requests_total = Counter(
    "emi_gateway_requests_total",
    "Total number of payment gateway requests",
    ["operation", "status"],  # success, failure
)

gateway_failures_total = Counter(
    "emi_gateway_failures_total",
    "Total number of payment gateway failures",
    ["operation", "error_type"],  # timeout, error
)

notifications_total = Counter(
    "emi_notifications_total",
    "Notifications sent by type and outcome",
    ["notification_type", "status"],  # sent, failed
)

http_requests_total = Counter(
    "emi_http_requests_total",
    "Total HTTP requests by endpoint and status",
    ["method", "endpoint", "status"],
)

http_request_latency = Histogram(
    "emi_http_request_latency_seconds",
    "HTTP request latency by endpoint",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)


# =============================================================================
# Helper Functions
# =============================================================================

def record_payment_applied(source: str, installments: int) -> None:
    """Record an installment payment applied to a plan."""
    payments_applied_total.labels(source=source).inc()
    if installments:
        installments_settled_total.inc(installments)


def record_allocation_rejected() -> None:
    """Record a tendered amount that matched no prefix sum."""
    allocation_rejected_total.inc()


def record_plan_transition(from_status: str, to_status: str) -> None:
    """Record a plan status transition."""
    plan_transitions_total.labels(from_status=from_status, to_status=to_status).inc()


def record_course_order(payment_type: str) -> None:
    """Record a course purchase order."""
    course_orders_total.labels(payment_type=payment_type).inc()


def record_sweep_plan(result: str) -> None:
    """Record the outcome for one plan within the overdue sweep."""
    sweep_plans_total.labels(result=result).inc()


@contextmanager
def track_sweep(job: str) -> Generator[None, None, None]:
    """Context manager that counts a sweep run and tracks its duration."""
    sweep_runs_total.labels(job=job).inc()
    start = time.perf_counter()
    try:
        yield
    finally:
        sweep_latency.labels(job=job).observe(time.perf_counter() - start)


@contextmanager
def track_gateway_latency(operation: str) -> Generator[None, None, None]:
    """Context manager to track payment gateway latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        duration = time.perf_counter() - start
        gateway_latency.labels(operation=operation).observe(duration)


def record_gateway_success(operation: str) -> None:
    """Record a successful gateway call."""
    gateway_requests_total.labels(operation=operation, status="success").inc()


def record_gateway_failure(operation: str, error_type: str) -> None:
    """Record a gateway failure."""
    gateway_requests_total.labels(operation=operation, status="failure").inc()
    gateway_failures_total.labels(operation=operation, error_type=error_type).inc()


def record_notification(notification_type: str, delivered: bool) -> None:
    """Record a notification attempt outcome."""
    status = "sent" if delivered else "failed"
    notifications_total.labels(notification_type=notification_type, status=status).inc()


def record_http_request(method: str, endpoint: str, status: int, duration: float) -> None:
    """Record an HTTP request."""
    http_requests_total.labels(method=method, endpoint=endpoint, status=str(status)).inc()
    http_request_latency.labels(method=method, endpoint=endpoint).observe(duration)


def get_metrics() -> bytes:
    """Get current metrics in Prometheus format."""
    return generate_latest(REGISTRY)


def get_metrics_content_type() -> str:
    """Get the content type for metrics response."""
    return CONTENT_TYPE_LATEST
