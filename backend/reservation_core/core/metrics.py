"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from fastapi import Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

# Hold metrics
hold_attempts = Counter(
    'seat_hold_attempts_total',
    'Per-seat hold acquisition attempts',
    ['result']  # created, refreshed, conflict
)

hold_releases = Counter(
    'seat_hold_releases_total',
    'Per-seat hold release attempts',
    ['result']  # released, skipped
)

# Checkout session metrics
session_operations = Counter(
    'checkout_session_operations_total',
    'Checkout session operations',
    ['operation', 'outcome']  # create/read/cancel, ok/rejected
)

# Booking metrics
booking_attempts = Counter(
    'booking_attempts_total',
    'Total booking confirmation attempts',
    ['status']  # success, conflict, error
)

booking_latency = Histogram(
    'booking_finalize_latency_seconds',
    'Booking finalize latency',
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

# Backing store metrics
store_errors = Counter(
    'kv_store_errors_total',
    'Key-value store errors surfaced as infrastructure failures',
    ['operation']
)


def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_hold_attempt(result: str):
    """Record hold attempt. Result: created, refreshed, conflict"""
    hold_attempts.labels(result=result).inc()


def record_hold_release(released: bool):
    hold_releases.labels(result="released" if released else "skipped").inc()


def record_session_operation(operation: str, ok: bool):
    session_operations.labels(operation=operation, outcome="ok" if ok else "rejected").inc()


def record_booking_attempt(status: str):
    """Record booking attempt. Status: success, conflict, error"""
    booking_attempts.labels(status=status).inc()


def record_store_error(operation: str):
    store_errors.labels(operation=operation).inc()
