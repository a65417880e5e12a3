"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Reservation metrics
reservation_attempts = Counter(
    'reservation_attempts_total',
    'Reservation creation attempts',
    ['result']  # created, slot_taken, date_unavailable, venue_closed, error
)

reservation_latency = Histogram(
    'reservation_latency_seconds',
    'Reservation creation latency',
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

transition_attempts = Counter(
    'reservation_transitions_total',
    'Reservation status transition attempts',
    ['action', 'result']  # applied, invalid, conflict, unauthorized
)

# Availability calendar
availability_updates = Counter(
    'unavailable_date_updates_total',
    'Blackout date set replacements',
    ['result']  # replaced, invalid, unauthorized
)

# Storage metrics
storage_errors = Counter(
    'storage_errors_total',
    'Database errors translated into domain errors',
    ['operation', 'kind']  # kind: unavailable, conflict
)

slot_integrity_violations = Counter(
    'slot_integrity_violations_total',
    'Slots found with more than one holding reservation'
)

# Cache metrics
cache_operations = Counter(
    'cache_operations_total',
    'Cache operations',
    ['operation', 'result']  # get/set, hit/miss
)


def metrics_endpoint() -> Response:
    """
    Prometheus metrics endpoint.

    Usage:
        @app.get("/metrics")
        def metrics():
            return metrics_endpoint()
    """
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_reservation_attempt(result: str):
    """Record reservation attempt. Result: created, slot_taken, date_unavailable, venue_closed, error"""
    reservation_attempts.labels(result=result).inc()


def record_transition(action: str, result: str):
    """Record transition attempt. Result: applied, invalid, conflict, unauthorized"""
    transition_attempts.labels(action=action, result=result).inc()


def record_availability_update(result: str):
    availability_updates.labels(result=result).inc()


def record_storage_error(operation: str, kind: str):
    storage_errors.labels(operation=operation, kind=kind).inc()


def record_cache_operation(operation: str, hit: bool):
    """Record cache operation."""
    result = "hit" if hit else "miss"
    cache_operations.labels(operation=operation, result=result).inc()
