"""Prometheus metrics definitions and helpers."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests processed",
    ("method", "route", "status"),
)

REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ("method", "route"),
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

LOGIN_COUNTER = Counter(
    "feednet_logins_total",
    "Number of successful sign-in events",
)

ERROR_COUNTER = Counter(
    "feednet_internal_errors_total",
    "Number of requests ending in internal server error responses",
    ("method", "route"),
)

DONATION_COUNTER = Counter(
    "feednet_donations_total",
    "Donations recorded",
)

DONATED_UNITS = Counter(
    "feednet_donated_units_total",
    "Units of food pledged across all recorded donations",
)

NEED_DECREMENT_FAILURES = Counter(
    "feednet_need_decrement_failures_total",
    "Need counter decrements that exhausted their retries",
)

NEED_RESETS = Counter(
    "feednet_need_resets_total",
    "Completed resets of every school's food need",
)

ACCOUNT_DELETIONS = Counter(
    "feednet_account_deletions_total",
    "Account deletions by outcome",
    ("outcome",),
)


def observe_request(
    method: str,
    route: str,
    status_code: int,
    duration_seconds: float,
) -> None:
    """Record metrics for a completed HTTP request."""

    safe_route = route or "unknown"
    safe_method = method or "UNKNOWN"
    observed_duration = duration_seconds if duration_seconds >= 0 else 0

    REQUEST_COUNT.labels(
        method=safe_method,
        route=safe_route,
        status=str(status_code),
    ).inc()
    REQUEST_LATENCY.labels(method=safe_method, route=safe_route).observe(
        observed_duration
    )

    if status_code >= 500:
        ERROR_COUNTER.labels(method=safe_method, route=safe_route).inc()


def increment_login() -> None:
    LOGIN_COUNTER.inc()


def record_donation(quantity: int) -> None:
    """Count a recorded donation and its pledged units."""

    DONATION_COUNTER.inc()
    DONATED_UNITS.inc(quantity)


def record_decrement_failure() -> None:
    NEED_DECREMENT_FAILURES.inc()


def record_need_reset() -> None:
    NEED_RESETS.inc()


def record_account_deletion(outcome: str) -> None:
    ACCOUNT_DELETIONS.labels(outcome=outcome).inc()
