"""Telemetry helpers and metrics."""

from .metrics import (
    ACCOUNT_DELETIONS,
    DONATED_UNITS,
    DONATION_COUNTER,
    ERROR_COUNTER,
    LOGIN_COUNTER,
    NEED_DECREMENT_FAILURES,
    NEED_RESETS,
    REQUEST_COUNT,
    REQUEST_LATENCY,
    increment_login,
    observe_request,
    record_account_deletion,
    record_decrement_failure,
    record_donation,
    record_need_reset,
)

__all__ = [
    "ACCOUNT_DELETIONS",
    "DONATED_UNITS",
    "DONATION_COUNTER",
    "ERROR_COUNTER",
    "LOGIN_COUNTER",
    "NEED_DECREMENT_FAILURES",
    "NEED_RESETS",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "increment_login",
    "observe_request",
    "record_account_deletion",
    "record_decrement_failure",
    "record_donation",
    "record_need_reset",
]
