"""Prometheus counters for account workflows."""

from __future__ import annotations

from prometheus_client import Counter

LOGIN_ATTEMPTS = Counter(
    "account_login_attempts",
    "Login attempts by outcome (success or the rejecting error kind).",
    ["outcome"],
)

REGISTRATIONS = Counter(
    "account_registrations",
    "Registration attempts by outcome.",
    ["outcome"],
)
