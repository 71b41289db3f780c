"""Prometheus metrics for the registration endpoint."""

from __future__ import annotations

from prometheus_client import Counter

REGISTRATIONS = Counter(
    "user_registrations",
    "Registration attempts by outcome.",
    ["outcome"],
)
