"""Prometheus metrics for Plaid request latency, failures and outcomes"""

from prometheus_client import Counter, Histogram

from plaid_client.domain.models import Challenge, Failure, Outcome

request_latency_histogram = Histogram(
    "plaid_request_latency_seconds",
    "Plaid API response time",
    ["method", "endpoint"],
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

transport_failure_counter = Counter(
    "plaid_transport_failures_total",
    "Plaid calls that failed before a response body was read",
    ["endpoint", "kind"],  # serialization | network | timeout | body_read
)

outcome_counter = Counter(
    "plaid_outcomes_total",
    "Decoded Plaid call outcomes",
    ["endpoint", "outcome"],  # success | challenge | failure
)

mfa_challenge_counter = Counter(
    "plaid_mfa_challenges_total",
    "MFA challenges received by type",
    ["type"],
)


def record_outcome(endpoint: str, outcome: Outcome) -> None:
    """Count an outcome; challenges are also bucketed by MFA type"""
    if isinstance(outcome, Challenge):
        label = "challenge"
        mfa_challenge_counter.labels(type=outcome.type or "unknown").inc()
    elif isinstance(outcome, Failure):
        label = "failure"
    else:
        label = "success"

    outcome_counter.labels(endpoint=endpoint, outcome=label).inc()
