"""Prometheus metrics for account aggregation, record store health and assistant usage"""

from typing import Iterable
from prometheus_client import Counter, Histogram

from ecollect_gateway.domain.models import Account
from ecollect_gateway.domain.risk import determine_risk_level

# Aggregation metrics
accounts_aggregated_counter = Counter(
    "ecollect_accounts_aggregated_total",
    "Accounts produced by aggregation passes",
    ["source"],  # notes | sms | both
)

risk_level_counter = Counter(
    "ecollect_account_risk_total",
    "Accounts served by risk tier",
    ["level"],  # LOW | HIGH | CRITICAL
)

aggregation_duration_histogram = Histogram(
    "ecollect_aggregation_duration_seconds",
    "Time to fetch and aggregate the account list",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

# Record store metrics
record_store_failures_counter = Counter(
    "record_store_failures_total",
    "Failed record store reads",
    ["table"],  # notehis | sms_logs
)

# Assistant metrics
llm_latency_histogram = Histogram(
    "llm_completion_latency_seconds",
    "Assistant completion response time",
    buckets=[0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0],
)

llm_failure_counter = Counter(
    "llm_completion_failures_total",
    "Failed assistant completions",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_accounts(accounts: Iterable[Account]) -> None:
    """Record source and risk distribution of an aggregation pass"""
    for account in accounts:
        accounts_aggregated_counter.labels(source=account.source.value).inc()
        risk_level_counter.labels(level=determine_risk_level(account.dpd, account.status).value).inc()
