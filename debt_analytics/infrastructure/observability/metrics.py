"""Prometheus metrics for report volume, failures, projections and ledger latency"""

from prometheus_client import Counter, Histogram

from debt_analytics.domain.models import AccountAnalytics

# Report metrics
report_counter = Counter(
    "debt_report_total",
    "Analytics reports generated",
    ["report"],  # account_summary | dashboard_overview | progress_summary | ...
)

report_failures_counter = Counter(
    "debt_report_failures_total",
    "Reports that could not be generated",
    ["reason"],  # not_found | invalid_ledger | ledger_unavailable | unexpected
)

interest_model_failures_counter = Counter(
    "debt_interest_model_failures_total",
    "Accounts whose interest savings could not be computed",
)

projection_outcome_counter = Counter(
    "debt_projection_outcome_total",
    "Debt-free date projection outcomes",
    ["outcome"],  # no_trend | too_far | projected
)

# Ledger service metrics
ledger_fetch_latency_histogram = Histogram(
    "debt_ledger_fetch_latency_seconds",
    "Ledger service response time",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_report(report: str, analytics: list[AccountAnalytics]) -> None:
    """Record one generated report and the per-account outcomes inside it"""
    report_counter.labels(report=report).inc()

    for item in analytics:
        projection_outcome_counter.labels(outcome=item.projection_outcome.value).inc()
        if item.interest_saved is None:
            interest_model_failures_counter.inc()
