"""Prometheus metrics for monitoring verification rates, corrections, and solver health"""

from prometheus_client import Counter, Histogram

from rate_truth.domain.models import OfferAnalysis, SolverStatus

# Analysis metrics
analysis_counter = Counter(
    "rate_truth_analysis_total",
    "Total offer analyses",
    ["method"],  # ESTIMATE | EXACT
)

correction_counter = Counter(
    "rate_truth_corrections_total",
    "Analyses where the exact APR materially corrected the AI estimate",
)

warning_counter = Counter(
    "rate_truth_warnings_total",
    "Engine warnings emitted",
    ["code"],
)

final_apr_histogram = Histogram(
    "rate_truth_final_apr_percent",
    "Final APR reported to clients",
    buckets=[5, 10, 24, 36, 60, 100, 200, 500, 1000],
)

# Solver metrics
solver_status_counter = Counter(
    "rate_truth_solver_runs_total",
    "IRR solver runs by terminal status",
    ["status"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_analysis(analysis: OfferAnalysis) -> None:
    """Record analysis metrics for monitoring how often the estimate is overridden"""
    verification = analysis.verification
    analysis_counter.labels(method=verification.method.value).inc()

    if verification.correction_applied:
        correction_counter.inc()

    for warning in verification.warnings:
        warning_counter.labels(code=warning.code.value).inc()

    final_apr_histogram.observe(analysis.final_apr)


def record_solver_run(status: SolverStatus) -> None:
    solver_status_counter.labels(status=status.value).inc()
