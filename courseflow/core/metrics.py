"""Application metrics (Prometheus client).

Every metric the service exposes is declared here; the modules that own
the behavior import the metric and increment it at the point of action.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by the MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Progress engine metrics
# ---------------------------------------------------------------------------

RECOMPUTATIONS = Counter(
    "progress_recomputations_total",
    "Enrollment recomputations by trigger",
    ["trigger"],  # completion|submission|material_added|material_deleted|manual
)

RECOMPUTE_FAILURES = Counter(
    "progress_bulk_recompute_failures_total",
    "Enrollments that failed to recompute during a course-wide fan-out",
)

ENROLLMENTS_COMPLETED = Counter(
    "enrollments_completed_total",
    "Enrollments that transitioned ACTIVE -> COMPLETED",
)

SUBMISSIONS = Counter(
    "assignment_submissions_total",
    "Assignment submission attempts by outcome",
    ["outcome"],  # accepted|duplicate|late|forbidden
)

SESSION_REJECTIONS = Counter(
    "session_gate_rejections_total",
    "Student requests rejected by the single-session gate",
    ["reason"],  # missing_claim|no_active_session|mismatch
)
